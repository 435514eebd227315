#
# Tests for composite identifier encoding
#

from unittest import TestCase

from ionosdim import (
    A_RECORD_ID,
    CNAME_RECORD_ID,
    IP_ID,
    TXT_RECORD_ID,
    DimIdentifierError,
    Field,
    IdentifierCodec,
)


class TestIdentifierCodec(TestCase):
    def test_scalar_fields(self):
        identifier = A_RECORD_ID.encode(
            {
                'zone': 'example.com',
                'view': '',
                'name': 'www',
                'layer3domain': '',
                'ip': '10.0.0.1',
            }
        )
        self.assertEqual('example.com//www//10.0.0.1', identifier)
        self.assertEqual(
            {
                'zone': 'example.com',
                'view': None,
                'name': 'www',
                'layer3domain': None,
                'ip': '10.0.0.1',
            },
            A_RECORD_ID.decode(identifier),
        )

    def test_missing_and_none_fields_are_empty(self):
        self.assertEqual(
            '//www//10.0.0.1',
            A_RECORD_ID.encode({'name': 'www', 'view': None, 'ip': '10.0.0.1'}),
        )

    def test_extra_values_ignored(self):
        self.assertEqual(
            'default/10.0.0.1',
            IP_ID.encode(
                {'layer3domain': 'default', 'ip': '10.0.0.1', 'status': 'x'}
            ),
        )

    def test_list_field_escaping(self):
        identifier = TXT_RECORD_ID.encode(
            {'zone': 'example.com', 'name': 'txt', 'strings': ['a/b', 'c,d']}
        )
        self.assertEqual('example.com//txt/a%2Fb,c%2Cd', identifier)
        self.assertEqual(
            ['a/b', 'c,d'], TXT_RECORD_ID.decode(identifier)['strings']
        )

    def test_list_field_form_escaping(self):
        identifier = TXT_RECORD_ID.encode(
            {'name': 'txt', 'strings': ['v=spf1 -all', '100%', 'a+b']}
        )
        self.assertEqual('//txt/v%3Dspf1+-all,100%25,a%2Bb', identifier)
        self.assertEqual(
            ['v=spf1 -all', '100%', 'a+b'],
            TXT_RECORD_ID.decode(identifier)['strings'],
        )

    def test_round_trip(self):
        cases = [
            {'zone': None, 'view': None, 'name': 'n', 'strings': ['x']},
            {
                'zone': 'example.com',
                'view': 'internal',
                'name': 'grüße',
                'strings': ['grüße, welt/ünïcødé', '日本語', '/,%+ '],
            },
            {
                'zone': 'example.com',
                'view': None,
                'name': '_dmarc',
                'strings': ['', 'after-empty'],
            },
        ]
        for values in cases:
            identifier = TXT_RECORD_ID.encode(values)
            self.assertEqual(values, TXT_RECORD_ID.decode(identifier))
            self.assertEqual(
                identifier,
                TXT_RECORD_ID.encode(TXT_RECORD_ID.decode(identifier)),
            )

    def test_empty_list_is_absent(self):
        identifier = TXT_RECORD_ID.encode({'name': 'txt', 'strings': []})
        self.assertEqual('//txt/', identifier)
        self.assertIsNone(TXT_RECORD_ID.decode(identifier)['strings'])

    def test_arity(self):
        self.assertEqual(5, A_RECORD_ID.arity)
        self.assertEqual(
            'layer3domain/zone/view/name/cname', CNAME_RECORD_ID.layout
        )
        for identifier in (
            '',
            'example.com/www',
            'example.com//www/10.0.0.1',
            'example.com//www//10.0.0.1/extra',
            'example.com//www//10.0.0.0/24',
        ):
            with self.assertRaises(DimIdentifierError) as ctx:
                A_RECORD_ID.decode(identifier)
            self.assertIn('not in expected format', str(ctx.exception))
            self.assertIn('zone/view/name/layer3domain/ip', str(ctx.exception))

    def test_decode_not_a_string(self):
        with self.assertRaises(DimIdentifierError):
            IP_ID.decode(None)

    def test_bad_escapes(self):
        for identifier in ('//txt/a%zz', '//txt/ok,50%', '//txt/%FF'):
            with self.assertRaises(DimIdentifierError) as ctx:
                TXT_RECORD_ID.decode(identifier)
            self.assertIn('strings', str(ctx.exception))

    def test_scalar_with_separator_rejected(self):
        with self.assertRaises(DimIdentifierError) as ctx:
            IP_ID.encode({'layer3domain': 'default', 'ip': '10.0.0.0/24'})
        self.assertIn('must not contain "/"', str(ctx.exception))

    def test_wrong_types_rejected(self):
        with self.assertRaises(DimIdentifierError):
            IP_ID.encode({'ip': 10})
        with self.assertRaises(DimIdentifierError):
            TXT_RECORD_ID.encode({'name': 'txt', 'strings': 'not-a-list'})
        with self.assertRaises(DimIdentifierError):
            TXT_RECORD_ID.encode({'name': 'txt', 'strings': ['a', 1]})

    def test_custom_codec(self):
        codec = IdentifierCodec(
            'PTR record', (Field('zone'), Field('targets', multi=True))
        )
        self.assertEqual(
            "IdentifierCodec('PTR record', 'zone/targets')", repr(codec)
        )
        identifier = codec.encode(
            {'zone': 'in-addr.arpa', 'targets': ['a.', 'b.']}
        )
        self.assertEqual('in-addr.arpa/a.,b.', identifier)
        self.assertEqual(
            {'zone': 'in-addr.arpa', 'targets': ['a.', 'b.']},
            codec.decode(identifier),
        )
