#
# Tests for read-time reconciliation of tracked identifiers
#

from unittest import TestCase
from unittest.mock import Mock

from ionosdim import (
    A_RECORD_ID,
    IP_ID,
    TXT_RECORD_ID,
    DimClientNotFound,
    DimClientRemoteError,
    DimClientResultError,
    DimClientTransportError,
    DimIdentifierDrift,
    DimIdentifierError,
    Outcome,
    Reconciler,
)

STORED = 'example.com/default/www//10.0.0.1'


class TestReconciler(TestCase):
    def setUp(self):
        self.reconciler = Reconciler(A_RECORD_ID)

    def test_unchanged(self):
        attrs = {'zone': 'example.com', 'view': 'default', 'ttl': 300}
        result = self.reconciler.reconcile(STORED, attrs)
        self.assertIs(Outcome.UNCHANGED, result.outcome)
        self.assertTrue(result.unchanged)
        self.assertEqual(STORED, result.identifier)
        self.assertEqual(STORED, result.current)
        self.assertEqual(attrs, result.attrs)
        result.raise_for_drift()

    def test_drifted(self):
        attrs = {'zone': 'example.org', 'view': 'default'}
        result = self.reconciler.reconcile(STORED, attrs)
        self.assertIs(Outcome.DRIFTED, result.outcome)
        self.assertTrue(result.drifted)
        self.assertEqual(STORED, result.identifier)
        self.assertEqual('example.org/default/www//10.0.0.1', result.current)

        with self.assertRaises(DimIdentifierDrift) as ctx:
            result.raise_for_drift()
        self.assertEqual(STORED, ctx.exception.old)
        self.assertEqual(result.current, ctx.exception.new)
        self.assertIn('ID has changed', str(ctx.exception))

    def test_idempotent(self):
        attrs = {'zone': 'example.org', 'view': 'default'}
        self.assertEqual(
            self.reconciler.reconcile(STORED, attrs),
            self.reconciler.reconcile(STORED, attrs),
        )

    def test_unreported_fields_keep_stored_values(self):
        # name, layer3domain and ip are not reported by rr_get_attrs
        attrs = {'name': 'other', 'ip': '10.9.9.9', 'layer3domain': 'x'}
        result = self.reconciler.reconcile(STORED, attrs)
        self.assertTrue(result.unchanged)

    def test_absent_fields_stay_absent(self):
        stored = 'example.com//www//10.0.0.1'
        result = self.reconciler.reconcile(
            stored, {'zone': 'example.com', 'view': 'default'}
        )
        self.assertTrue(result.unchanged)
        self.assertEqual(stored, result.current)

    def test_unexpected_attr_value(self):
        with self.assertRaises(DimClientResultError):
            self.reconciler.reconcile(STORED, {'zone': ['example.com']})

    def test_list_field(self):
        reconciler = Reconciler(TXT_RECORD_ID)
        stored = TXT_RECORD_ID.encode({'name': 'txt', 'strings': ['a,b']})
        self.assertTrue(reconciler.reconcile(stored, {}).unchanged)

    def test_malformed_stored_identifier(self):
        with self.assertRaises(DimIdentifierError):
            self.reconciler.reconcile('example.com/www', {})

    def test_gone_state(self):
        reconciler = Reconciler(
            IP_ID, status_attr='status', gone_states=('Available',)
        )
        result = reconciler.reconcile(
            'default/10.0.0.1', {'ip': '10.0.0.1', 'status': 'Available'}
        )
        self.assertIs(Outcome.NOT_FOUND, result.outcome)
        self.assertTrue(result.gone)

        result = reconciler.reconcile(
            'default/10.0.0.1', {'ip': '10.0.0.1', 'status': 'Static'}
        )
        self.assertTrue(result.unchanged)

        result = reconciler.reconcile(
            'default/10.0.0.1', {'ip': '10.0.0.2', 'status': 'Static'}
        )
        self.assertTrue(result.drifted)
        self.assertEqual('default/10.0.0.2', result.current)

    def test_unexpected_status_value(self):
        reconciler = Reconciler(
            IP_ID, status_attr='status', gone_states=('Available',)
        )
        for status in (['Static'], {'name': 'Available'}, 1):
            with self.assertRaises(DimClientResultError) as ctx:
                reconciler.reconcile(
                    'default/10.0.0.1', {'ip': '10.0.0.1', 'status': status}
                )
            self.assertIn('status', str(ctx.exception))


class TestReconcileLookup(TestCase):
    def setUp(self):
        self.reconciler = Reconciler(A_RECORD_ID)

    def test_lookup_result_reconciled(self):
        lookup = Mock(return_value={'zone': 'example.com', 'view': 'default'})
        result = self.reconciler.reconcile_lookup(STORED, lookup)
        self.assertTrue(result.unchanged)
        lookup.assert_called_once_with()

    def test_not_found_sentinel(self):
        for error in (
            DimClientNotFound('rr_get_attrs', 1, 'not found'),
            DimClientRemoteError('rr_get_attrs', 1, 'not found'),
        ):
            lookup = Mock(side_effect=error)
            result = self.reconciler.reconcile_lookup(STORED, lookup)
            self.assertIs(Outcome.NOT_FOUND, result.outcome)
            self.assertEqual(STORED, result.identifier)
            self.assertIsNone(result.attrs)
            # not found is never a drift
            result.raise_for_drift()

    def test_other_remote_errors_propagate(self):
        lookup = Mock(
            side_effect=DimClientRemoteError('rr_get_attrs', 2, 'boom')
        )
        with self.assertRaises(DimClientRemoteError):
            self.reconciler.reconcile_lookup(STORED, lookup)

    def test_transport_errors_propagate(self):
        lookup = Mock(side_effect=DimClientTransportError('down'))
        with self.assertRaises(DimClientTransportError):
            self.reconciler.reconcile_lookup(STORED, lookup)
