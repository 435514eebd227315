#
#
#

"""Composite identifiers for tracked DIM entities.

A tracked entity (a record, an allocated IP) is named by several fields,
e.g. zone, view, name, layer3domain and value. `IdentifierCodec` packs such a
tuple into a single `/` separated string and back. List valued fields have
every element form-escaped and are joined with `,` so they occupy a single
position:

    >>> TXT_RECORD_ID.encode({'zone': 'example.com', 'name': 'www',
    ...                       'strings': ['a/b', 'c,d']})
    'example.com//www/a%2Fb,c%2Cd'

Empty segments stand for absent fields and decode to `None`.
"""

import re
from typing import Any, Dict, Iterable, Mapping, NamedTuple, Optional
from urllib.parse import quote_plus, unquote_plus

from .exceptions import DimIdentifierError


class Field(NamedTuple):
    name: str
    multi: bool = False
    # remote attribute reporting the field's current value, if any
    attr: Optional[str] = None


class IdentifierCodec:
    SEPARATOR = '/'
    LIST_SEPARATOR = ','

    _BAD_ESCAPE = re.compile(r'%(?![0-9A-Fa-f]{2})')

    def __init__(self, kind: str, fields: Iterable[Field]):
        self.kind = kind
        self.fields = tuple(fields)

    def __repr__(self):
        return f'IdentifierCodec({self.kind!r}, {self.layout!r})'

    @property
    def arity(self) -> int:
        return len(self.fields)

    @property
    def layout(self) -> str:
        return self.SEPARATOR.join(f.name for f in self.fields)

    def encode(self, values: Mapping[str, Any]) -> str:
        parts = []
        for field in self.fields:
            value = values.get(field.name)
            if field.multi:
                parts.append(self._encode_list(field, value))
            else:
                parts.append(self._encode_scalar(field, value))
        return self.SEPARATOR.join(parts)

    def decode(self, identifier: str) -> Dict[str, Any]:
        if not isinstance(identifier, str):
            raise DimIdentifierError(
                f'{self.kind} ID must be a string, got '
                f'{type(identifier).__name__}'
            )
        parts = identifier.split(self.SEPARATOR)
        if len(parts) != self.arity:
            raise DimIdentifierError(
                f'{self.kind} ID is not in expected format '
                f'"{self.layout}", got {identifier!r} with {len(parts)} '
                f'parts instead of {self.arity}'
            )

        ret = {}
        for field, part in zip(self.fields, parts):
            if not part:
                ret[field.name] = None
            elif field.multi:
                ret[field.name] = self._decode_list(field, part, identifier)
            else:
                ret[field.name] = part
        return ret

    def _encode_scalar(self, field, value):
        if value is None:
            return ''
        if not isinstance(value, str):
            raise DimIdentifierError(
                f'{self.kind} ID field {field.name} must be a string, got '
                f'{type(value).__name__}'
            )
        if self.SEPARATOR in value:
            raise DimIdentifierError(
                f'{self.kind} ID field {field.name} must not contain '
                f'"{self.SEPARATOR}", got {value!r}'
            )
        return value

    def _encode_list(self, field, values):
        if values is None:
            return ''
        if isinstance(values, str) or not all(
            isinstance(v, str) for v in values
        ):
            raise DimIdentifierError(
                f'{self.kind} ID field {field.name} must be a list of '
                f'strings, got {values!r}'
            )
        return self.LIST_SEPARATOR.join(quote_plus(v, safe='') for v in values)

    def _decode_list(self, field, part, identifier):
        ret = []
        for escaped in part.split(self.LIST_SEPARATOR):
            if self._BAD_ESCAPE.search(escaped):
                raise DimIdentifierError(
                    f'{self.kind} ID is not in expected format, {field.name} '
                    f'part {escaped!r} of {identifier!r} is not URL encoded'
                )
            try:
                ret.append(unquote_plus(escaped, errors='strict'))
            except UnicodeDecodeError as e:
                raise DimIdentifierError(
                    f'{self.kind} ID is not in expected format, {field.name} '
                    f'part {escaped!r} of {identifier!r} is not UTF-8'
                ) from e
        return ret


A_RECORD_ID = IdentifierCodec(
    'A record',
    (
        Field('zone', attr='zone'),
        Field('view', attr='view'),
        Field('name'),
        Field('layer3domain'),
        Field('ip'),
    ),
)

CNAME_RECORD_ID = IdentifierCodec(
    'CNAME record',
    (
        Field('layer3domain'),
        Field('zone', attr='zone'),
        Field('view', attr='view'),
        Field('name'),
        Field('cname'),
    ),
)

TXT_RECORD_ID = IdentifierCodec(
    'TXT record',
    (
        Field('zone', attr='zone'),
        Field('view', attr='view'),
        Field('name'),
        Field('strings', multi=True),
    ),
)

IP_ID = IdentifierCodec('IP', (Field('layer3domain'), Field('ip', attr='ip')))
