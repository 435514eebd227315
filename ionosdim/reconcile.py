#
#
#

"""Read-time reconciliation of tracked entities.

After a lookup keyed by a decoded identifier, the identifier is computed
again from what DIM actually returned and compared with the stored one.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Optional

from .exceptions import (
    DimClientRemoteError,
    DimClientResultError,
    DimIdentifierDrift,
)
from .ids import IdentifierCodec


class Outcome(Enum):
    UNCHANGED = 'unchanged'
    DRIFTED = 'drifted'
    NOT_FOUND = 'not_found'


@dataclass(frozen=True)
class Reconciliation:
    outcome: Outcome
    identifier: str
    current: Optional[str] = None
    attrs: Optional[Dict[str, Any]] = None

    @property
    def unchanged(self) -> bool:
        return self.outcome is Outcome.UNCHANGED

    @property
    def drifted(self) -> bool:
        return self.outcome is Outcome.DRIFTED

    @property
    def gone(self) -> bool:
        return self.outcome is Outcome.NOT_FOUND

    def raise_for_drift(self) -> None:
        if self.drifted:
            raise DimIdentifierDrift(self.identifier, self.current)


class Reconciler:
    def __init__(
        self,
        codec: IdentifierCodec,
        status_attr: Optional[str] = None,
        gone_states: Iterable[str] = (),
    ):
        self.log = logging.getLogger(f'Reconciler[{codec.kind}]')
        self.codec = codec
        self.status_attr = status_attr
        self.gone_states = frozenset(gone_states)

    def recompute(self, stored: str, attrs: Dict[str, Any]) -> str:
        values = self.codec.decode(stored)
        for field in self.codec.fields:
            # fields the caller never pinned were chosen by DIM
            if field.attr is None or values[field.name] is None:
                continue
            if field.attr not in attrs:
                continue
            value = attrs[field.attr]
            if field.multi:
                ok = isinstance(value, list) and all(
                    isinstance(v, str) for v in value
                )
            else:
                ok = isinstance(value, str)
            if not ok:
                raise DimClientResultError(
                    f'{self.codec.kind} attribute {field.attr} has unexpected '
                    f'value {value!r}'
                )
            values[field.name] = value
        return self.codec.encode(values)

    def reconcile(self, stored: str, attrs: Dict[str, Any]) -> Reconciliation:
        if self.status_attr is not None:
            status = attrs.get(self.status_attr)
            if status is not None and not isinstance(status, str):
                raise DimClientResultError(
                    f'{self.codec.kind} attribute {self.status_attr} has '
                    f'unexpected value {status!r}'
                )
            if status in self.gone_states:
                self.log.debug(
                    'reconcile: id=%s, %s=%s, gone',
                    stored,
                    self.status_attr,
                    status,
                )
                return Reconciliation(Outcome.NOT_FOUND, stored, attrs=attrs)

        current = self.recompute(stored, attrs)
        if current != stored:
            self.log.warning(
                'reconcile: ID has changed, old=%s, new=%s', stored, current
            )
            return Reconciliation(Outcome.DRIFTED, stored, current, attrs)
        return Reconciliation(Outcome.UNCHANGED, stored, current, attrs)

    def reconcile_lookup(
        self, stored: str, lookup: Callable[[], Dict[str, Any]]
    ) -> Reconciliation:
        try:
            attrs = lookup()
        except DimClientRemoteError as e:
            if not e.not_found:
                raise
            self.log.debug(
                'reconcile_lookup: id=%s not found (has been removed?)', stored
            )
            return Reconciliation(Outcome.NOT_FOUND, stored)
        return self.reconcile(stored, attrs)
