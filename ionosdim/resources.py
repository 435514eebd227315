#
#
#

"""Create/read/update/delete cycles of tracked DIM entities.

Each entity kind mints a composite identifier when it is created and takes
that identifier for every later operation. Reads reconcile the identifier
against what DIM returns, see `ionosdim.reconcile`.
"""

import logging
from typing import Any, Dict, List, Optional, Protocol, Tuple

from .clients import DimCaller
from .exceptions import (
    DimClientNotFound,
    DimIdentifierError,
    DimResourceError,
)
from .ids import (
    A_RECORD_ID,
    CNAME_RECORD_ID,
    IP_ID,
    TXT_RECORD_ID,
    IdentifierCodec,
)
from .reconcile import Reconciler, Reconciliation
from .results import expect_int, expect_mapping, expect_str


class TrackedEntity(Protocol):
    """Protocol of a tracked entity kind.

    Implementations are bound to a `DimClient` and stateless otherwise, so a
    single instance can serve concurrent operations on different entities.
    """

    codec: IdentifierCodec

    def read(self, identifier: str, cancel=None) -> Reconciliation:
        """Look the entity up and reconcile its identifier.

        Args:
            identifier: Identifier returned by create
            cancel: Optional CancelToken

        Returns:
            Reconciliation; NOT_FOUND when DIM no longer knows the entity
        """
        ...

    def delete(self, identifier: str, cancel=None) -> bool:
        """Delete the entity.

        Returns:
            False if DIM reported the entity as already gone
        """
        ...


class _Record:
    """Shared cycle of resource records (rr_* methods).

    Subclasses set the record TYPE, the codec and the VALUE field naming
    both the identifier field and the rr_* argument holding the record data.
    """

    TYPE = None
    VALUE = None
    SENDS_LAYER3DOMAIN = True
    codec = None

    def __init__(self, client: DimCaller):
        self.log = logging.getLogger(self.__class__.__name__)
        self._client = client
        self._reconciler = Reconciler(self.codec)

    def _call(self, action, method, *params, cancel=None):
        self.log.debug('%s: %s call, args=%s', action, method, params)
        result = self._client.raw_call(method, params, cancel=cancel)
        self.log.debug('%s: %s response=%s', action, method, result)
        return result

    @staticmethod
    def fqdn(name, zone=None):
        if name.endswith('.') or not zone:
            return name
        return f'{name}.{zone}.'

    def _decode(self, identifier):
        values = self.codec.decode(identifier)
        if values['name'] is None or values[self.VALUE] is None:
            raise DimIdentifierError(
                f'{self.codec.kind} ID {identifier!r} has no name or '
                f'{self.VALUE}'
            )
        return values

    def _lookup_args(self, values):
        # rr_get_attrs and rr_set_attrs take no zone, so name must be a fqdn
        args = {
            'type': self.TYPE,
            'name': self.fqdn(values['name'], values.get('zone')),
            self.VALUE: values[self.VALUE],
        }
        if values.get('view'):
            args['view'] = values['view']
        if self.SENDS_LAYER3DOMAIN and values.get('layer3domain'):
            args['layer3domain'] = values['layer3domain']
        return args

    def _record_args(self, values):
        args = {
            'type': self.TYPE,
            'name': values['name'],
            self.VALUE: values[self.VALUE],
        }
        for key in ('zone', 'view', 'layer3domain'):
            if key == 'layer3domain' and not self.SENDS_LAYER3DOMAIN:
                continue
            if values.get(key):
                args[key] = values[key]
        return args

    def _check_create(self, values, cancel):
        pass

    def _create(self, values, ttl, comment, cancel):
        # rejects unencodable fields before anything is created
        self.codec.encode(values)
        self._check_create(values, cancel)

        args = self._record_args(values)
        if comment is not None:
            args['comment'] = comment
        if ttl is not None:
            args['ttl'] = ttl
        self._call('create', 'rr_create', args, cancel=cancel)
        self.log.info('create: RR has been created, args=%s', args)

        attrs = expect_mapping(
            'rr_get_attrs',
            self._call(
                'create',
                'rr_get_attrs',
                self._lookup_args(values),
                cancel=cancel,
            ),
        )
        identifier = self.codec.encode(self._read_back(values, attrs))
        self.log.debug('create: id=%s', identifier)
        return identifier, attrs

    def _read_back(self, values, attrs):
        return values

    def read(self, identifier: str, cancel=None) -> Reconciliation:
        args = self._lookup_args(self._decode(identifier))
        self.log.info('read: will read RR %s', args)

        def lookup():
            return expect_mapping(
                'rr_get_attrs',
                self._call('read', 'rr_get_attrs', args, cancel=cancel),
            )

        return self._reconciler.reconcile_lookup(identifier, lookup)

    def update(
        self,
        identifier: str,
        ttl: Optional[int] = None,
        comment: Optional[str] = None,
        cancel=None,
    ) -> Dict[str, Any]:
        args = self._lookup_args(self._decode(identifier))
        if ttl is not None:
            args['ttl'] = ttl
        if comment is not None:
            args['comment'] = comment
        self.log.info('update: will update RR %s', args)
        result = self._call('update', 'rr_set_attrs', args, cancel=cancel)
        if result is None:
            return {}
        return expect_mapping('rr_set_attrs', result)

    def delete(self, identifier: str, cancel=None) -> bool:
        args = self._record_args(self._decode(identifier))
        args['references'] = 'warn'
        try:
            self._call('delete', 'rr_delete', args, cancel=cancel)
        except DimClientNotFound:
            self.log.warning('delete: RR %s was already gone', identifier)
            return False
        self.log.info('delete: RR has been deleted, id=%s', identifier)
        return True


class ARecord(_Record):
    TYPE = 'A'
    VALUE = 'ip'
    ALLOCATED = 'Static'
    codec = A_RECORD_ID

    def create(
        self,
        name: str,
        ip: str,
        zone: Optional[str] = None,
        view: Optional[str] = None,
        layer3domain: Optional[str] = None,
        ttl: Optional[int] = None,
        comment: Optional[str] = None,
        cancel=None,
    ) -> Tuple[str, Dict[str, Any]]:
        values = {
            'zone': zone,
            'view': view,
            'name': name,
            'layer3domain': layer3domain,
            'ip': ip,
        }
        return self._create(values, ttl, comment, cancel)

    def _check_create(self, values, cancel):
        options = {'host': True}
        if values.get('layer3domain'):
            options['layer3domain'] = values['layer3domain']
        attrs = expect_mapping(
            'ipblock_get_attrs',
            self._call(
                'create',
                'ipblock_get_attrs',
                values['ip'],
                options,
                cancel=cancel,
            ),
        )
        if attrs.get('status') != self.ALLOCATED:
            raise DimResourceError(
                f'IP address {values["ip"]} is not allocated (not marked as '
                f'{self.ALLOCATED})'
            )


class CnameRecord(_Record):
    TYPE = 'CNAME'
    VALUE = 'cname'
    # layer3domain only takes part in the identifier
    SENDS_LAYER3DOMAIN = False
    codec = CNAME_RECORD_ID

    def create(
        self,
        name: str,
        cname: str,
        zone: Optional[str] = None,
        view: Optional[str] = None,
        layer3domain: Optional[str] = None,
        ttl: Optional[int] = None,
        comment: Optional[str] = None,
        cancel=None,
    ) -> Tuple[str, Dict[str, Any]]:
        values = {
            'layer3domain': layer3domain,
            'zone': zone,
            'view': view,
            'name': name,
            'cname': cname,
        }
        return self._create(values, ttl, comment, cancel)

    def _read_back(self, values, attrs):
        # zone and view as DIM resolved them, e.g. a zone derived from name
        values = dict(values)
        for key in ('zone', 'view'):
            if attrs.get(key) is not None:
                values[key] = expect_str('rr_get_attrs', attrs[key])
        return values


class TxtRecord(_Record):
    TYPE = 'TXT'
    VALUE = 'strings'
    codec = TXT_RECORD_ID

    def create(
        self,
        name: str,
        strings: List[str],
        zone: Optional[str] = None,
        view: Optional[str] = None,
        ttl: Optional[int] = None,
        comment: Optional[str] = None,
        cancel=None,
    ) -> Tuple[str, Dict[str, Any]]:
        values = {
            'zone': zone,
            'view': view,
            'name': name,
            'strings': list(strings),
        }
        return self._create(values, ttl, comment, cancel)


class IpAddress:
    """An IP address marked as allocated (Static) in DIM."""

    ALLOCATED = 'Static'
    RELEASED = 'Available'
    codec = IP_ID

    def __init__(self, client: DimCaller):
        self.log = logging.getLogger('IpAddress')
        self._client = client
        self._reconciler = Reconciler(
            IP_ID, status_attr='status', gone_states=(self.RELEASED,)
        )

    def _call(self, action, method, *params, cancel=None):
        self.log.debug('%s: %s call, args=%s', action, method, params)
        result = self._client.raw_call(method, params, cancel=cancel)
        self.log.debug('%s: %s response=%s', action, method, result)
        return result

    def _decode(self, identifier):
        values = IP_ID.decode(identifier)
        if values['ip'] is None:
            raise DimIdentifierError(f'IP ID {identifier!r} has no ip')
        return values

    @staticmethod
    def _options(layer3domain):
        return {'layer3domain': layer3domain} if layer3domain else {}

    def create(
        self,
        cidr: str,
        ip: Optional[str] = None,
        layer3domain: Optional[str] = None,
        cancel=None,
    ) -> Tuple[str, Dict[str, Any]]:
        """Allocate an address from `cidr`, or mark the given `ip`."""
        if ip is None:
            method, target = 'ipblock_get_ip', cidr
        else:
            method, target = 'ip_mark', ip
        attrs = expect_mapping(
            method,
            self._call(
                'create',
                method,
                target,
                self._options(layer3domain),
                cancel=cancel,
            ),
        )
        identifier = IP_ID.encode(
            {
                'layer3domain': layer3domain,
                'ip': expect_str(method, attrs.get('ip')),
            }
        )
        self.log.info('create: IP has been made static, id=%s', identifier)
        return identifier, attrs

    def read(self, identifier: str, cancel=None) -> Reconciliation:
        values = self._decode(identifier)
        options = {'host': True}
        options.update(self._options(values['layer3domain']))

        def lookup():
            return expect_mapping(
                'ipblock_get_attrs',
                self._call(
                    'read',
                    'ipblock_get_attrs',
                    values['ip'],
                    options,
                    cancel=cancel,
                ),
            )

        reconciliation = self._reconciler.reconcile_lookup(identifier, lookup)
        if reconciliation.gone:
            return reconciliation
        status = reconciliation.attrs.get('status')
        if status != self.ALLOCATED:
            raise DimResourceError(
                f'IP {values["ip"]} is not in {self.ALLOCATED} state '
                f'(status={status})'
            )
        return reconciliation

    def delete(self, identifier: str, cancel=None) -> bool:
        values = self._decode(identifier)
        try:
            result = self._call(
                'delete',
                'ip_free',
                values['ip'],
                self._options(values['layer3domain']),
                cancel=cancel,
            )
        except DimClientNotFound:
            self.log.warning('delete: IP %s was already gone', identifier)
            return False
        freed = expect_int('ip_free', result)
        if freed == 1:
            self.log.info('delete: IP has been freed, id=%s', identifier)
            return True
        if freed == 0:
            self.log.warning('delete: IP %s was already free', values['ip'])
            return False
        if freed == -1:
            raise DimResourceError(
                'Freeing reserved IP is not supported by ionosdim'
            )
        raise DimResourceError(f'Unexpected result from ip_free: {freed}')
