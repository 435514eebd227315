#
#
#

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .clients import DimCaller
from .results import (
    expect_list,
    expect_mapping,
    expect_optional_str,
    expect_str,
)

log = logging.getLogger('DimLookups')


@dataclass(frozen=True)
class RecordSet:
    host: str
    values: List[str] = field(default_factory=list)
    view: Optional[str] = None
    layer3domain: Optional[str] = None


def _rr_list(client: DimCaller, args, cancel):
    log.debug('_rr_list: args=%s', args)
    records = expect_list(
        'rr_list', client.call('rr_list', args, cancel=cancel)
    )
    return [expect_mapping('rr_list', rr) for rr in records]


def a_record_set(
    client, host, zone=None, view=None, layer3domain=None, cancel=None
):
    args = {'type': 'A', 'pattern': host}
    if layer3domain is not None:
        args['layer3domain'] = layer3domain
    if view is not None:
        args['view'] = view
    if zone is not None:
        args['zone'] = zone

    records = _rr_list(client, args, cancel)
    values = [expect_str('rr_list', rr.get('value')) for rr in records]
    if not records:
        return RecordSet(host, values, view, layer3domain)

    views = [expect_optional_str('rr_list', rr.get('view')) for rr in records]
    layer3domains = [
        expect_optional_str('rr_list', rr.get('layer3domain')) for rr in records
    ]
    # all entries are expected to share one view and layer3domain
    if len(set(views)) > 1:
        log.warning('a_record_set: multiple views found: %s', views)
    if len(set(layer3domains)) > 1:
        log.warning(
            'a_record_set: multiple layer3domains found: %s', layer3domains
        )
    return RecordSet(host, values, views[0], layer3domains[0])


def cname_record_set(client, host, cancel=None):
    args = {'type': 'CNAME', 'pattern': host, 'fields': True}
    records = _rr_list(client, args, cancel)
    return RecordSet(
        host, [expect_str('rr_list', rr.get('value')) for rr in records]
    )
