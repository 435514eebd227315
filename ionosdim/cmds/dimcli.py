#!/usr/bin/env python
'''
Calls a DIM JSON-RPC function and prints its result
'''

import json
import sys
from logging import WARNING, getLogger

import yaml
from octodns.cmds.args import ArgumentParser

from ..config import DimConfig, read_token_file
from ..exceptions import DimException

log = getLogger('dimcli')


def main():
    parser = ArgumentParser(description=__doc__.split('\n')[1])

    parser.add_argument(
        '--endpoint',
        default=None,
        help='DIM endpoint URL, defaults to IONOSDIM_ENDPOINT',
    )
    parser.add_argument(
        '--token',
        default=None,
        help='Name of the file with the session token (cookie) of a DIM '
        'account, defaults to IONOSDIM_TOKEN',
    )
    parser.add_argument(
        '--func', default='server_info', help='DIM function to call'
    )
    parser.add_argument(
        '--args', default='[]', help='DIM function args (as JSON array)'
    )
    parser.add_argument(
        '-j',
        dest='json',
        action='store_true',
        default=False,
        help='Output as JSON instead of YAML',
    )

    args = parser.parse_args(WARNING)

    try:
        params = json.loads(args.args)
    except ValueError as e:
        log.error('could not unmarshal args: %s', e)
        return 1
    if not isinstance(params, list):
        log.error('args must be a JSON array, got %s', args.args)
        return 1

    try:
        token = read_token_file(args.token) if args.token else None
        config = DimConfig.from_env(endpoint=args.endpoint, token=token)
        with config.client() as client:
            result = client.raw_call(args.func, params)
    except DimException as e:
        log.error('dim request failed: %s', e)
        return 1

    if args.json:
        print(json.dumps(result))
    else:
        print(yaml.safe_dump(result, default_flow_style=False), end='')
    return 0


if __name__ == '__main__':
    sys.exit(main())
