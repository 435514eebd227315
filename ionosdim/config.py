#
#
#

import os
from dataclasses import dataclass, fields, replace
from typing import Mapping, Optional

from .exceptions import DimClientConfigError

ENV_PREFIX = 'IONOSDIM_'


@dataclass(frozen=True)
class DimConfig:
    endpoint: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    token: Optional[str] = None

    def __repr__(self):
        return (
            f'DimConfig(endpoint={self.endpoint!r}, '
            f'username={self.username!r}, password=***, token=***)'
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] = None, **overrides):
        """Read IONOSDIM_* variables, explicit non-None overrides win."""
        if environ is None:
            environ = os.environ
        values = {}
        for f in fields(cls):
            value = overrides.get(f.name)
            if value is None:
                value = environ.get(f'{ENV_PREFIX}{f.name.upper()}') or None
            values[f.name] = value
        config = cls(**values)
        if config.endpoint:
            config = replace(config, endpoint=config.endpoint.rstrip('/'))
        return config

    def validate(self):
        if not self.endpoint:
            raise DimClientConfigError(
                'DIM endpoint must be specified. Set the endpoint value or use '
                f'the {ENV_PREFIX}ENDPOINT environment variable.'
            )
        if self.token:
            return self
        for name in ('username', 'password'):
            if not getattr(self, name):
                raise DimClientConfigError(
                    f'DIM {name} must be specified. Use the '
                    f'{ENV_PREFIX}{name.upper()} environment variable. '
                    'Alternatively specify the token value in the '
                    f'{ENV_PREFIX}TOKEN environment variable.'
                )
        return self

    def client(self, **kwargs):
        from .client import DimClient

        self.validate()
        return DimClient(
            self.endpoint,
            token=self.token,
            username=self.username,
            password=self.password,
            **kwargs,
        )


def read_token_file(path):
    try:
        with open(path) as fh:
            return fh.read().strip()
    except OSError as e:
        raise DimClientConfigError(
            f'could not read DIM token file {path}: {e}'
        ) from e
