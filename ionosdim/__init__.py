#
#
#

__version__ = '0.1.0'

from .cancel import CancelToken  # noqa: E402
from .client import DimClient  # noqa: E402
from .config import DimConfig  # noqa: E402
from .exceptions import (  # noqa: E402
    DimClientCanceled,
    DimClientConfigError,
    DimClientDecodeError,
    DimClientException,
    DimClientNotFound,
    DimClientRemoteError,
    DimClientResultError,
    DimClientTransportError,
    DimClientUnauthorized,
    DimException,
    DimIdentifierDrift,
    DimIdentifierError,
    DimResourceError,
)
from .ids import (  # noqa: E402
    A_RECORD_ID,
    CNAME_RECORD_ID,
    IP_ID,
    TXT_RECORD_ID,
    Field,
    IdentifierCodec,
)
from .reconcile import Outcome, Reconciler, Reconciliation  # noqa: E402

__all__ = [
    'A_RECORD_ID',
    'CNAME_RECORD_ID',
    'CancelToken',
    'DimClient',
    'DimClientCanceled',
    'DimClientConfigError',
    'DimClientDecodeError',
    'DimClientException',
    'DimClientNotFound',
    'DimClientRemoteError',
    'DimClientResultError',
    'DimClientTransportError',
    'DimClientUnauthorized',
    'DimConfig',
    'DimException',
    'DimIdentifierDrift',
    'DimIdentifierError',
    'DimResourceError',
    'Field',
    'IP_ID',
    'IdentifierCodec',
    'Outcome',
    'Reconciler',
    'Reconciliation',
    'TXT_RECORD_ID',
]
