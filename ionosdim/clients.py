#
#
#

"""Protocol definitions for DIM client interfaces.

This module defines structural typing (PEP 544) for DIM clients, allowing
entity kinds and lookups to accept test doubles or alternative transports
without requiring explicit inheritance.
"""

from typing import Any, Optional, Protocol, Sequence

from .cancel import CancelToken


class DimCaller(Protocol):
    """Protocol defining the interface entity kinds and lookups rely on.

    DimClient conforms to it.
    """

    def raw_call(
        self,
        method: str,
        params: Sequence[Any] = (),
        cancel: Optional[CancelToken] = None,
    ) -> Any:
        """Invoke a DIM function.

        Args:
            method: DIM function name, e.g. 'rr_get_attrs'
            params: Positional arguments, each a scalar, a mapping or a list
            cancel: Optional token aborting the in-flight request

        Returns:
            The decoded `result` value, its shape depends on the function

        Raises:
            DimClientTransportError: Network or HTTP failure, or cancellation
            DimClientDecodeError: Response body is not a JSON-RPC envelope
            DimClientRemoteError: DIM rejected the call
        """
        ...

    def call(
        self, method: str, *params: Any, cancel: Optional[CancelToken] = None
    ) -> Any:
        """Same as raw_call with params given positionally."""
        ...
