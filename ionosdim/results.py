#
#
#

"""Helpers narrowing the untyped result of a DIM call.

`DimClient.raw_call` returns whatever JSON value the method produced. Callers
that expect a particular shape narrow it with these helpers so a mismatch
surfaces as `DimClientResultError` instead of an `AttributeError` later on.
"""

from typing import Any, Dict, List, Optional

from .exceptions import DimClientResultError


def _mismatch(method: str, expected: str, value: Any) -> DimClientResultError:
    return DimClientResultError(
        f'{method}: expected {expected} result, got '
        f'{type(value).__name__} {value!r}'
    )


def expect_mapping(method: str, value: Any) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise _mismatch(method, 'an object', value)
    return value


def expect_list(method: str, value: Any) -> List[Any]:
    if not isinstance(value, list):
        raise _mismatch(method, 'an array', value)
    return value


def expect_int(method: str, value: Any) -> int:
    # json gives bool for true/false, which isinstance(.., int) accepts
    if isinstance(value, bool) or not isinstance(value, int):
        raise _mismatch(method, 'an integer', value)
    return value


def expect_str(method: str, value: Any) -> str:
    if not isinstance(value, str):
        raise _mismatch(method, 'a string', value)
    return value


def expect_optional_str(method: str, value: Any) -> Optional[str]:
    if value is None:
        return None
    return expect_str(method, value)
