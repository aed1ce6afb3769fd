"""
Canonical scalar types shared by all ISO 15118-20 message types.

Each type is a pydantic annotated type that keeps the native Python value in
memory and converts it to and from its JSON representation:

- Duration: timedelta in memory, integer seconds on the wire
- Timestamp: timezone-aware datetime in memory, ISO-8601 text on the wire
- base64Binary: bytes in memory, Base64 encoded text on the wire
- PercentValue: integer within [0..100]
"""
import binascii
from base64 import b64decode, b64encode
from datetime import timedelta
from typing import Any, Optional

from pydantic import AwareDatetime, BeforeValidator, PlainSerializer, conbytes, conint
from pydantic_core import PydanticCustomError
from typing_extensions import Annotated, TypeAlias

from iso15118_json.messages.enums import UINT_32_MAX


def _duration_from_seconds(value: Any) -> Any:
    if isinstance(value, timedelta):
        # Kept in whole seconds, just like on the wire
        value = round(value.total_seconds())
    # bool is a subclass of int, but 'true' is no number of seconds
    elif isinstance(value, bool) or not isinstance(value, int):
        raise PydanticCustomError(
            "duration_type", "Duration must be an integer number of seconds"
        )
    if not 0 <= value <= UINT_32_MAX:
        raise PydanticCustomError(
            "duration_range",
            "Duration must be within [0..{max_seconds}] seconds, got {value}",
            {"max_seconds": UINT_32_MAX, "value": value},
        )
    return timedelta(seconds=value)


def _duration_to_seconds(value: timedelta) -> int:
    return round(value.total_seconds())


def _base64_decode(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return b64decode(value, validate=True)
        except binascii.Error as exc:
            raise PydanticCustomError(
                "base64_decode",
                "Base64 decoding error: '{error}'",
                {"error": str(exc)},
            ) from exc
    return value


def _base64_encode(value: bytes) -> str:
    return b64encode(value).decode()


# XSD type unsignedInt, counting seconds
Duration: TypeAlias = Annotated[
    timedelta,
    BeforeValidator(_duration_from_seconds),
    PlainSerializer(_duration_to_seconds, return_type=int, when_used="json"),
]

# An absolute point in time. A naive datetime is rejected, as it does not
# denote an instant.
Timestamp: TypeAlias = AwareDatetime

# XSD type byte with value range [0..100]
PercentValue: TypeAlias = conint(ge=0, le=100)  # type: ignore


def base64_binary(
    min_length: Optional[int] = None, max_length: Optional[int] = None
) -> Any:
    """
    XSD type base64Binary with an optional length restriction, counted in
    bytes of the decoded value
    """
    return Annotated[
        conbytes(min_length=min_length, max_length=max_length),
        BeforeValidator(_base64_decode),
        PlainSerializer(_base64_encode, return_type=str, when_used="json"),
    ]
