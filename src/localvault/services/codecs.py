"""String codecs for typed cache accessors.

Every persisted value is a string. These helpers turn Python values into
those strings and back. Decoders raise ``ValueError`` (or ``TypeError`` for
encoders) and leave error reporting to the caller.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any

import orjson
from pydantic import BaseModel

from localvault.shared.constants import TimeCodec

_TRUE_VALUES = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_VALUES = frozenset({"0", "f", "F", "FALSE", "false", "False"})
_INT_PATTERN = re.compile(r"[+-]?\d+")


def encode_bool(value: bool) -> str:
    if not isinstance(value, bool):
        msg = f"expected bool, got {type(value).__name__}"
        raise TypeError(msg)
    return "true" if value else "false"


def decode_bool(raw: str) -> bool:
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    msg = f"invalid bool literal: {raw!r}"
    raise ValueError(msg)


def encode_int(value: int) -> str:
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"expected int, got {type(value).__name__}"
        raise TypeError(msg)
    return str(value)


def decode_int(raw: str) -> int:
    if not _INT_PATTERN.fullmatch(raw):
        msg = f"invalid int literal: {raw!r}"
        raise ValueError(msg)
    return int(raw)


def encode_float(value: float) -> str:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        msg = f"expected float, got {type(value).__name__}"
        raise TypeError(msg)
    return repr(float(value))


def decode_float(raw: str) -> float:
    if raw != raw.strip() or not raw:
        msg = f"invalid float literal: {raw!r}"
        raise ValueError(msg)
    return float(raw)


def encode_time(value: datetime) -> str:
    """Encode a datetime as Unix milliseconds."""
    if not isinstance(value, datetime):
        msg = f"expected datetime, got {type(value).__name__}"
        raise TypeError(msg)
    return str(round(value.timestamp() * TimeCodec.MILLIS_PER_SECOND))


def decode_time(raw: str) -> datetime:
    """Decode Unix milliseconds into an aware UTC datetime.

    Raises:
        ValueError: If ``raw`` is not an integer or lies outside the range a
            datetime can represent.
    """
    millis = decode_int(raw)
    try:
        return datetime.fromtimestamp(millis / TimeCodec.MILLIS_PER_SECOND, tz=timezone.utc)
    except (OverflowError, OSError) as e:
        msg = f"time out of range: {raw!r}"
        raise ValueError(msg) from e


def _json_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    msg = f"Type is not JSON serializable: {type(value).__name__}"
    raise TypeError(msg)


def encode_json(value: Any) -> str:
    """Serialize ``value`` with orjson.

    Pydantic models are dumped by alias; sets become sorted lists.

    Raises:
        TypeError: If the value cannot be serialized.
    """
    return orjson.dumps(value, default=_json_default).decode("utf-8")


def decode_json(raw: str) -> Any:
    """Parse a JSON document.

    Raises:
        ValueError: If ``raw`` is not valid JSON.
    """
    return orjson.loads(raw)
