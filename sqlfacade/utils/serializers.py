"""Serialization utilities for sqlfacade.

Re-exports the msgspec backed JSON and MessagePack helpers from the core
serialization module for convenient access.
"""

from typing import Any, Literal, overload

from sqlfacade._serialization import decode_json, decode_msgpack, encode_json, encode_msgpack
from sqlfacade.exceptions import SerializationError

__all__ = ("from_json", "from_msgpack", "to_json", "to_msgpack")


@overload
def to_json(data: Any, *, as_bytes: Literal[False] = ..., sort_keys: bool = ...) -> str: ...


@overload
def to_json(data: Any, *, as_bytes: Literal[True], sort_keys: bool = ...) -> bytes: ...


def to_json(data: Any, *, as_bytes: bool = False, sort_keys: bool = False) -> "str | bytes":
    """Encode data to JSON string or bytes.

    Args:
        data: Data to encode.
        as_bytes: Whether to return bytes instead of string.
        sort_keys: Emit mapping keys in sorted order for a canonical encoding.

    Returns:
        JSON string or bytes representation based on as_bytes parameter.
    """
    return encode_json(data, as_bytes=as_bytes, sort_keys=sort_keys)


def from_json(data: "str | bytes") -> Any:
    """Decode JSON string or bytes to Python object.

    Args:
        data: JSON string or bytes to decode.

    Returns:
        Decoded Python object.
    """
    return decode_json(data)


def to_msgpack(data: Any) -> bytes:
    """Encode data to MessagePack bytes.

    Raises:
        SerializationError: If the value contains an unsupported type.
    """
    try:
        return encode_msgpack(data)
    except (TypeError, ValueError) as exc:
        msg = f"Could not encode value to msgpack: {exc}"
        raise SerializationError(msg) from exc


def from_msgpack(data: bytes, type: Any = Any) -> Any:  # noqa: A002
    """Decode MessagePack bytes, optionally validating against ``type``.

    Raises:
        SerializationError: If the payload is corrupt or does not match ``type``.
    """
    try:
        return decode_msgpack(data, type)
    except Exception as exc:
        msg = f"Could not decode msgpack payload: {exc}"
        raise SerializationError(msg) from exc
