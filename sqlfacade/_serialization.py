import datetime
import enum
from decimal import Decimal
from typing import Any

import msgspec

__all__ = ("decode_json", "decode_msgpack", "encode_json", "encode_msgpack")


def _type_to_string(value: Any) -> Any:  # pragma: no cover
    if isinstance(value, datetime.datetime):
        return value.isoformat()
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=repr)
    try:
        return str(value)
    except Exception as exc:
        raise TypeError from exc


_json_encoder = msgspec.json.Encoder(enc_hook=_type_to_string)
_msgpack_encoder = msgspec.msgpack.Encoder(enc_hook=_type_to_string)
_json_decoder = msgspec.json.Decoder()
_msgpack_decoder = msgspec.msgpack.Decoder()


def encode_json(data: Any, *, as_bytes: bool = False, sort_keys: bool = False) -> "str | bytes":
    if sort_keys:
        encoded = msgspec.json.encode(data, enc_hook=_type_to_string, order="sorted")
    else:
        encoded = _json_encoder.encode(data)
    if as_bytes:
        return encoded
    return encoded.decode("utf-8")


def decode_json(data: "str | bytes", *, decode_bytes: bool = True) -> Any:
    if isinstance(data, bytes) and not decode_bytes:
        return data
    return _json_decoder.decode(data)


def encode_msgpack(data: Any) -> bytes:
    return _msgpack_encoder.encode(data)


def decode_msgpack(data: bytes, type: Any = Any) -> Any:  # noqa: A002
    if type is Any:
        return _msgpack_decoder.decode(data)
    return msgspec.msgpack.decode(data, type=type)
