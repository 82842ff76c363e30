"""
Framing and structured-object codecs shared by the SM2 and SM4 sessions.

Framing turns cipher bytes into text (hex, base64) or leaves them raw.
Structured marshalling turns an object into the JSON bytes that get encrypted,
and back again after decryption.
"""

import dataclasses
import json
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ValidationError
from pydantic_core import PydanticSerializationError

from . import config
from .errors import DecodeError, SerializationError
from .primitive import b64d, b64e, hex_decode, hex_encode


class EncodingMode(str, Enum):
    HEX = "hex"
    BASE64 = "base64"
    RAW = "raw"
    STRUCTURED = "structured"


def resolve_upper(upper: Optional[bool]) -> bool:
    return config.HEX_UPPER if upper is None else upper


def frame(data: bytes, encoding: EncodingMode, upper: Optional[bool] = None) -> Union[str, bytes]:
    """
    Apply textual framing to cipher output.

    STRUCTURED describes the payload, not the framing, so its ciphertext
    travels as hex like the other object helpers.
    """
    encoding = EncodingMode(encoding)
    if encoding is EncodingMode.RAW:
        return data
    if encoding is EncodingMode.BASE64:
        return b64e(data)
    return hex_encode(data, upper=resolve_upper(upper))


def unframe(text: Union[str, bytes], encoding: EncodingMode) -> bytes:
    """
    Undo frame().

    bytes input is always raw ciphertext and is returned unchanged under every
    encoding; hex or base64 text must be passed as str.
    """
    if isinstance(text, (bytes, bytearray)):
        return bytes(text)
    encoding = EncodingMode(encoding)
    if encoding is EncodingMode.BASE64:
        return b64d(text)
    if encoding is EncodingMode.RAW:
        raise DecodeError("raw framing expects bytes", encoding="raw")
    return hex_decode(text)


def _to_jsonable(obj: Any) -> Any:
    if hasattr(obj, "to_dict") and callable(obj.to_dict):
        return obj.to_dict()
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    return obj


def marshal(obj: Any) -> bytes:
    """
    Serialize obj to compact UTF-8 JSON.

    Accepts pydantic models, objects exposing to_dict(), dataclass instances
    and plain JSON values.

    Raises:
        SerializationError: If obj cannot be represented as JSON
    """
    if isinstance(obj, BaseModel):
        try:
            return obj.model_dump_json().encode("utf-8")
        except PydanticSerializationError as exc:
            raise SerializationError(str(exc), target=type(obj).__name__) from exc
    try:
        text = json.dumps(
            _to_jsonable(obj),
            separators=(",", ":"),
            ensure_ascii=config.JSON_ENSURE_ASCII,
        )
    except (TypeError, ValueError) as exc:
        raise SerializationError(str(exc), target=type(obj).__name__) from exc
    return text.encode("utf-8")


def unmarshal(data: bytes, into: Optional[type] = None) -> Any:
    """
    Deserialize JSON bytes, optionally into a target type.

    Args:
        data: JSON bytes
        into: None for a plain JSON value, or a pydantic model, a class with a
            from_dict() constructor, or a dataclass

    Raises:
        SerializationError: If data is not valid JSON for the target
    """
    target = into.__name__ if into is not None else None

    if into is not None and isinstance(into, type) and issubclass(into, BaseModel):
        try:
            return into.model_validate_json(data)
        except ValidationError as exc:
            raise SerializationError(str(exc), target=target) from exc

    try:
        obj = json.loads(data)
    except (UnicodeDecodeError, ValueError) as exc:
        raise SerializationError(str(exc), target=target) from exc

    if into is None:
        return obj
    try:
        if hasattr(into, "from_dict"):
            return into.from_dict(obj)
        if dataclasses.is_dataclass(into):
            return into(**obj)
    except (KeyError, TypeError, ValueError) as exc:
        raise SerializationError(str(exc), target=target) from exc
    raise SerializationError("unsupported target type", target=target)
