from typing import Optional, Union

from .codec import resolve_upper
from .primitive import hex_encode, sm3_hash


def digest(data: Union[str, bytes]) -> bytes:
    """One-shot SM3 digest (32 bytes). str input is hashed as UTF-8."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return sm3_hash(bytes(data))


def hexdigest(data: Union[str, bytes], upper: Optional[bool] = None) -> str:
    return hex_encode(digest(data), upper=resolve_upper(upper))
