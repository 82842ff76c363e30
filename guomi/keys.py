"""
SM2 key material decoding.

Public keys arrive as the uncompressed point encoding 04 || x || y in hex
(130 hex digits on sm2p256v1), private keys as the 32-byte big-endian scalar
in hex. Both formats are what BouncyCastle and tjfoc/gmsm emit, so key pairs
generated by those toolkits load unchanged.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from .errors import MalformedKeyError, PrimitiveError
from .primitive import (
    SM2_BYTE_LEN, SM2_N, SM2_POINT_LEN,
    hex_decode, hex_encode,
    sm2_public_point,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurveKeyPair:
    """
    SM2 key material.

    Attributes:
        x, y: Public point coordinates
        d: Private scalar, None for a public-only key
        curve: Curve name
    """
    x: int
    y: int
    d: Optional[int] = None
    curve: str = "sm2p256v1"

    @property
    def public_point(self) -> Tuple[int, int]:
        return self.x, self.y

    @property
    def has_private(self) -> bool:
        return self.d is not None

    def __repr__(self) -> str:
        # keep the scalar out of logs and tracebacks
        return f"CurveKeyPair(curve={self.curve!r}, has_private={self.has_private})"


def decode_public_key(public_key_hex: str) -> CurveKeyPair:
    """
    Rebuild a public key from its hex point encoding.

    The format tag (byte 0) is not inspected and curve membership is left to
    the curve operations. Bytes past 04 || x || y are ignored.

    Raises:
        DecodeError: If public_key_hex is not valid hex
        MalformedKeyError: If fewer than 65 bytes are decoded
    """
    raw = hex_decode(public_key_hex)
    if len(raw) < SM2_POINT_LEN:
        raise MalformedKeyError(
            "public key shorter than an uncompressed sm2p256v1 point",
            expected=SM2_POINT_LEN,
            actual=len(raw),
        )
    x = int.from_bytes(raw[1:SM2_BYTE_LEN + 1], "big")
    y = int.from_bytes(raw[SM2_BYTE_LEN + 1:2 * SM2_BYTE_LEN + 1], "big")
    return CurveKeyPair(x=x, y=y)


def decode_private_key(private_key_hex: str, public_key_hex: str) -> CurveKeyPair:
    """
    Rebuild a private key from its hex scalar plus the matching public key.

    The scalar is NOT checked against the public point: the caller must supply
    a matching pair. Use validate_key_pair() when that is not guaranteed.

    Raises:
        DecodeError: If either argument is not valid hex
        MalformedKeyError: If the scalar is empty or the public key is short
    """
    scalar = hex_decode(private_key_hex)
    if not scalar:
        raise MalformedKeyError("private key is empty", expected=SM2_BYTE_LEN, actual=0)
    pub = decode_public_key(public_key_hex)
    return CurveKeyPair(x=pub.x, y=pub.y, d=int.from_bytes(scalar, "big"), curve=pub.curve)


def validate_key_pair(pair: CurveKeyPair) -> None:
    """
    Check that pair.d is a valid scalar whose public point is (pair.x, pair.y).

    Raises:
        MalformedKeyError: If the pair has no scalar or the halves do not match
    """
    if pair.d is None:
        raise MalformedKeyError("key pair has no private scalar")
    if not 1 <= pair.d < SM2_N:
        raise MalformedKeyError("private scalar outside [1, n-1]")
    try:
        expected = sm2_public_point(pair.d)
    except PrimitiveError as exc:
        raise MalformedKeyError(str(exc)) from exc
    if expected != pair.public_point:
        logger.debug("key pair validation failed: public point does not match scalar")
        raise MalformedKeyError("public key does not match private scalar")


def public_key_to_hex(pair: CurveKeyPair) -> str:
    raw = b"\x04" + pair.x.to_bytes(SM2_BYTE_LEN, "big") + pair.y.to_bytes(SM2_BYTE_LEN, "big")
    return hex_encode(raw)


def private_key_to_hex(pair: CurveKeyPair) -> str:
    if pair.d is None:
        raise MalformedKeyError("key pair has no private scalar")
    return hex_encode(pair.d.to_bytes(SM2_BYTE_LEN, "big"))
