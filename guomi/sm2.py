"""
SM2 public-key encryption session.

Binds a CurveKeyPair and an injected randomness source. Encryption needs only
the public half; decryption needs the private scalar.

The ordering mode selects how the three ciphertext components are laid out
(C1 = ephemeral point, C3 = SM3 digest, C2 = masked body) and must match
whatever system produced or will consume the ciphertext:
- C1C3C2: GB/T 32918.4 (2012+), BouncyCastle SM2Engine.Mode.C1C3C2
- C1C2C3: the older draft layout, BouncyCastle's default
"""

import logging
import os
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Callable, Optional, Union

from . import config
from .codec import EncodingMode, frame, marshal, resolve_upper, unframe, unmarshal
from .errors import InvalidParameterError, MalformedKeyError
from .keys import CurveKeyPair, decode_private_key, decode_public_key
from .primitive import (
    C1C2C3 as _C1C2C3,
    C1C3C2 as _C1C3C2,
    b64d, hex_decode, hex_encode,
    sm2_decrypt, sm2_encrypt,
)

logger = logging.getLogger(__name__)


class CipherMode(IntEnum):
    C1C3C2 = _C1C3C2
    C1C2C3 = _C1C2C3

    @classmethod
    def parse(cls, value: Union["CipherMode", int, str]) -> "CipherMode":
        """
        Accept a CipherMode, its int value or its name in any case.

        Raises:
            InvalidParameterError: If value names no known ordering
        """
        try:
            if isinstance(value, str):
                return cls[value.strip().upper()]
            return cls(value)
        except (KeyError, ValueError, TypeError):
            raise InvalidParameterError(f"unknown SM2 cipher mode {value!r}", parameter="mode") from None


def default_mode() -> CipherMode:
    """Ordering from GUOMI_SM2_MODE; a bad value raises InvalidParameterError."""
    return CipherMode.parse(config.SM2_MODE)


def _to_bytes(plaintext: Union[str, bytes]) -> bytes:
    if isinstance(plaintext, str):
        return plaintext.encode("utf-8")
    return bytes(plaintext)


@dataclass(frozen=True)
class Sm2Cipher:
    """
    Attributes:
        key_pair: Public key, optionally with its private scalar
        rng: Callable returning n random bytes; must be thread-safe if the
            session is shared between threads
    """
    key_pair: CurveKeyPair
    rng: Callable[[int], bytes] = field(default=os.urandom, repr=False)

    @classmethod
    def from_hex(
        cls,
        public_key_hex: str,
        private_key_hex: Optional[str] = None,
        rng: Callable[[int], bytes] = os.urandom,
    ) -> "Sm2Cipher":
        """
        Build a session from hex key material.

        Without private_key_hex the session can only encrypt.
        """
        if private_key_hex is None:
            key_pair = decode_public_key(public_key_hex)
        else:
            key_pair = decode_private_key(private_key_hex, public_key_hex)
        logger.debug("SM2 session created (has_private=%s)", key_pair.has_private)
        return cls(key_pair=key_pair, rng=rng)

    def _mode(self, mode: Optional[Union[CipherMode, int, str]]) -> CipherMode:
        return default_mode() if mode is None else CipherMode.parse(mode)

    # ============================================
    # Raw bytes
    # ============================================

    def encrypt(self, plaintext: Union[str, bytes], mode: Optional[CipherMode] = None) -> bytes:
        """
        Encrypt plaintext to the bound public key.

        A fresh ephemeral scalar is drawn from self.rng on every call, so two
        encryptions of the same plaintext differ.

        Raises:
            InvalidParameterError: If mode names no known ordering
            PrimitiveError: If the public point is not on the curve
        """
        return sm2_encrypt(
            self.key_pair.x,
            self.key_pair.y,
            _to_bytes(plaintext),
            self.rng,
            int(self._mode(mode)),
        )

    def decrypt(self, ciphertext: bytes, mode: Optional[CipherMode] = None) -> bytes:
        """
        Decrypt ciphertext with the bound private scalar.

        Raises:
            MalformedKeyError: If the session holds no private scalar
            InvalidParameterError: If mode names no known ordering
            PrimitiveError: If the ciphertext is truncated, malformed or fails
                its digest check
        """
        if self.key_pair.d is None:
            raise MalformedKeyError("decryption requires a private key")
        return sm2_decrypt(self.key_pair.d, bytes(ciphertext), int(self._mode(mode)))

    # ============================================
    # Hex / Base64 framing
    # ============================================

    def encrypt_to_hex(self, plaintext: Union[str, bytes], mode: Optional[CipherMode] = None,
                       upper: Optional[bool] = None) -> str:
        return hex_encode(self.encrypt(plaintext, mode), upper=resolve_upper(upper))

    def encrypt_to_base64(self, plaintext: Union[str, bytes], mode: Optional[CipherMode] = None) -> str:
        return frame(self.encrypt(plaintext, mode), EncodingMode.BASE64)

    def decrypt_hex(self, ciphertext: str, mode: Optional[CipherMode] = None) -> bytes:
        return self.decrypt(hex_decode(ciphertext), mode)

    def decrypt_base64(self, ciphertext: str, mode: Optional[CipherMode] = None) -> bytes:
        return self.decrypt(b64d(ciphertext), mode)

    # ============================================
    # Structured objects
    # ============================================

    def encrypt_object(self, obj: Any, mode: Optional[CipherMode] = None) -> bytes:
        return self.encrypt(marshal(obj), mode)

    def encrypt_object_to_hex(self, obj: Any, mode: Optional[CipherMode] = None,
                              upper: Optional[bool] = None) -> str:
        return hex_encode(self.encrypt_object(obj, mode), upper=resolve_upper(upper))

    def decrypt_object(self, ciphertext: Union[str, bytes], mode: Optional[CipherMode] = None,
                       into: Optional[type] = None) -> Any:
        """Decrypt hex (str) or raw (bytes) ciphertext and unmarshal the JSON payload."""
        return unmarshal(self.decrypt(unframe(ciphertext, EncodingMode.HEX), mode), into)

    # ============================================
    # Generic
    # ============================================

    def encrypt_as(self, payload: Any, encoding: EncodingMode, mode: Optional[CipherMode] = None,
                   upper: Optional[bool] = None) -> Union[str, bytes]:
        encoding = EncodingMode(encoding)
        if encoding is EncodingMode.STRUCTURED:
            return frame(self.encrypt_object(payload, mode), encoding, upper)
        return frame(self.encrypt(payload, mode), encoding, upper)

    def decrypt_as(self, ciphertext: Union[str, bytes], encoding: EncodingMode,
                   mode: Optional[CipherMode] = None, into: Optional[type] = None) -> Any:
        """
        Decrypt ciphertext framed as encoding.

        str input is decoded per encoding; bytes input is always taken as raw
        ciphertext, even under HEX or BASE64.
        """
        encoding = EncodingMode(encoding)
        plaintext = self.decrypt(unframe(ciphertext, encoding), mode)
        if encoding is EncodingMode.STRUCTURED:
            return unmarshal(plaintext, into)
        return plaintext
