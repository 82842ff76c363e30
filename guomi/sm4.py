"""
SM4-CBC session.

A session binds a 16-byte key and a 16-byte IV. The IV is applied to every
message as-is (one CBC chain per message), so the same session can encrypt
and decrypt any number of independent messages from any thread.

Usage:
    cipher = Sm4Cipher.from_hex("639e29c43d62713678897f3fd26b2e87",
                                "84eacb3e5a3c342c81efd57da905a948")
    ct_hex = cipher.encrypt_to_hex("国密算法SM4")
    cipher.decrypt_hex(ct_hex)  # b"\xe5\x9b\xbd..."
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from .codec import EncodingMode, frame, marshal, resolve_upper, unframe, unmarshal
from .errors import InvalidLengthError, MalformedKeyError
from .padding import pad, unpad
from .primitive import (
    BLOCK_SIZE,
    b64d, hex_decode, hex_encode,
    sm4_block_decryptor, sm4_block_encryptor,
    xor_bytes,
)

logger = logging.getLogger(__name__)

KEY_SIZE = 16


def _to_bytes(plaintext: Union[str, bytes]) -> bytes:
    if isinstance(plaintext, str):
        return plaintext.encode("utf-8")
    return bytes(plaintext)


@dataclass(frozen=True)
class Sm4Cipher:
    key: bytes
    iv: bytes

    def __post_init__(self):
        if len(self.key) != KEY_SIZE:
            raise MalformedKeyError("SM4 key must be 16 bytes", expected=KEY_SIZE, actual=len(self.key))
        if len(self.iv) != BLOCK_SIZE:
            raise MalformedKeyError("SM4 IV must be 16 bytes", expected=BLOCK_SIZE, actual=len(self.iv))
        object.__setattr__(self, "key", bytes(self.key))
        object.__setattr__(self, "iv", bytes(self.iv))

    def __repr__(self) -> str:
        return "Sm4Cipher(key=<hidden>, iv=<hidden>)"

    @classmethod
    def from_hex(cls, key: str, iv: str) -> "Sm4Cipher":
        return cls(hex_decode(key), hex_decode(iv))

    @classmethod
    def from_base64(cls, key: str, iv: str) -> "Sm4Cipher":
        return cls(b64d(key), b64d(iv))

    # ============================================
    # Raw bytes
    # ============================================

    def encrypt(self, plaintext: Union[str, bytes]) -> bytes:
        """
        Pad and CBC-encrypt plaintext.

        Output length is a multiple of 16 and 1..16 bytes longer than the input.
        """
        padded = pad(_to_bytes(plaintext), BLOCK_SIZE)
        encrypt_block = sm4_block_encryptor(self.key)

        out = bytearray()
        prev = self.iv
        for i in range(0, len(padded), BLOCK_SIZE):
            prev = encrypt_block(xor_bytes(padded[i:i + BLOCK_SIZE], prev))
            out += prev
        return bytes(out)

    def decrypt(self, ciphertext: bytes) -> bytes:
        """
        CBC-decrypt and unpad ciphertext. The input buffer is left untouched.

        Raises:
            InvalidLengthError: If len(ciphertext) is not a positive multiple of 16
            PaddingError: If the recovered padding is invalid
        """
        if not ciphertext or len(ciphertext) % BLOCK_SIZE:
            logger.debug("rejecting SM4 ciphertext of %d bytes", len(ciphertext))
            raise InvalidLengthError(len(ciphertext), BLOCK_SIZE)
        decrypt_block = sm4_block_decryptor(self.key)

        out = bytearray()
        prev = self.iv
        for i in range(0, len(ciphertext), BLOCK_SIZE):
            block = bytes(ciphertext[i:i + BLOCK_SIZE])
            out += xor_bytes(decrypt_block(block), prev)
            prev = block
        return unpad(bytes(out), BLOCK_SIZE)

    # ============================================
    # Hex / Base64 framing
    # ============================================

    def encrypt_to_hex(self, plaintext: Union[str, bytes], upper: Optional[bool] = None) -> str:
        return hex_encode(self.encrypt(plaintext), upper=resolve_upper(upper))

    def encrypt_to_base64(self, plaintext: Union[str, bytes]) -> str:
        return frame(self.encrypt(plaintext), EncodingMode.BASE64)

    def decrypt_hex(self, ciphertext: str) -> bytes:
        return self.decrypt(hex_decode(ciphertext))

    def decrypt_base64(self, ciphertext: str) -> bytes:
        return self.decrypt(b64d(ciphertext))

    # ============================================
    # Structured objects
    # ============================================

    def encrypt_object(self, obj: Any) -> bytes:
        return self.encrypt(marshal(obj))

    def encrypt_object_to_hex(self, obj: Any, upper: Optional[bool] = None) -> str:
        return hex_encode(self.encrypt_object(obj), upper=resolve_upper(upper))

    def decrypt_object(self, ciphertext: Union[str, bytes], into: Optional[type] = None) -> Any:
        """Decrypt hex (str) or raw (bytes) ciphertext and unmarshal the JSON payload."""
        return unmarshal(self.decrypt(unframe(ciphertext, EncodingMode.HEX)), into)

    # ============================================
    # Generic
    # ============================================

    def encrypt_as(self, payload: Any, encoding: EncodingMode, upper: Optional[bool] = None) -> Union[str, bytes]:
        encoding = EncodingMode(encoding)
        if encoding is EncodingMode.STRUCTURED:
            return frame(self.encrypt_object(payload), encoding, upper)
        return frame(self.encrypt(payload), encoding, upper)

    def decrypt_as(self, ciphertext: Union[str, bytes], encoding: EncodingMode,
                   into: Optional[type] = None) -> Any:
        """
        Decrypt ciphertext framed as encoding.

        str input is decoded per encoding; bytes input is always taken as raw
        ciphertext, even under HEX or BASE64.
        """
        encoding = EncodingMode(encoding)
        plaintext = self.decrypt(unframe(ciphertext, encoding))
        if encoding is EncodingMode.STRUCTURED:
            return unmarshal(plaintext, into)
        return plaintext
