import base64
import binascii
import hmac
import logging
from typing import Callable, Tuple

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from ecdsa.ellipticcurve import INFINITY, CurveFp, PointJacobi

from .errors import DecodeError, PrimitiveError

logger = logging.getLogger(__name__)

BLOCK_SIZE = 16
SM3_DIGEST_SIZE = 32

# ordering selectors, same numbering as tjfoc/gmsm
C1C3C2 = 0
C1C2C3 = 1

# sm2p256v1, GB/T 32918.5
SM2_P = 0xFFFFFFFEFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFF00000000FFFFFFFFFFFFFFFF
SM2_A = 0xFFFFFFFEFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFF00000000FFFFFFFFFFFFFFFC
SM2_B = 0x28E9FA9E9D9F5E344D5A9E4BCF6509A7F39789F515AB8F92DDBCBD414D940E93
SM2_N = 0xFFFFFFFEFFFFFFFFFFFFFFFFFFFFFFFF7203DF6B21C6052B53BBF40939D54123
SM2_GX = 0x32C4AE2C1F1981195F9904466A39C9948FE30BBFF2660BE1715A4589334C74C7
SM2_GY = 0xBC3736A2F4F6779C59BDCEE36B692153D0A9877CC62A474002DF32E52139F0A0
SM2_BIT_SIZE = 256
SM2_BYTE_LEN = (SM2_BIT_SIZE + 7) // 8

SM2_CURVE = CurveFp(SM2_P, SM2_A, SM2_B, 1)
SM2_G = PointJacobi(SM2_CURVE, SM2_GX, SM2_GY, 1, order=SM2_N, generator=True)

# 04 || x || y
SM2_POINT_LEN = 1 + 2 * SM2_BYTE_LEN


# ============================================
# Codec helpers
# ============================================

def b64e(b: bytes) -> str:
    return base64.b64encode(b).decode("utf-8")

def b64d(s: str) -> bytes:
    try:
        return base64.b64decode(s.encode("utf-8"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise DecodeError(str(exc), encoding="base64") from exc

def hex_encode(b: bytes, upper: bool = False) -> str:
    s = b.hex()
    return s.upper() if upper else s

def hex_decode(s: str) -> bytes:
    """Decode hex in either case. Whitespace and odd lengths are rejected."""
    try:
        return binascii.unhexlify(s.encode("ascii"))
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise DecodeError(str(exc), encoding="hex") from exc

def xor_bytes(a: bytes, b: bytes) -> bytes:
    return bytes(x ^ y for x, y in zip(a, b))


# ============================================
# SM3
# ============================================

def sm3_hash(data: bytes) -> bytes:
    try:
        h = hashes.Hash(hashes.SM3())
    except UnsupportedAlgorithm as exc:
        raise PrimitiveError(str(exc), primitive="sm3") from exc
    h.update(data)
    return h.finalize()

def sm3_kdf(z: bytes, klen: int) -> bytes:
    """
    Key derivation function from GB/T 32918.4 section 5.4.3.

    Concatenates SM3(z || ct) for a 32-bit big-endian counter starting at 1
    and truncates the result to klen bytes.
    """
    out = bytearray()
    ct = 1
    while len(out) < klen:
        out += sm3_hash(z + ct.to_bytes(4, "big"))
        ct += 1
    return bytes(out[:klen])


# ============================================
# SM4 block transform
# ============================================

def _sm4_ecb(key: bytes) -> Cipher:
    try:
        return Cipher(algorithms.SM4(key), modes.ECB())
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise PrimitiveError(str(exc), primitive="sm4") from exc

def sm4_block_encryptor(key: bytes) -> Callable[[bytes], bytes]:
    """Return a callable that encrypts one 16-byte block at a time under key."""
    return _sm4_ecb(key).encryptor().update

def sm4_block_decryptor(key: bytes) -> Callable[[bytes], bytes]:
    """Return a callable that decrypts one 16-byte block at a time under key."""
    return _sm4_ecb(key).decryptor().update

def sm4_encrypt_block(key: bytes, block: bytes) -> bytes:
    if len(block) != BLOCK_SIZE:
        raise PrimitiveError(f"block must be {BLOCK_SIZE} bytes", primitive="sm4")
    return sm4_block_encryptor(key)(block)

def sm4_decrypt_block(key: bytes, block: bytes) -> bytes:
    if len(block) != BLOCK_SIZE:
        raise PrimitiveError(f"block must be {BLOCK_SIZE} bytes", primitive="sm4")
    return sm4_block_decryptor(key)(block)


# ============================================
# SM2 public-key encryption
# ============================================

def _int_to_bytes(n: int) -> bytes:
    return n.to_bytes(SM2_BYTE_LEN, "big")

def _to_point(x: int, y: int) -> PointJacobi:
    if not (0 <= x < SM2_P and 0 <= y < SM2_P) or not SM2_CURVE.contains_point(x, y):
        raise PrimitiveError("point is not on sm2p256v1", primitive="sm2")
    return PointJacobi(SM2_CURVE, x, y, 1, order=SM2_N)

def _draw_scalar(rng: Callable[[int], bytes]) -> int:
    while True:
        k = int.from_bytes(rng(SM2_BYTE_LEN), "big")
        if 1 <= k < SM2_N:
            return k

def sm2_public_point(d: int) -> Tuple[int, int]:
    """Return d*G as affine (x, y)."""
    if not 1 <= d < SM2_N:
        raise PrimitiveError("scalar out of range", primitive="sm2")
    q = d * SM2_G
    return q.x(), q.y()

def sm2_encrypt(x: int, y: int, msg: bytes, rng: Callable[[int], bytes], mode: int) -> bytes:
    """
    SM2 encryption (GB/T 32918.4) to the public point (x, y).

    Output is C1 || C3 || C2 for C1C3C2 and C1 || C2 || C3 for C1C2C3, where
    C1 is the uncompressed ephemeral point (04 || x1 || y1), C3 the SM3 digest
    of x2 || M || y2 and C2 the message masked with the KDF stream.

    Args:
        x, y: Recipient public point
        msg: Plaintext bytes
        rng: Callable returning n random bytes
        mode: C1C3C2 or C1C2C3

    Raises:
        PrimitiveError: If the public point is not on the curve or mode is unknown
    """
    if mode not in (C1C3C2, C1C2C3):
        raise PrimitiveError(f"unknown cipher mode {mode!r}", primitive="sm2")
    pub = _to_point(x, y)

    while True:
        k = _draw_scalar(rng)
        c1 = k * SM2_G
        s = k * pub
        if s == INFINITY:
            raise PrimitiveError("shared point is at infinity", primitive="sm2")
        x2, y2 = _int_to_bytes(s.x()), _int_to_bytes(s.y())
        t = sm3_kdf(x2 + y2, len(msg))
        # t must not be all zero (GB/T 32918.4 step A5)
        if msg and not any(t):
            continue
        break

    c1_bytes = b"\x04" + _int_to_bytes(c1.x()) + _int_to_bytes(c1.y())
    c2 = xor_bytes(msg, t)
    c3 = sm3_hash(x2 + msg + y2)
    if mode == C1C3C2:
        return c1_bytes + c3 + c2
    return c1_bytes + c2 + c3

def sm2_decrypt(d: int, ciphertext: bytes, mode: int) -> bytes:
    """
    SM2 decryption with private scalar d.

    Raises:
        PrimitiveError: On truncated input, unsupported C1 encoding, C1 off the
            curve, or a C3 digest mismatch
    """
    if mode not in (C1C3C2, C1C2C3):
        raise PrimitiveError(f"unknown cipher mode {mode!r}", primitive="sm2")
    if len(ciphertext) < SM2_POINT_LEN + SM3_DIGEST_SIZE:
        raise PrimitiveError("ciphertext too short", primitive="sm2")
    if ciphertext[0] != 0x04:
        raise PrimitiveError("C1 is not an uncompressed point", primitive="sm2")

    x1 = int.from_bytes(ciphertext[1:1 + SM2_BYTE_LEN], "big")
    y1 = int.from_bytes(ciphertext[1 + SM2_BYTE_LEN:SM2_POINT_LEN], "big")
    body = ciphertext[SM2_POINT_LEN:]
    if mode == C1C3C2:
        c3, c2 = body[:SM3_DIGEST_SIZE], body[SM3_DIGEST_SIZE:]
    else:
        c2, c3 = body[:-SM3_DIGEST_SIZE], body[-SM3_DIGEST_SIZE:]

    s = d * _to_point(x1, y1)
    if s == INFINITY:
        raise PrimitiveError("shared point is at infinity", primitive="sm2")
    x2, y2 = _int_to_bytes(s.x()), _int_to_bytes(s.y())
    t = sm3_kdf(x2 + y2, len(c2))
    if c2 and not any(t):
        raise PrimitiveError("KDF produced an all-zero mask", primitive="sm2")

    msg = xor_bytes(c2, t)
    if not hmac.compare_digest(sm3_hash(x2 + msg + y2), c3):
        logger.debug("sm2 digest mismatch (mode=%d, body=%d bytes)", mode, len(c2))
        raise PrimitiveError("C3 digest mismatch", primitive="sm2")
    return msg
