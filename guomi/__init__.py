"""SM2 / SM3 / SM4 encryption helpers with hex, base64 and JSON framing."""

import logging

from .errors import (
    GuomiError,
    DecodeError,
    MalformedKeyError,
    InvalidLengthError,
    PaddingError,
    SerializationError,
    PrimitiveError,
    InvalidParameterError,
)

from .primitive import (
    b64e,
    b64d,
    hex_encode,
    hex_decode,
)

from .codec import (
    EncodingMode,
    marshal,
    unmarshal,
)

from .keys import (
    CurveKeyPair,
    decode_public_key,
    decode_private_key,
    validate_key_pair,
    public_key_to_hex,
    private_key_to_hex,
)

from .padding import pad, unpad
from .sm2 import CipherMode, Sm2Cipher
from .sm3 import digest as sm3_digest, hexdigest as sm3_hexdigest
from .sm4 import Sm4Cipher

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Errors
    "GuomiError",
    "DecodeError",
    "MalformedKeyError",
    "InvalidLengthError",
    "PaddingError",
    "SerializationError",
    "PrimitiveError",
    "InvalidParameterError",
    # Codecs
    "b64e",
    "b64d",
    "hex_encode",
    "hex_decode",
    "EncodingMode",
    "marshal",
    "unmarshal",
    # Key material
    "CurveKeyPair",
    "decode_public_key",
    "decode_private_key",
    "validate_key_pair",
    "public_key_to_hex",
    "private_key_to_hex",
    # Padding
    "pad",
    "unpad",
    # Ciphers
    "CipherMode",
    "Sm2Cipher",
    "Sm4Cipher",
    "sm3_digest",
    "sm3_hexdigest",
]
