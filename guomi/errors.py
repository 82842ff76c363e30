"""
Error taxonomy for the guomi package.

Every failure surfaces as a subclass of GuomiError carrying:
- code: machine-readable error code (GM_<AREA>_<KIND>)
- message: human-readable description
- details: structured metadata (lengths, modes - never key material or plaintext)
"""

from typing import Any, Dict, Optional


class GuomiError(Exception):
    """Base exception for all guomi errors."""

    def __init__(
        self,
        message: str,
        code: str = "GM_INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class DecodeError(GuomiError):
    """Raised when hex or base64 framing cannot be decoded."""

    def __init__(self, reason: str, encoding: Optional[str] = None):
        super().__init__(
            message=f"decode failed: {reason}",
            code="GM_CODEC_DECODE",
            details={"encoding": encoding} if encoding else {},
        )


class MalformedKeyError(GuomiError):
    """Raised when key material is too short, missing or inconsistent."""

    def __init__(self, reason: str, expected: Optional[int] = None, actual: Optional[int] = None):
        details = {}
        if expected is not None:
            details["expected_bytes"] = expected
        if actual is not None:
            details["actual_bytes"] = actual
        super().__init__(
            message=f"malformed key: {reason}",
            code="GM_KEY_MALFORMED",
            details=details,
        )


class InvalidLengthError(GuomiError):
    """Raised when ciphertext is not a positive multiple of the block size."""

    def __init__(self, length: int, block_size: int):
        super().__init__(
            message=f"ciphertext length {length} is not a positive multiple of {block_size}",
            code="GM_CIPHER_LENGTH",
            details={"length": length, "block_size": block_size},
        )


class PaddingError(GuomiError):
    """Raised when padding removal fails its integrity checks."""

    def __init__(self, reason: str):
        super().__init__(
            message=f"invalid padding: {reason}",
            code="GM_CIPHER_PADDING",
        )


class SerializationError(GuomiError):
    """Raised when a structured object cannot be marshalled or unmarshalled."""

    def __init__(self, reason: str, target: Optional[str] = None):
        super().__init__(
            message=f"serialization failed: {reason}",
            code="GM_CODEC_SERIALIZATION",
            details={"target": target} if target else {},
        )


class PrimitiveError(GuomiError):
    """Raised when an underlying SM2/SM3/SM4 primitive reports a failure."""

    def __init__(self, reason: str, primitive: Optional[str] = None):
        super().__init__(
            message=f"{primitive or 'primitive'} failed: {reason}",
            code="GM_PRIMITIVE_FAILED",
            details={"primitive": primitive} if primitive else {},
        )


class InvalidParameterError(GuomiError):
    """Raised when a selector or size argument is outside its accepted set."""

    def __init__(self, reason: str, parameter: Optional[str] = None):
        super().__init__(
            message=f"invalid parameter: {reason}",
            code="GM_PARAM_INVALID",
            details={"parameter": parameter} if parameter else {},
        )
