from .errors import InvalidParameterError, PaddingError

DEFAULT_BLOCK_SIZE = 16


def pad(data: bytes, block_size: int = DEFAULT_BLOCK_SIZE) -> bytes:
    """
    Byte-value padding: append n bytes of value n, 1 <= n <= block_size.

    Block-aligned input gets a full extra block.

    Raises:
        InvalidParameterError: If block_size is outside 1..255
    """
    if not 1 <= block_size <= 255:
        raise InvalidParameterError("block_size must be between 1 and 255", parameter="block_size")
    n = block_size - len(data) % block_size
    return data + bytes([n]) * n


def unpad(data: bytes, block_size: int = DEFAULT_BLOCK_SIZE) -> bytes:
    """
    Strip byte-value padding after checking it.

    Raises:
        PaddingError: If the input is empty, the pad length is 0, larger than
            the block or the input, or any pad byte differs from the length
    """
    if not data:
        raise PaddingError("empty input")
    n = data[-1]
    if n == 0 or n > block_size:
        raise PaddingError("pad length out of range")
    if n > len(data):
        raise PaddingError("pad length exceeds input")
    if data[-n:] != bytes([n]) * n:
        raise PaddingError("pad bytes do not match pad length")
    return data[:-n]
