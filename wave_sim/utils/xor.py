"""Byte-wise XOR of buffers and NUL-terminated strings.

Every function writes its result into a caller supplied buffer and returns
it. XOR is its own inverse, so xor_buffers(xor_buffers(a, b), b) gives a back.
"""

from typing import Optional, Union

import numpy as np

Buffer = Union[bytes, bytearray, memoryview]


def _as_array(buffer: Buffer, size: int) -> np.ndarray:
    if len(buffer) < size:
        raise ValueError(f"Buffer of {len(buffer)} bytes is shorter than {size}")
    return np.frombuffer(bytes(buffer[:size]), dtype=np.uint8)


def _terminated(text: str, size: int) -> np.ndarray:
    """Encode text with its NUL terminator, zero-padded or truncated to size."""
    encoded = text.encode("utf-8") + b"\0"
    padded = np.zeros(size, dtype=np.uint8)
    count = min(len(encoded), size)
    padded[:count] = np.frombuffer(encoded[:count], dtype=np.uint8)
    return padded


def _store(result: np.ndarray, out: bytearray) -> bytearray:
    if len(out) < len(result):
        raise ValueError(f"Output buffer of {len(out)} bytes is shorter than {len(result)}")
    out[: len(result)] = result.tobytes()
    return out


def xor_buffers(a: Buffer, b: Buffer, size: int, out: bytearray) -> bytearray:
    """XOR the first size bytes of two buffers.

    Args:
        a: First operand.
        b: Second operand.
        size: Number of bytes to combine.
        out: Output buffer, at least size bytes long.

    Returns:
        out, with out[i] = a[i] ^ b[i] for i < size.
    """
    return _store(np.bitwise_xor(_as_array(a, size), _as_array(b, size)), out)


def xor_buffer_text(buffer: Buffer, text: str, size: int, out: bytearray) -> bytearray:
    """XOR a buffer against a string padded or truncated to size bytes.

    Args:
        buffer: Byte operand, at least size bytes long.
        text: Text operand; its terminator is included where it fits.
        size: Number of bytes to combine.
        out: Output buffer, at least size bytes long.

    Returns:
        out, filled with the first size bytes of the combination.
    """
    return _store(np.bitwise_xor(_as_array(buffer, size), _terminated(text, size)), out)


def xor_texts(a: str, b: str, out: Optional[bytearray] = None) -> bytearray:
    """XOR two strings zero-extended to the longer one plus a terminator.

    Args:
        a: First text.
        b: Second text.
        out: Output buffer (default: a new one of the result size).

    Returns:
        out, holding max(len(a), len(b)) + 1 combined bytes.
    """
    size = max(len(a.encode("utf-8")), len(b.encode("utf-8"))) + 1
    if out is None:
        out = bytearray(size)
    return _store(np.bitwise_xor(_terminated(a, size), _terminated(b, size)), out)
