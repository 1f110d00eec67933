"""Readback reinterpretation."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from fragcompute.core.program import NumericType


def decode(raw: bytes | bytearray | memoryview | NDArray[np.uint8],
           numeric_type: NumericType | str) -> NDArray:
    """Reinterpret raw RGBA8 readback bytes as `numeric_type`.

    No scaling or byte swapping is applied: each 4-byte group becomes one
    int32/float32 in host byte order, and uint8 returns the bytes as-is.

    Args:
        raw: Readback buffer (width * height * 4 bytes)
        numeric_type: Target type (enum or "uint8"/"int32"/"float32")

    Returns:
        Read-only 1-D numpy view over `raw`
    """
    numeric_type = NumericType(numeric_type)

    if isinstance(raw, np.ndarray):
        raw = np.ascontiguousarray(raw, dtype=np.uint8).tobytes()

    itemsize = numeric_type.dtype.itemsize
    if len(raw) % itemsize:
        raise ValueError(
            f"Buffer of {len(raw)} bytes is not a whole number of "
            f"{numeric_type.value} elements"
        )

    return np.frombuffer(raw, dtype=numeric_type.dtype)
