"""Reshaping helpers for decoded output.

Compute programs that produce a scalar field usually write it to the red
channel only; these helpers pull that channel out and lay it out as rows.
"""

from __future__ import annotations

from typing import Any, Sequence


def batch(n: int, sequence: Sequence) -> list:
    """Split `sequence` into consecutive chunks of length `n`.

    A trailing partial chunk is dropped.
    """
    if n <= 0:
        raise ValueError(f"Chunk length must be positive, got {n}")
    return [sequence[n * i:n * (i + 1)] for i in range(len(sequence) // n)]


def to_grey_scale(rgba: Sequence) -> list:
    """Return the red channel of each RGBA pixel."""
    return [chunk[0] for chunk in batch(4, rgba)]


def to_rgba_scale(rgba: Sequence) -> list[tuple]:
    """Return each pixel as an (r, g, b, a) tuple."""
    return [tuple(chunk) for chunk in batch(4, rgba)]


def to_grey_scale_matrix(width: int, rgba: Sequence) -> list[list]:
    """Lay out the red channel as rows of `width` values.

    The first row is the lowest readback row (the bottom of the surface).
    """
    return batch(width, to_grey_scale(rgba))


def rank_cells(matrix: Sequence[Sequence[Any]]) -> list[tuple[int, int, Any]]:
    """Return every (x, y, value) cell of `matrix`, lowest value first.

    Ties keep row-major order.
    """
    cells = [
        (x, y, value)
        for y, row in enumerate(matrix)
        for x, value in enumerate(row)
    ]
    return sorted(cells, key=lambda cell: cell[2])


def search_space_size(fixed, moving) -> tuple[int, int]:
    """Return the (width, height) of candidate offsets of `moving` in `fixed`.

    Args:
        fixed: Object with width/height (the haystack image)
        moving: Object with width/height (the needle image)
    """
    width = fixed.width - moving.width
    height = fixed.height - moving.height
    if width <= 0 or height <= 0:
        raise ValueError(
            f"Moving image {moving.width}x{moving.height} must be smaller than "
            f"fixed image {fixed.width}x{fixed.height}"
        )
    return (width, height)
