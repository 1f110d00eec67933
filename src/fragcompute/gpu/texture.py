"""GPU texture wrapper for input bindings.

Textures here carry exact RGBA8 payloads: either numeric arrays encoded as
bytes or decoded images.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from fragcompute.gpu.backend import Sampling


def is_power_of_two(value: int) -> bool:
    """Return True if `value` is an exact power of two."""
    return value > 0 and (value & (value - 1)) == 0


@dataclass
class Texture:
    """RGBA8 texture bound to a sampler through a texture unit.

    Attributes:
        width: Texture width in pixels
        height: Texture height in pixels
        sampling: Filtering/wrapping setup chosen at creation
        handle: Backend-specific texture handle
        name: Sampler uniform the texture feeds
        unit: Texture unit, or -1 while unbound
    """

    width: int
    height: int
    sampling: Sampling
    handle: Any = field(repr=False)

    name: str = ""
    unit: int = -1

    def bind_as_sampler(self, unit: int) -> None:
        """Bind texture to a texture unit for sampler access.

        Args:
            unit: Texture unit index
        """
        self.handle.use(location=unit)
        self.unit = unit

    def release(self) -> None:
        """Free the GPU texture."""
        if self.handle is not None:
            self.handle.release()
            self.handle = None

    @property
    def size(self) -> tuple[int, int]:
        """Return (width, height) tuple."""
        return (self.width, self.height)

    @property
    def byte_size(self) -> int:
        """Return the payload size in bytes."""
        return self.width * self.height * 4
