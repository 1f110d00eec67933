"""Abstract surface context interface.

This module defines the capability set the executor and binding compiler
need from a GPU drawing surface: program compilation, quad upload, texture
upload, uniform assignment, a single draw and pixel readback. Driver state
(active program, bound texture units) stays behind these methods.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from fragcompute.core.program import ShaderPair
    from fragcompute.gpu.texture import Texture


class Sampling(Enum):
    """Texture sampling setups used for input bindings."""
    EXACT = auto()         # Nearest filtering, clamp-to-edge (array payloads)
    MIPMAP = auto()        # Mipmapped, power-of-two images
    LINEAR_CLAMP = auto()  # Linear filtering, clamp-to-edge, no mipmaps


# Full-surface quad, drawn as a triangle fan
QUAD_VERTICES = (
    -1.0, 1.0,
    1.0, 1.0,
    1.0, -1.0,
    -1.0, -1.0,
)


@dataclass
class Surface:
    """Off-screen drawing target of a known pixel size.

    Attributes:
        width: Surface width in pixels
        height: Surface height in pixels
        handle: Backend-specific framebuffer handle
        generation: Bumped on every acquire, used to detect stale readers
    """

    width: int
    height: int
    handle: Any = field(repr=False)
    generation: int = 0
    drawn: bool = False
    released: bool = False

    @property
    def size(self) -> tuple[int, int]:
        """Return (width, height) tuple."""
        return (self.width, self.height)

    @property
    def byte_size(self) -> int:
        """Return the RGBA readback size in bytes."""
        return self.width * self.height * 4


class SurfaceContext(ABC):
    """Abstract GPU surface context.

    All GPU operations of the harness go through this interface.
    """

    @abstractmethod
    def initialize(self) -> None:
        """Create the underlying GPU context.

        Raises:
            ContextUnavailable: If the platform cannot provide one
        """
        pass

    @abstractmethod
    def shutdown(self) -> None:
        """Release the surface and the GPU context."""
        pass

    @property
    @abstractmethod
    def is_initialized(self) -> bool:
        """Return True if the GPU context exists."""
        pass

    @abstractmethod
    def acquire(self, width: int, height: int) -> Surface:
        """Acquire (or resize) the drawing surface.

        Args:
            width: Surface width in pixels
            height: Surface height in pixels

        Returns:
            The current surface
        """
        pass

    @abstractmethod
    def compile_program(self, shaders: ShaderPair) -> Any:
        """Compile and link a vertex/fragment pair.

        Raises:
            ShaderCompileError: If a stage fails to compile
            ProgramLinkError: If linking fails
        """
        pass

    @abstractmethod
    def create_quad(self, program: Any, attribute: str) -> tuple[Any, Any]:
        """Upload the full-surface quad and bind it to a position attribute.

        Returns:
            (vertex_array, vertex_buffer) handles

        Raises:
            UnknownAttribute: If the program has no such active attribute
        """
        pass

    @abstractmethod
    def has_uniform(self, program: Any, name: str) -> bool:
        """Return True if the linked program has an active uniform `name`."""
        pass

    @abstractmethod
    def set_uniform(self, program: Any, name: str, value: Any) -> None:
        """Assign a uniform value (float, int, or float tuple)."""
        pass

    @abstractmethod
    def create_texture(
        self,
        width: int,
        height: int,
        data: bytes,
        sampling: Sampling = Sampling.EXACT,
    ) -> Texture:
        """Create an RGBA8 texture from tightly packed rows.

        Args:
            width: Texture width in pixels
            height: Texture height in pixels
            data: width * height * 4 bytes, no row padding
            sampling: Filtering/wrapping setup

        Returns:
            Texture wrapper
        """
        pass

    @abstractmethod
    def clear(self, color: tuple[float, float, float, float]) -> None:
        """Clear the current surface."""
        pass

    @abstractmethod
    def draw(self, vertex_array: Any) -> None:
        """Issue the single full-surface draw call."""
        pass

    @abstractmethod
    def read_pixels(self, surface: Surface) -> bytes:
        """Read back the full RGBA8 rectangle, lowest row first.

        Raises:
            SurfaceNotReady: If the surface is released or was never drawn
        """
        pass

    @abstractmethod
    def release(self, *objects: Any) -> None:
        """Release backend objects (programs, buffers, textures)."""
        pass
