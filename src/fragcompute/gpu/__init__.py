"""GPU subsystem: surface contexts and textures.

Compute runs as a single fragment pass into an off-screen surface. The
surface context is an abstract interface with a ModernGL (OpenGL 3.3+)
implementation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fragcompute.gpu.backend import Sampling, Surface, SurfaceContext
from fragcompute.gpu.texture import Texture, is_power_of_two

if TYPE_CHECKING:
    from fragcompute.config import ComputeConfig

__all__ = [
    # Backend
    "SurfaceContext",
    "Surface",
    "Sampling",
    # Texture
    "Texture",
    "is_power_of_two",
    "create_surface_context",
]


def create_surface_context(
    backend_type: str = "moderngl",
    config: ComputeConfig | None = None,
) -> SurfaceContext:
    """Create a surface context.

    The GPU context itself is created lazily, on the first acquire.

    Args:
        backend_type: Backend type ("moderngl")
        config: Harness configuration

    Returns:
        Surface context
    """
    if backend_type == "moderngl":
        from fragcompute.gpu.moderngl_backend import ModernGLSurface
        return ModernGLSurface(config)
    raise ValueError(f"Unknown backend type: {backend_type}")
