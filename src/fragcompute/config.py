"""Harness configuration."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ComputeConfig:
    """Settings shared by the surface context, binder and image loader.

    Attributes:
        backend: Surface backend name ("moderngl")
        gl_version: Minimum OpenGL version code (330 = GL 3.3 core)
        standalone: Create a headless context instead of using the current one
        context_backend: glcontext backend for the context ("egl", "x11",
            ...), or None for the platform default
        position_attribute: Vertex attribute that receives the quad corners
        strict_uniforms: Raise on unknown uniform names instead of logging
            a warning and skipping the binding
        clear_color: RGBA clear color applied before the draw
        settle_delay: Seconds `load_image` waits after an image finishes
            loading. Resources built directly keep their own delay.
        request_timeout: Timeout in seconds for fetching image URLs
    """

    backend: str = "moderngl"
    gl_version: int = 330
    standalone: bool = True
    context_backend: str | None = None
    position_attribute: str = "position"
    strict_uniforms: bool = False
    clear_color: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 1.0)
    settle_delay: float = 0.3
    request_timeout: float = 10.0

    def __post_init__(self):
        if self.gl_version < 330:
            raise ValueError(
                f"OpenGL 3.3+ required for fragment compute, got {self.gl_version}"
            )
        if self.context_backend is not None and not self.context_backend:
            raise ValueError("context_backend must be a backend name or None")
        if len(self.clear_color) != 4:
            raise ValueError("clear_color must have 4 components (RGBA)")
        if self.settle_delay < 0:
            raise ValueError("settle_delay must be >= 0")
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be > 0")
        if not self.position_attribute:
            raise ValueError("position_attribute must be a non-empty name")
