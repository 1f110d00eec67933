"""ModernGL (OpenGL 3.3+) surface context.

This is the primary backend: a headless OpenGL context with an RGBA8
off-screen framebuffer as the drawing surface. Fragment programs run once
per output pixel through a single full-surface triangle fan.
"""

from __future__ import annotations

import logging
from typing import Any

import moderngl
import numpy as np

from fragcompute.config import ComputeConfig
from fragcompute.errors import (
    ContextUnavailable,
    ProgramLinkError,
    ShaderCompileError,
    SurfaceNotReady,
    UnknownAttribute,
)
from fragcompute.gpu.backend import QUAD_VERTICES, Sampling, Surface, SurfaceContext
from fragcompute.gpu.texture import Texture

_logger = logging.getLogger(__name__)

# Stage names as reported in ModernGL compiler errors
_STAGE_NAMES = {
    "vertex_shader": "vertex",
    "fragment_shader": "fragment",
}


def _parse_program_error(message: str) -> ShaderCompileError | ProgramLinkError:
    """Turn a ModernGL program error into a compile or link error.

    ModernGL reports failures as::

        GLSL Compiler failed

        fragment_shader
        ===============
        <driver log>
    """
    lines = message.strip().splitlines()
    if lines and "Compiler failed" in lines[0]:
        for index, line in enumerate(lines):
            stage = _STAGE_NAMES.get(line.strip())
            if stage is None:
                continue
            body = lines[index + 1:]
            if body and set(body[0].strip()) == {"="}:
                body = body[1:]
            return ShaderCompileError(stage, "\n".join(body).strip())
        return ShaderCompileError("unknown", "\n".join(lines[1:]).strip())

    if lines and "Linker failed" in lines[0]:
        return ProgramLinkError("\n".join(lines[1:]).strip())
    return ProgramLinkError(message.strip())


class ModernGLSurface(SurfaceContext):
    """OpenGL surface context via ModernGL.

    Runs standalone (headless) by default, or on the current OpenGL context
    when `standalone` is False.
    """

    def __init__(self, config: ComputeConfig | None = None):
        """Initialize the ModernGL surface context.

        Args:
            config: Harness configuration (GL version, standalone mode)
        """
        self._config = config or ComputeConfig()
        self._ctx: moderngl.Context | None = None
        self._initialized = False

        self._surface: Surface | None = None
        self._renderbuffer: moderngl.Renderbuffer | None = None
        self._generation = 0

    def initialize(self) -> None:
        """Create the OpenGL context."""
        if self._initialized:
            return

        require = self._config.gl_version
        settings = {}
        if self._config.context_backend is not None:
            settings["backend"] = self._config.context_backend
        try:
            if self._config.standalone:
                self._ctx = moderngl.create_standalone_context(require=require, **settings)
            else:
                self._ctx = moderngl.create_context(require=require, **settings)
        except Exception as exc:
            raise ContextUnavailable(
                f"cannot create an OpenGL {require // 100}.{require % 100 // 10} "
                f"context: {exc}"
            ) from exc

        if self._ctx.version_code < require:
            version = self._ctx.version_code
            self._ctx.release()
            self._ctx = None
            raise ContextUnavailable(
                f"OpenGL {require} required, got {version}"
            )

        _logger.debug(
            "Created OpenGL %s context (%s)",
            self._ctx.version_code,
            self._ctx.info.get("GL_RENDERER", "unknown renderer"),
        )
        self._initialized = True

    def shutdown(self) -> None:
        """Release the surface and the context."""
        if not self._initialized:
            return

        self._release_surface()

        if self._config.standalone and self._ctx:
            self._ctx.release()

        self._ctx = None
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        """Return True if context is initialized."""
        return self._initialized

    @property
    def ctx(self) -> moderngl.Context:
        """Return the ModernGL context."""
        if not self._initialized:
            raise ContextUnavailable("surface context not initialized")
        return self._ctx

    # Surface

    def acquire(self, width: int, height: int) -> Surface:
        """Acquire the framebuffer, reallocating it on size change."""
        if width <= 0 or height <= 0:
            raise ValueError(f"Surface size must be positive, got {width}x{height}")

        self.initialize()

        surface = self._surface
        if surface is None or surface.size != (width, height):
            self._release_surface()
            self._renderbuffer = self.ctx.renderbuffer((width, height), components=4)
            framebuffer = self.ctx.framebuffer(color_attachments=[self._renderbuffer])
            surface = Surface(width=width, height=height, handle=framebuffer)
            self._surface = surface
            _logger.debug("Allocated %dx%d surface", width, height)

        self._generation += 1
        surface.generation = self._generation
        surface.drawn = False
        surface.handle.use()
        return surface

    # Programs

    def compile_program(self, shaders) -> moderngl.Program:
        """Compile and link a vertex/fragment shader pair."""
        try:
            return self.ctx.program(
                vertex_shader=shaders.vertex_source,
                fragment_shader=shaders.fragment_source,
            )
        except moderngl.Error as exc:
            error = _parse_program_error(str(exc))
            _logger.error("%s", error)
            raise error from exc

    def create_quad(
        self,
        program: moderngl.Program,
        attribute: str,
    ) -> tuple[moderngl.VertexArray, moderngl.Buffer]:
        """Upload the quad and bind it to the position attribute."""
        if not isinstance(program.get(attribute, None), moderngl.Attribute):
            raise UnknownAttribute(attribute)

        vertices = np.array(QUAD_VERTICES, dtype=np.float32)
        vbo = self.ctx.buffer(vertices.tobytes())
        vao = self.ctx.vertex_array(program, [(vbo, "2f", attribute)])
        return vao, vbo

    def has_uniform(self, program: moderngl.Program, name: str) -> bool:
        """Return True if the program has an active uniform `name`."""
        return isinstance(program.get(name, None), moderngl.Uniform)

    def set_uniform(self, program: moderngl.Program, name: str, value: Any) -> None:
        """Assign a uniform value."""
        program[name].value = value

    # Textures

    def create_texture(
        self,
        width: int,
        height: int,
        data: bytes,
        sampling: Sampling = Sampling.EXACT,
    ) -> Texture:
        """Create an RGBA8 texture with no row padding."""
        mgl_texture = self.ctx.texture((width, height), 4, data, alignment=1)

        if sampling is Sampling.MIPMAP:
            mgl_texture.build_mipmaps()
        else:
            if sampling is Sampling.EXACT:
                mgl_texture.filter = (moderngl.NEAREST, moderngl.NEAREST)
            else:
                mgl_texture.filter = (moderngl.LINEAR, moderngl.LINEAR)
            mgl_texture.repeat_x = False
            mgl_texture.repeat_y = False

        return Texture(
            width=width,
            height=height,
            sampling=sampling,
            handle=mgl_texture,
        )

    # Drawing

    def clear(self, color: tuple[float, float, float, float]) -> None:
        """Clear the current surface."""
        surface = self._require_surface()
        surface.handle.clear(*color)

    def draw(self, vertex_array: moderngl.VertexArray) -> None:
        """Draw the quad as a triangle fan over the whole surface."""
        surface = self._require_surface()
        surface.handle.use()
        vertex_array.render(moderngl.TRIANGLE_FAN, vertices=4)
        surface.drawn = True

    def read_pixels(self, surface: Surface) -> bytes:
        """Read the full RGBA8 rectangle."""
        if surface.released or surface is not self._surface:
            raise SurfaceNotReady("surface has been torn down")
        if not surface.drawn:
            raise SurfaceNotReady("surface has not been drawn")

        return surface.handle.read(components=4, alignment=1)

    def release(self, *objects: Any) -> None:
        """Release programs, buffers, vertex arrays and textures."""
        for obj in objects:
            if obj is not None:
                obj.release()

    # Private methods

    def _require_surface(self) -> Surface:
        if self._surface is None or self._surface.released:
            raise SurfaceNotReady("no surface acquired")
        return self._surface

    def _release_surface(self) -> None:
        if self._surface is not None:
            self._surface.handle.release()
            self._surface.released = True
            self._surface = None
        if self._renderbuffer is not None:
            self._renderbuffer.release()
            self._renderbuffer = None
