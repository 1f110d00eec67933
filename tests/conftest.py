"""Shared fixtures: a recording surface context and a real GPU executor."""

import pytest

from fragcompute.config import ComputeConfig
from fragcompute.core.executor import Executor
from fragcompute.errors import ContextUnavailable, SurfaceNotReady
from fragcompute.gpu.backend import Sampling, Surface, SurfaceContext
from fragcompute.gpu.texture import Texture


class RecordingHandle:
    """Stands in for a backend object; remembers what happened to it."""

    def __init__(self, kind, data=b""):
        self.kind = kind
        self.data = data
        self.location = None
        self.released = False

    def use(self, location=0):
        self.location = location

    def read(self, alignment=1):
        return self.data

    def release(self):
        self.released = True


class RecordingProgram(RecordingHandle):
    def __init__(self, shaders, uniforms):
        super().__init__("program")
        self.shaders = shaders
        self.uniforms = set(uniforms)
        self.values = {}


class RecordingContext(SurfaceContext):
    """Surface context that records calls instead of touching a GPU.

    Args:
        uniforms: Active uniform names every compiled program reports
        pixels: Callable (width, height) -> bytes returned by read_pixels
    """

    def __init__(self, uniforms=(), pixels=None):
        self.uniforms = set(uniforms)
        self.pixels = pixels or (lambda w, h: bytes(range(256)) * (w * h * 4 // 256 + 1))
        self.calls = []
        self.programs = []
        self.textures = []
        self.released = []
        self.surface = None
        self._initialized = False
        self._generation = 0

    def initialize(self):
        self._initialized = True

    def shutdown(self):
        self.calls.append("shutdown")
        if self.surface is not None:
            self.surface.released = True
        self._initialized = False

    @property
    def is_initialized(self):
        return self._initialized

    def acquire(self, width, height):
        self.initialize()
        self.calls.append(("acquire", width, height))
        if self.surface is None or self.surface.size != (width, height):
            self.surface = Surface(width, height, handle=RecordingHandle("framebuffer"))
        self._generation += 1
        self.surface.generation = self._generation
        self.surface.drawn = False
        return self.surface

    def compile_program(self, shaders):
        self.calls.append("compile")
        program = RecordingProgram(shaders, self.uniforms)
        self.programs.append(program)
        return program

    def create_quad(self, program, attribute):
        self.calls.append(("quad", attribute))
        return RecordingHandle("vertex_array"), RecordingHandle("buffer")

    def has_uniform(self, program, name):
        return name in program.uniforms

    def set_uniform(self, program, name, value):
        self.calls.append(("uniform", name, value))
        program.values[name] = value

    def create_texture(self, width, height, data, sampling=Sampling.EXACT):
        self.calls.append(("texture", width, height, sampling))
        texture = Texture(
            width=width,
            height=height,
            sampling=sampling,
            handle=RecordingHandle("texture", data),
        )
        self.textures.append(texture)
        return texture

    def clear(self, color):
        self.calls.append(("clear", tuple(color)))

    def draw(self, vertex_array):
        self.calls.append("draw")
        self.surface.drawn = True

    def read_pixels(self, surface):
        if surface.released or not surface.drawn:
            raise SurfaceNotReady("not drawn")
        self.calls.append("read")
        return self.pixels(surface.width, surface.height)[:surface.byte_size]

    def release(self, *objects):
        for obj in objects:
            if obj is not None:
                obj.release()
                self.released.append(obj)


@pytest.fixture
def recording_context():
    """Recording context whose programs expose the common test uniforms."""
    return RecordingContext(uniforms={"a", "b", "c", "scale", "count", "center"})


GPU_CONTEXT_BACKENDS = (None, "egl")


def open_gpu_executor(**settings):
    """Return an executor on the first headless context that can be created.

    The platform default is tried first, then EGL for machines without a
    display. Skips the calling test when neither works.
    """
    errors = []
    for context_backend in GPU_CONTEXT_BACKENDS:
        executor = Executor(config=ComputeConfig(context_backend=context_backend, **settings))
        try:
            executor.context.initialize()
        except ContextUnavailable as exc:
            errors.append(f"{context_backend or 'default'}: {exc}")
            continue
        return executor
    pytest.skip("No OpenGL context available: " + "; ".join(errors))


@pytest.fixture
def gpu_executor():
    """Executor on a real headless OpenGL context; skips without one."""
    executor = open_gpu_executor()
    yield executor
    executor.close()
