"""Program executor: one descriptor, one full-surface draw.

The executor compiles the descriptor's shaders, binds its inputs and draws
the quad once. Readback is deferred to the returned `ResultReader`.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from fragcompute.config import ComputeConfig
from fragcompute.core.binder import BindingCompiler
from fragcompute.core.decode import decode
from fragcompute.errors import SurfaceNotReady
from fragcompute.gpu import create_surface_context

if TYPE_CHECKING:
    import numpy as np

    from fragcompute.core.program import OutputSpec, ProgramDescriptor
    from fragcompute.gpu.backend import Surface, SurfaceContext
    from fragcompute.gpu.texture import Texture

_logger = logging.getLogger(__name__)


@dataclass
class ExecutionStats:
    """Timings for a single execution.

    Draw time covers command submission; the GPU work finishes during the
    first readback.
    """
    width: int = 0
    height: int = 0
    texture_units: int = 0
    compile_ms: float = 0.0
    bind_ms: float = 0.0
    draw_ms: float = 0.0
    read_ms: float = 0.0

    @property
    def pixels(self) -> int:
        """Return the number of output pixels (fragment invocations)."""
        return self.width * self.height

    @property
    def total_ms(self) -> float:
        """Return the end-to-end time including the first readback."""
        return self.compile_ms + self.bind_ms + self.draw_ms + self.read_ms


@dataclass
class ExecutionHandle:
    """GPU resources owned by one execution."""

    surface: Surface
    generation: int
    program: Any = None
    vertex_array: Any = None
    vertex_buffer: Any = None
    textures: list[Texture] = field(default_factory=list)
    released: bool = False

    def release(self, context: SurfaceContext) -> None:
        """Free the per-run program, quad and textures."""
        if self.released:
            return
        context.release(*self.textures, self.vertex_array, self.vertex_buffer, self.program)
        self.textures = []
        self.program = self.vertex_array = self.vertex_buffer = None
        self.released = True


class ResultReader:
    """Reads and decodes the output of one execution.

    Calling the reader repeatedly returns identical data as long as no later
    execution has redrawn the surface.
    """

    def __init__(
        self,
        context: SurfaceContext,
        handle: ExecutionHandle,
        output: OutputSpec,
        stats: ExecutionStats,
    ):
        self._context = context
        self._handle = handle
        self._output = output
        self.stats = stats
        self._reads = 0

    @property
    def output(self) -> OutputSpec:
        """Return the declared output."""
        return self._output

    def read_raw(self) -> bytes:
        """Read the RGBA8 rectangle without reinterpretation.

        Raises:
            SurfaceNotReady: If the surface was torn down or redrawn
        """
        handle = self._handle
        surface = handle.surface
        if surface.released:
            raise SurfaceNotReady("surface has been torn down")
        if surface.generation != handle.generation:
            raise SurfaceNotReady("surface has been redrawn by a later execution")

        start = time.perf_counter()
        raw = self._context.read_pixels(surface)
        if self._reads == 0:
            self.stats.read_ms = (time.perf_counter() - start) * 1000
            _logger.debug(
                "Read %dx%d %s result in %.2f ms (total %.2f ms)",
                self._output.width, self._output.height,
                self._output.numeric_type.value, self.stats.read_ms, self.stats.total_ms,
            )
        self._reads += 1

        handle.release(self._context)
        return raw

    def __call__(self) -> np.ndarray:
        """Read back and decode the output.

        Returns:
            1-D array of width * height elements (width * height * 4 for uint8)
        """
        return decode(self.read_raw(), self._output.numeric_type)


class Executor:
    """Runs program descriptors on a surface context.

    Executions on one executor are serialized; each re-establishes all of
    its bindings.

    Example:
        with Executor() as executor:
            read = executor.run(program((vs, fs), output("uint8", (2, 2))))
            pixels = read()
    """

    def __init__(
        self,
        context: SurfaceContext | None = None,
        config: ComputeConfig | None = None,
    ):
        """Initialize executor.

        Args:
            context: Surface context to draw on; created from `config` if None
            config: Harness configuration
        """
        self._config = config or ComputeConfig()
        self._owns_context = context is None
        self._context = context or create_surface_context(self._config.backend, self._config)
        self._lock = asyncio.Lock()
        self._current: ExecutionHandle | None = None

    @property
    def context(self) -> SurfaceContext:
        """Return the surface context."""
        return self._context

    @property
    def config(self) -> ComputeConfig:
        """Return the harness configuration."""
        return self._config

    async def execute(self, descriptor: ProgramDescriptor) -> ResultReader:
        """Compile, bind and draw `descriptor`.

        Args:
            descriptor: Program to run

        Returns:
            Reader for the drawn output

        Raises:
            ContextUnavailable: No GPU surface could be obtained
            ShaderCompileError: A shader stage failed to compile
            ProgramLinkError: The program failed to link
            UnknownAttribute: The vertex shader lacks the position attribute
            UnknownUniform: A binding names a missing uniform (strict mode)
            ImageLoadError: An image input failed to load
        """
        async with self._lock:
            self._release_current()

            result = descriptor.output
            stats = ExecutionStats(width=result.width, height=result.height)

            start = time.perf_counter()
            surface = self._context.acquire(result.width, result.height)
            handle = ExecutionHandle(surface=surface, generation=surface.generation)

            try:
                handle.program = self._context.compile_program(descriptor.shaders)
                handle.vertex_array, handle.vertex_buffer = self._context.create_quad(
                    handle.program, self._config.position_attribute
                )
                compiled = time.perf_counter()

                binder = BindingCompiler(self._context, strict=self._config.strict_uniforms)
                bindings = await binder.bind(handle.program, descriptor.inputs)
                handle.textures = bindings.textures
                bound = time.perf_counter()

                self._context.clear(self._config.clear_color)
                self._context.draw(handle.vertex_array)
                drawn = time.perf_counter()
            except BaseException:
                handle.release(self._context)
                raise

            stats.texture_units = bindings.unit_count
            stats.compile_ms = (compiled - start) * 1000
            stats.bind_ms = (bound - compiled) * 1000
            stats.draw_ms = (drawn - bound) * 1000
            _logger.debug(
                "Drew %dx%d surface with %d input(s), %d texture unit(s) "
                "(compile %.2f ms, bind %.2f ms, draw %.2f ms)",
                result.width, result.height, len(descriptor.inputs),
                stats.texture_units, stats.compile_ms, stats.bind_ms, stats.draw_ms,
            )

            self._current = handle
            return ResultReader(self._context, handle, result, stats)

    def run(self, descriptor: ProgramDescriptor) -> ResultReader:
        """Execute `descriptor` from synchronous code.

        Must not be called while an event loop is running in this thread.
        """
        return asyncio.run(self.execute(descriptor))

    def close(self) -> None:
        """Release outstanding resources and, if owned, the context."""
        self._release_current()
        if self._owns_context:
            self._context.shutdown()

    def __enter__(self) -> Executor:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _release_current(self) -> None:
        if self._current is not None:
            self._current.release(self._context)
            self._current = None
