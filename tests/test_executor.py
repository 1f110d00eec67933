"""
Tests for the executor and result reader against a recording context.
"""

import asyncio
import logging

import pytest

from fragcompute.config import ComputeConfig
from fragcompute.core.bindings import array2d, uniform1f
from fragcompute.core.executor import Executor
from fragcompute.core.program import output, program
from fragcompute.errors import SurfaceNotReady, UnknownUniform

from conftest import RecordingContext


def constant_pixels(width, height):
    return bytes([255, 0, 0, 255]) * (width * height)


@pytest.fixture
def context():
    return RecordingContext(uniforms={"a", "scale"}, pixels=constant_pixels)


@pytest.fixture
def executor(context):
    return Executor(context)


class TestExecute:
    """Tests for Executor.execute()."""

    def test_call_sequence(self, executor, context):
        """Acquire, compile, quad, bind, clear black, one draw."""
        desc = program(
            ("vs", "fs"),
            output("uint8", (3, 2)),
            [uniform1f("scale", 2.0), array2d("a", (1, 1), bytes(4))],
        )
        executor.run(desc)

        assert context.calls == [
            ("acquire", 3, 2),
            "compile",
            ("quad", "position"),
            ("uniform", "scale", 2.0),
            ("texture", 1, 1, context.textures[0].sampling),
            ("uniform", "a", 0),
            ("clear", (0.0, 0.0, 0.0, 1.0)),
            "draw",
        ]
        assert context.calls.count("draw") == 1

    def test_read_uint8(self, executor):
        """Reader returns the raw RGBA bytes for uint8 output."""
        read = executor.run(program(("vs", "fs"), output("uint8", (2, 2))))

        assert read().tolist() == [255, 0, 0, 255] * 4

    def test_read_int32(self, executor):
        """int32 output has one element per pixel."""
        read = executor.run(program(("vs", "fs"), output("int32", (2, 2))))

        assert len(read()) == 4

    def test_repeated_reads_identical(self, executor):
        """Reading twice gives the same bytes."""
        read = executor.run(program(("vs", "fs"), output("uint8", (2, 2))))

        assert read().tobytes() == read().tobytes()

    def test_stats(self, executor):
        """Execution stats describe the run."""
        desc = program(
            ("vs", "fs"),
            output("float32", (4, 2)),
            [array2d("a", (1, 1), bytes(4))],
        )
        read = executor.run(desc)
        read()

        assert read.stats.pixels == 8
        assert read.stats.texture_units == 1
        assert read.stats.total_ms >= 0.0

    def test_failed_bind_releases_and_skips_draw(self, context):
        """A bind failure frees the run's resources before the draw."""
        executor = Executor(context, ComputeConfig(strict_uniforms=True))
        desc = program(("vs", "fs"), output("uint8", (1, 1)), [uniform1f("missing", 1.0)])

        with pytest.raises(UnknownUniform):
            executor.run(desc)

        assert "draw" not in context.calls
        assert context.programs[0].released

    def test_unused_uniform_skipped_by_default(self, executor, context, caplog):
        """A uniform the compiler dropped is logged and skipped, and the run draws."""
        desc = program(
            ("vs", "fs"),
            output("uint8", (1, 1)),
            [uniform1f("sp_width", 4.0), uniform1f("scale", 2.0)],
        )

        with caplog.at_level(logging.WARNING, logger="fragcompute.core.binder"):
            read = executor.run(desc)

        assert read().tolist() == [255, 0, 0, 255]
        assert ("uniform", "scale", 2.0) in context.calls
        assert not any(call[1] == "sp_width" for call in context.calls if isinstance(call, tuple))
        assert "sp_width" in caplog.text

    def test_custom_attribute_and_clear(self, context):
        """Position attribute and clear color come from the config."""
        config = ComputeConfig(
            position_attribute="pos", clear_color=(0.1, 0.2, 0.3, 1.0)
        )
        Executor(context, config).run(program(("vs", "fs"), output("uint8", (1, 1))))

        assert ("quad", "pos") in context.calls
        assert ("clear", (0.1, 0.2, 0.3, 1.0)) in context.calls

    def test_async_execute(self, executor):
        """execute() can be awaited from a running loop."""
        async def go():
            read = await executor.execute(program(("vs", "fs"), output("uint8", (1, 1))))
            return read()

        assert asyncio.run(go()).tolist() == [255, 0, 0, 255]


class TestResultReader:
    """Tests for reader lifecycle."""

    def test_resources_released_after_read(self, executor, context):
        """Per-run program and textures are freed after the first read."""
        desc = program(("vs", "fs"), output("uint8", (1, 1)), [array2d("a", (1, 1), bytes(4))])
        read = executor.run(desc)

        assert not context.programs[0].released
        read()
        assert context.programs[0].released
        assert context.textures[0].handle is None

    def test_previous_run_released_by_next(self, executor, context):
        """Starting a run frees the previous run's resources."""
        executor.run(program(("vs", "fs"), output("uint8", (1, 1))))
        executor.run(program(("vs", "fs"), output("uint8", (1, 1))))

        assert context.programs[0].released
        assert not context.programs[1].released

    def test_stale_reader(self, executor):
        """A reader whose surface was redrawn raises SurfaceNotReady."""
        first = executor.run(program(("vs", "fs"), output("uint8", (1, 1))))
        executor.run(program(("vs", "fs"), output("uint8", (1, 1))))

        with pytest.raises(SurfaceNotReady, match="later execution"):
            first()

    def test_torn_down_surface(self, executor, context):
        """Reading after the context shut down raises SurfaceNotReady."""
        read = executor.run(program(("vs", "fs"), output("uint8", (1, 1))))
        executor.close()
        context.shutdown()

        with pytest.raises(SurfaceNotReady):
            read()


class TestExecutorLifecycle:
    """Tests for executor ownership of the context."""

    def test_borrowed_context_not_shut_down(self, context):
        """A caller-provided context stays alive after close()."""
        with Executor(context):
            pass

        assert "shutdown" not in context.calls

    def test_unknown_backend(self):
        """Unknown backend names are rejected."""
        with pytest.raises(ValueError, match="Unknown backend"):
            Executor(config=ComputeConfig(backend="vulkan"))
