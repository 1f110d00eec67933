"""Exception types raised by the compute harness.

Every failure surfaces synchronously to the caller of ``Executor.execute``
or of the returned reader. Nothing is retried.
"""

from __future__ import annotations


class ComputeError(RuntimeError):
    """Base class for all harness errors."""


class ContextUnavailable(ComputeError):
    """No GPU drawing surface could be obtained."""


class ShaderCompileError(ComputeError):
    """A shader stage failed to compile.

    Attributes:
        stage: "vertex" or "fragment"
        log: Compiler diagnostics, verbatim
    """

    def __init__(self, stage: str, log: str):
        super().__init__(f"{stage} shader failed to compile:\n{log}")
        self.stage = stage
        self.log = log


class ProgramLinkError(ComputeError):
    """The shader pair compiled but failed to link."""

    def __init__(self, log: str):
        super().__init__(f"program failed to link:\n{log}")
        self.log = log


class UnknownUniform(ComputeError):
    """A binding names a uniform the linked program does not expose."""

    def __init__(self, name: str):
        super().__init__(f"program has no active uniform named '{name}'")
        self.name = name


class UnknownAttribute(ComputeError):
    """The vertex shader does not read the quad position attribute."""

    def __init__(self, name: str):
        super().__init__(f"program has no active vertex attribute named '{name}'")
        self.name = name


class ImageLoadError(ComputeError):
    """An external image failed to load or decode."""

    def __init__(self, source: str, reason: str = ""):
        message = f"failed to load image {source}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.source = source
        self.reason = reason


class SurfaceNotReady(ComputeError):
    """Readback attempted without a completed draw on a live surface."""
