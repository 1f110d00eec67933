"""Compute harness core: descriptors, binding, execution and decoding."""

from fragcompute.core.bindings import (
    Array2D,
    ImageRef,
    InputBinding,
    Integer,
    Scalar,
    Vector,
    array2d,
    image,
    uniform1f,
    uniform1i,
    uniform_vec,
)
from fragcompute.core.program import (
    NumericType,
    OutputSpec,
    ProgramDescriptor,
    ShaderPair,
    output,
    program,
)
from fragcompute.core.binder import BindingCompiler, BindingResult
from fragcompute.core.decode import decode
from fragcompute.core.executor import ExecutionHandle, ExecutionStats, Executor, ResultReader
from fragcompute.core.postprocess import (
    batch,
    rank_cells,
    search_space_size,
    to_grey_scale,
    to_grey_scale_matrix,
    to_rgba_scale,
)

__all__ = [
    "Array2D",
    "ImageRef",
    "InputBinding",
    "Integer",
    "Scalar",
    "Vector",
    "array2d",
    "image",
    "uniform1f",
    "uniform1i",
    "uniform_vec",
    "NumericType",
    "OutputSpec",
    "ProgramDescriptor",
    "ShaderPair",
    "output",
    "program",
    "BindingCompiler",
    "BindingResult",
    "decode",
    "ExecutionHandle",
    "ExecutionStats",
    "Executor",
    "ResultReader",
    "batch",
    "rank_cells",
    "search_space_size",
    "to_grey_scale",
    "to_grey_scale_matrix",
    "to_rgba_scale",
]
