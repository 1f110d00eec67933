"""fragcompute: general-purpose compute through an OpenGL fragment pass.

A compute job is a vertex/fragment shader pair, a declared output shape and
numeric type, and an ordered list of inputs. The job is drawn once over an
off-screen surface and the color buffer is read back as uint8, int32 or
float32 values.
"""

__version__ = "0.1.0"

from fragcompute.config import ComputeConfig
from fragcompute.core import (
    Array2D,
    ImageRef,
    Integer,
    Scalar,
    Vector,
    array2d,
    image,
    uniform1f,
    uniform1i,
    uniform_vec,
    NumericType,
    OutputSpec,
    ProgramDescriptor,
    ShaderPair,
    output,
    program,
    BindingCompiler,
    decode,
    Executor,
    ResultReader,
    batch,
    rank_cells,
    search_space_size,
    to_grey_scale,
    to_grey_scale_matrix,
    to_rgba_scale,
)
from fragcompute.errors import (
    ComputeError,
    ContextUnavailable,
    ImageLoadError,
    ProgramLinkError,
    ShaderCompileError,
    SurfaceNotReady,
    UnknownAttribute,
    UnknownUniform,
)
from fragcompute.gpu import create_surface_context
from fragcompute.images import ImageResource, LoadedImage, load_image

__all__ = [
    "__version__",
    "ComputeConfig",
    # Bindings
    "Array2D",
    "ImageRef",
    "Integer",
    "Scalar",
    "Vector",
    "array2d",
    "image",
    "uniform1f",
    "uniform1i",
    "uniform_vec",
    # Programs
    "NumericType",
    "OutputSpec",
    "ProgramDescriptor",
    "ShaderPair",
    "output",
    "program",
    # Execution
    "BindingCompiler",
    "Executor",
    "ResultReader",
    "create_surface_context",
    "decode",
    # Post-processing
    "batch",
    "rank_cells",
    "search_space_size",
    "to_grey_scale",
    "to_grey_scale_matrix",
    "to_rgba_scale",
    # Images
    "ImageResource",
    "LoadedImage",
    "load_image",
    # Errors
    "ComputeError",
    "ContextUnavailable",
    "ImageLoadError",
    "ProgramLinkError",
    "ShaderCompileError",
    "SurfaceNotReady",
    "UnknownAttribute",
    "UnknownUniform",
]
