"""Program descriptors: what one compute run draws and returns."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

import numpy as np

from fragcompute.core.bindings import TEXTURE_BINDINGS, InputBinding


class NumericType(Enum):
    """How the RGBA8 readback is reinterpreted."""
    UINT8 = "uint8"      # Raw bytes, 4 per pixel
    INT32 = "int32"      # One native-order int32 per pixel
    FLOAT32 = "float32"  # One native-order float32 per pixel

    @property
    def dtype(self) -> np.dtype:
        """Return the numpy dtype for this type."""
        return np.dtype(self.value)

    @property
    def elements_per_pixel(self) -> int:
        """Return the number of decoded elements per output pixel."""
        return 4 if self is NumericType.UINT8 else 1


@dataclass(frozen=True)
class ShaderPair:
    """Vertex and fragment shader sources."""

    vertex_source: str
    fragment_source: str


@dataclass(frozen=True)
class OutputSpec:
    """Declared output shape and numeric type.

    Attributes:
        numeric_type: Reinterpretation applied to the readback
        width: Output width in pixels
        height: Output height in pixels
    """

    numeric_type: NumericType
    width: int
    height: int

    def __post_init__(self):
        object.__setattr__(self, "numeric_type", NumericType(self.numeric_type))
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Output size must be positive, got {self.width}x{self.height}"
            )

    @property
    def size(self) -> tuple[int, int]:
        """Return (width, height) tuple."""
        return (self.width, self.height)

    @property
    def byte_size(self) -> int:
        """Return the raw readback size in bytes."""
        return self.width * self.height * 4

    @property
    def element_count(self) -> int:
        """Return the number of decoded elements."""
        return self.width * self.height * self.numeric_type.elements_per_pixel


@dataclass(frozen=True)
class ProgramDescriptor:
    """One compute job: shaders, output declaration and ordered inputs."""

    shaders: ShaderPair
    output: OutputSpec
    inputs: tuple[InputBinding, ...] = field(default=())

    def __post_init__(self):
        object.__setattr__(self, "inputs", tuple(self.inputs))
        seen: set[str] = set()
        for binding in self.inputs:
            if binding.name in seen:
                raise ValueError(f"Duplicate input binding name: {binding.name}")
            seen.add(binding.name)

    @property
    def texture_unit_count(self) -> int:
        """Return the number of texture units the inputs consume."""
        return sum(isinstance(b, TEXTURE_BINDINGS) for b in self.inputs)


def output(numeric_type: NumericType | str, size: tuple[int, int]) -> OutputSpec:
    """Declare an output of `numeric_type` and (width, height) `size`."""
    width, height = size
    return OutputSpec(NumericType(numeric_type), int(width), int(height))


def program(
    shaders: tuple[str, str] | ShaderPair,
    result: OutputSpec,
    inputs: Iterable[InputBinding] = (),
) -> ProgramDescriptor:
    """Build a program descriptor.

    Args:
        shaders: ShaderPair or (vertex_source, fragment_source)
        result: Output declaration
        inputs: Ordered input bindings

    Returns:
        Program descriptor
    """
    if not isinstance(shaders, ShaderPair):
        vertex_source, fragment_source = shaders
        shaders = ShaderPair(vertex_source, fragment_source)
    return ProgramDescriptor(shaders, result, tuple(inputs))
