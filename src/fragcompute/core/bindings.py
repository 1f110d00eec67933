"""Typed input bindings for compute programs.

A binding attaches one named value to the linked program. Scalars and
vectors set uniforms directly; 2-D arrays and images become textures read
through sampler uniforms, each on its own texture unit.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

import numpy as np

if TYPE_CHECKING:
    from fragcompute.images import ImageResource


@dataclass(frozen=True)
class Scalar:
    """`uniform float` value."""

    name: str
    value: float


@dataclass(frozen=True)
class Integer:
    """`uniform int` value."""

    name: str
    value: int


@dataclass(frozen=True)
class Vector:
    """`vec2`..`vec4` float uniform."""

    name: str
    values: tuple[float, ...]

    def __post_init__(self):
        if not 2 <= len(self.values) <= 4:
            raise ValueError(
                f"Vector '{self.name}' needs 2 to 4 components, got {len(self.values)}"
            )


@dataclass(frozen=True)
class Array2D:
    """RGBA-packed byte grid uploaded as an exact (unfiltered) texture.

    Attributes:
        name: Sampler uniform name
        width: Grid width in texels
        height: Grid height in texels
        data: width * height * 4 bytes, rows tightly packed
    """

    name: str
    width: int
    height: int
    data: bytes

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Array2D '{self.name}' size must be positive, "
                f"got {self.width}x{self.height}"
            )
        expected = self.width * self.height * 4
        if len(self.data) != expected:
            raise ValueError(
                f"Array2D '{self.name}' data has {len(self.data)} bytes, "
                f"expected {self.width}x{self.height}x4 = {expected}"
            )


@dataclass(frozen=True)
class ImageRef:
    """External image uploaded as a texture once it has loaded."""

    name: str
    image: ImageResource


InputBinding = Union[Scalar, Integer, Vector, Array2D, ImageRef]

# Bindings that consume a texture unit
TEXTURE_BINDINGS = (Array2D, ImageRef)


def uniform1f(name: str, value: float) -> Scalar:
    """Bind a float uniform."""
    return Scalar(name, float(value))


def uniform1i(name: str, value: int) -> Integer:
    """Bind an int uniform."""
    return Integer(name, int(value))


def uniform_vec(name: str, *values: float) -> Vector:
    """Bind a vec2/vec3/vec4 uniform."""
    return Vector(name, tuple(float(v) for v in values))


def array2d(name: str, size: tuple[int, int], data) -> Array2D:
    """Bind a 2-D RGBA byte array.

    Args:
        name: Sampler uniform name
        size: (width, height) in texels
        data: Bytes-like object or uint8 array of width * height * 4 values
    """
    width, height = size
    if isinstance(data, np.ndarray):
        data = np.ascontiguousarray(data, dtype=np.uint8).tobytes()
    else:
        data = bytes(data)
    return Array2D(name, width, height, data)


def image(name: str, resource: ImageResource) -> ImageRef:
    """Bind an external image."""
    return ImageRef(name, resource)
