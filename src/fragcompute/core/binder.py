"""Binding compiler: attaches input bindings to a linked program.

Bindings are processed in list order. Array2D and ImageRef bindings take
texture units 0, 1, 2, ... in the order they appear; uniform bindings take
none.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Sequence

from fragcompute.core.bindings import Array2D, ImageRef, InputBinding, Integer, Scalar, Vector
from fragcompute.errors import UnknownUniform
from fragcompute.gpu.backend import Sampling
from fragcompute.gpu.texture import is_power_of_two

if TYPE_CHECKING:
    from fragcompute.gpu.backend import SurfaceContext
    from fragcompute.gpu.texture import Texture

_logger = logging.getLogger(__name__)


@dataclass
class BindingResult:
    """Outcome of binding one input list.

    Attributes:
        units: Texture unit assigned to each Array2D/ImageRef name
        textures: Textures created (owned by the execution)
        skipped: Names skipped because the program lacks them
    """

    units: dict[str, int] = field(default_factory=dict)
    textures: list[Texture] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def unit_count(self) -> int:
        """Return the number of texture units consumed."""
        return len(self.units)


class BindingCompiler:
    """Binds typed inputs to uniforms and texture units.

    Args:
        context: Surface context that owns the program
        strict: Raise UnknownUniform for names the program lacks; when
            False the binding is logged and skipped
    """

    def __init__(self, context: SurfaceContext, strict: bool = False):
        self._context = context
        self._strict = strict

    async def bind(self, program: Any, inputs: Sequence[InputBinding]) -> BindingResult:
        """Bind `inputs` to `program` in order.

        Args:
            program: Linked program handle
            inputs: Ordered bindings

        Returns:
            Unit assignment and created textures

        Raises:
            UnknownUniform: Strict mode, name absent from the program
            ImageLoadError: An ImageRef failed to load
        """
        result = BindingResult()
        try:
            for binding in inputs:
                await self._bind_one(program, binding, result)
        except BaseException:
            self._context.release(*result.textures)
            result.textures.clear()
            raise
        return result

    async def _bind_one(self, program: Any, binding: InputBinding, result: BindingResult) -> None:
        if isinstance(binding, (Scalar, Integer)):
            if self._check_uniform(program, binding.name, result):
                self._context.set_uniform(program, binding.name, binding.value)

        elif isinstance(binding, Vector):
            if self._check_uniform(program, binding.name, result):
                self._context.set_uniform(program, binding.name, binding.values)

        elif isinstance(binding, Array2D):
            unit = self._next_unit(binding.name, result)
            if not self._check_uniform(program, binding.name, result):
                return
            texture = self._context.create_texture(
                binding.width, binding.height, binding.data, Sampling.EXACT
            )
            self._attach(program, binding.name, texture, unit, result)

        elif isinstance(binding, ImageRef):
            unit = self._next_unit(binding.name, result)
            if not self._check_uniform(program, binding.name, result):
                return
            loaded = await binding.image.ready()
            if is_power_of_two(loaded.width) and is_power_of_two(loaded.height):
                sampling = Sampling.MIPMAP
            else:
                sampling = Sampling.LINEAR_CLAMP
            texture = self._context.create_texture(
                loaded.width, loaded.height, loaded.data, sampling
            )
            self._attach(program, binding.name, texture, unit, result)

        else:
            raise TypeError(f"Unsupported input binding: {type(binding).__name__}")

    def _next_unit(self, name: str, result: BindingResult) -> int:
        unit = result.unit_count
        result.units[name] = unit
        return unit

    def _check_uniform(self, program: Any, name: str, result: BindingResult) -> bool:
        if self._context.has_uniform(program, name):
            return True
        if self._strict:
            raise UnknownUniform(name)
        _logger.warning("Skipping binding '%s': no such active uniform", name)
        result.skipped.append(name)
        return False

    def _attach(
        self,
        program: Any,
        name: str,
        texture: Texture,
        unit: int,
        result: BindingResult,
    ) -> None:
        texture.name = name
        result.textures.append(texture)
        texture.bind_as_sampler(unit)
        self._context.set_uniform(program, name, unit)
        _logger.debug(
            "Bound %s (%dx%d, %s) to texture unit %d",
            name, texture.width, texture.height, texture.sampling.name, unit,
        )
