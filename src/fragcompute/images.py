"""External images for `ImageRef` bindings.

An `ImageResource` wraps a path, URL, PIL image or numpy array and resolves
once, asynchronously, to tightly packed RGBA8 rows (top row first). Images
fetched from disk or the network are only considered ready after their load
completes and a settle interval has elapsed.
"""

from __future__ import annotations

import asyncio
import io
import logging
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import numpy as np
from PIL import Image

from fragcompute.config import ComputeConfig
from fragcompute.errors import ImageLoadError

_logger = logging.getLogger(__name__)

URL_SCHEMES = ("http://", "https://", "file://")


@dataclass(frozen=True)
class LoadedImage:
    """Decoded image ready for texture upload.

    Attributes:
        width: Width in pixels
        height: Height in pixels
        data: width * height * 4 RGBA bytes, top row first
    """

    width: int
    height: int
    data: bytes = field(repr=False)

    @property
    def size(self) -> tuple[int, int]:
        """Return (width, height) tuple."""
        return (self.width, self.height)


def _to_loaded(img: Image.Image) -> LoadedImage:
    converted = img.convert("RGBA")
    width, height = converted.size
    return LoadedImage(width=width, height=height, data=converted.tobytes())


class ImageResource:
    """Asynchronously loaded image with a single resolution.

    Example:
        fixed = ImageResource("butterfly2.jpg")
        loaded = await fixed.ready()
        print(loaded.width, loaded.height)
    """

    # Seconds to wait after an external load completes
    SETTLE_DELAY = 0.3
    REQUEST_TIMEOUT = 10  # seconds

    def __init__(
        self,
        source: str | Path | Image.Image | np.ndarray,
        *,
        settle_delay: float | None = None,
        timeout: float | None = None,
    ):
        """Initialize image resource.

        Args:
            source: File path, http(s)/file URL, PIL image or HxW[xC] uint8 array
            settle_delay: Override of SETTLE_DELAY for external sources
            timeout: Override of REQUEST_TIMEOUT for URLs
        """
        self._source = source
        self._settle_delay = self.SETTLE_DELAY if settle_delay is None else settle_delay
        self._timeout = self.REQUEST_TIMEOUT if timeout is None else timeout

        self._loaded: LoadedImage | None = None
        self._task: asyncio.Task | None = None
        self._task_loop: asyncio.AbstractEventLoop | None = None

    def __repr__(self) -> str:
        return f"ImageResource({self.description})"

    @property
    def description(self) -> str:
        """Return a printable description of the source."""
        if isinstance(self._source, Image.Image):
            return f"<PIL image {self._source.size[0]}x{self._source.size[1]}>"
        if isinstance(self._source, np.ndarray):
            return f"<array {'x'.join(str(s) for s in self._source.shape)}>"
        return str(self._source)

    @property
    def is_external(self) -> bool:
        """Return True if the image is read from disk or the network."""
        return not isinstance(self._source, (Image.Image, np.ndarray))

    @property
    def is_ready(self) -> bool:
        """Return True once the image has loaded."""
        return self._loaded is not None

    @property
    def loaded(self) -> LoadedImage | None:
        """Return the decoded image, or None before it is ready."""
        return self._loaded

    async def ready(self) -> LoadedImage:
        """Wait for the image to load.

        Concurrent callers share one load.

        Raises:
            ImageLoadError: If fetching or decoding fails
        """
        if self._loaded is not None:
            return self._loaded

        loop = asyncio.get_running_loop()
        if self._task is None or self._task_loop is not loop:
            self._task = loop.create_task(self._load())
            self._task_loop = loop

        self._loaded = await self._task
        return self._loaded

    async def _load(self) -> LoadedImage:
        source = self._source

        if isinstance(source, Image.Image):
            return _to_loaded(source)

        if isinstance(source, np.ndarray):
            try:
                img = Image.fromarray(np.ascontiguousarray(source, dtype=np.uint8))
            except (TypeError, ValueError) as exc:
                raise ImageLoadError(self.description, str(exc)) from exc
            return _to_loaded(img)

        raw = await asyncio.to_thread(self._fetch)
        loaded = await asyncio.to_thread(self._decode, raw)

        if self._settle_delay > 0:
            await asyncio.sleep(self._settle_delay)

        _logger.debug(
            "Loaded image %s (%dx%d)", self.description, loaded.width, loaded.height
        )
        return loaded

    def _fetch(self) -> bytes:
        """Read the encoded image bytes (runs in a worker thread)."""
        location = str(self._source)
        try:
            if location.startswith(URL_SCHEMES):
                request = urllib.request.Request(
                    location,
                    headers={"User-Agent": "fragcompute"},
                )
                with urllib.request.urlopen(request, timeout=self._timeout) as response:
                    return response.read()
            return Path(location).read_bytes()
        except (urllib.error.URLError, OSError, ValueError) as exc:
            raise ImageLoadError(location, str(exc)) from exc

    def _decode(self, raw: bytes) -> LoadedImage:
        try:
            with Image.open(io.BytesIO(raw)) as img:
                return _to_loaded(img)
        except (OSError, ValueError, Image.DecompressionBombError) as exc:
            raise ImageLoadError(self.description, str(exc)) from exc


async def load_image(source: Any, config: ComputeConfig | None = None) -> ImageResource:
    """Create an image resource and wait until it is ready.

    Args:
        source: Path, URL, PIL image or array (see ImageResource)
        config: Supplies settle delay and request timeout

    Returns:
        Loaded image resource, usable in `image()` bindings
    """
    config = config or ComputeConfig()
    resource = ImageResource(
        source,
        settle_delay=config.settle_delay,
        timeout=config.request_timeout,
    )
    await resource.ready()
    return resource
