# invitation_engine/infrastructure/assets/loader.py
import asyncio
import base64
import binascii
import io
import os
from typing import Optional, Union

import aiofiles
import aiohttp
from PIL import Image, UnidentifiedImageError

from invitation_engine.config.logging_config import get_logger
from invitation_engine.config.settings import settings
from invitation_engine.domain.errors import ResourceLoadError

logger = get_logger(__name__, "ASSETS")

# A pre-rendered QR bitmap may arrive already decoded or as raw bytes
ImageSource = Union[str, bytes, Image.Image]


class AssetLoader:
    """Fetches and decodes background / QR images. Each ``load_image`` call is one suspension point."""

    def __init__(self, base_dir: Optional[str] = None, timeout: Optional[int] = None):
        self.base_dir = base_dir if base_dir is not None else settings.TEMPLATES_DIR
        self.timeout = timeout or settings.REQUEST_TIMEOUT

    def resolve_path(self, ref: str, theme: str = "") -> str:
        """Relative references are looked up next to the theme's template configs."""
        if os.path.isabs(ref) or os.path.isfile(ref):
            return ref
        return os.path.join(self.base_dir, theme, ref.lstrip("/"))

    async def _read_bytes(self, src: str, theme: str) -> bytes:
        if src.startswith(("http://", "https://")):
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(src) as response:
                    response.raise_for_status()
                    return await response.read()
        if src.startswith("data:image"):
            _, encoded = src.split(",", 1)
            return base64.b64decode(encoded)
        path = self.resolve_path(src, theme)
        if os.path.isfile(path):
            async with aiofiles.open(path, "rb") as f:
                return await f.read()
        raise FileNotFoundError(path)

    async def load_image(self, source: ImageSource, theme: str = "") -> Image.Image:
        if isinstance(source, Image.Image):
            return source.convert("RGBA")

        label = source if isinstance(source, str) else f"<{len(source)} bytes>"
        try:
            raw = source if isinstance(source, bytes) else await self._read_bytes(source, theme)
            img = Image.open(io.BytesIO(raw))
            img.load()
            return img.convert("RGBA")
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError, ValueError, binascii.Error, UnidentifiedImageError) as e:
            logger.warning(f"Failed to load image from '{label[:70]}': {type(e).__name__}")
            raise ResourceLoadError(label, f"{type(e).__name__}: {e}") from e
