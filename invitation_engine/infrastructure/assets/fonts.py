# invitation_engine/infrastructure/assets/fonts.py
import os
from functools import lru_cache
from typing import Tuple

from PIL import ImageFont

from invitation_engine.config.logging_config import get_logger
from invitation_engine.config.settings import settings

logger = get_logger(__name__, "FONTS")

# Unknown names are tried as a font file name as-is
FONT_MAP = {
    "LuckiestGuy-Regular": ("LuckiestGuy-Regular.ttf", "Comic Sans MS.ttf", "comic.ttf"),
    "Arial-Bold": ("Arial Bold.ttf", "arialbd.ttf", "Arial.ttf", "arial.ttf"),
    "Arial-Black": ("Arial Black.ttf", "ariblk.ttf", "Arial.ttf", "arial.ttf"),
    "ComicSansMS": ("Comic Sans MS.ttf", "comic.ttf"),
}

REGULAR_FALLBACK = "DejaVuSans.ttf"
BOLD_FALLBACK = "DejaVuSans-Bold.ttf"


def is_bold(font_name: str) -> bool:
    return "Bold" in font_name or "Black" in font_name


def font_candidates(font_name: str) -> Tuple[str, ...]:
    mapped = FONT_MAP.get(font_name)
    if mapped is None:
        mapped = (font_name if font_name.lower().endswith((".ttf", ".otf")) else f"{font_name}.ttf",)
    fallback = BOLD_FALLBACK if is_bold(font_name) else REGULAR_FALLBACK
    return mapped + (fallback,)


def _try_truetype(filename: str, size: int):
    local = os.path.join(settings.FONTS_DIR, filename)
    for path in (local, filename):
        try:
            return ImageFont.truetype(path, size=size)
        except OSError:
            continue
    return None


@lru_cache(maxsize=256)
def load_font(font_name: str, size: int) -> ImageFont.FreeTypeFont:
    for candidate in font_candidates(font_name):
        font = _try_truetype(candidate, size)
        if font is not None:
            return font
    logger.warning(f"No font file found for '{font_name}', using Pillow's built-in face.")
    return ImageFont.load_default(size=size)
