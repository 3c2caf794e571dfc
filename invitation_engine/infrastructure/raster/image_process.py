# invitation_engine/infrastructure/raster/image_process.py
from typing import Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

# Horizontal anchor by alignment; vertical anchor is the ascender line (top of the glyph box)
TEXT_ANCHORS = {"left": "la", "center": "ma", "right": "ra"}

QR_BACKING_MARGIN = 5
QR_BACKING_COLOR = "#FFFFFF"


def new_surface(canvas_size: Tuple[int, int], scale: float) -> Image.Image:
    w, h = canvas_size
    return Image.new("RGBA", (max(1, round(w * scale)), max(1, round(h * scale))), (0, 0, 0, 0))


def stretch_to_frame(surface: Image.Image, background: Image.Image) -> None:
    # Fill the frame; the background's own aspect ratio is not preserved
    frame = background.convert("RGBA").resize(surface.size, Image.Resampling.LANCZOS)
    surface.alpha_composite(frame)


def fill_frame(surface: Image.Image, color: str) -> None:
    ImageDraw.Draw(surface).rectangle((0, 0, surface.width, surface.height), fill=color)


def draw_text(
    surface: Image.Image,
    text: str,
    xy: Tuple[float, float],
    font: ImageFont.FreeTypeFont,
    color: str,
    align: str = "left",
    stroke_color: Optional[str] = None,
    stroke_width: float = 0,
) -> None:
    draw = ImageDraw.Draw(surface)
    anchor = TEXT_ANCHORS.get(align, "la")
    if stroke_color and stroke_width:
        outline = max(1, round(stroke_width))
        draw.text(xy, text, font=font, fill=stroke_color, anchor=anchor, stroke_width=outline, stroke_fill=stroke_color)
    draw.text(xy, text, font=font, fill=color, anchor=anchor)


def draw_qr(surface: Image.Image, qr_image: Image.Image, xy: Tuple[float, float], size: float, scale: float) -> None:
    x, y = xy
    margin = QR_BACKING_MARGIN * scale
    ImageDraw.Draw(surface).rectangle(
        (x - margin, y - margin, x + size + margin, y + size + margin),
        fill=QR_BACKING_COLOR,
    )
    side = max(1, round(size))
    qr = qr_image.convert("RGBA").resize((side, side), Image.Resampling.LANCZOS)
    surface.paste(qr, (round(x), round(y)), mask=qr)
