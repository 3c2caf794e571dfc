# invitation_engine/infrastructure/export/raster.py
import base64
import re
from io import BytesIO

from PIL import Image


def encode_image(img: Image.Image, fmt: str = "png", quality: int = 88) -> bytes:
    fmt = (fmt or "png").lower()
    # Map to a valid Pillow format string
    if fmt in ("jpg", "jpeg"):
        # JPEG can't have alpha
        if img.mode != "RGB":
            img = img.convert("RGB")
        save_kwargs = dict(format="JPEG", quality=quality, optimize=True)
    elif fmt == "png":
        save_kwargs = dict(format="PNG", optimize=True)
    else:
        save_kwargs = dict(format=fmt.upper())

    buf = BytesIO()
    img.save(buf, **save_kwargs)
    return buf.getvalue()


def export_png(surface: Image.Image) -> bytes:
    return encode_image(surface, "png")


def to_data_url(surface: Image.Image) -> str:
    return "data:image/png;base64," + base64.b64encode(export_png(surface)).decode("ascii")


def download_filename(child_name: str, ext: str = "png") -> str:
    """``"Emma  Rose"`` -> ``Emma-Rose-birthday-invitation.png``."""
    stem = re.sub(r"\s+", "-", (child_name or "").strip()) or "invitation"
    return f"{stem}-birthday-invitation.{ext}"
