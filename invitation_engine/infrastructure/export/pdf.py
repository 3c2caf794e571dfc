# invitation_engine/infrastructure/export/pdf.py
from io import BytesIO
from typing import Optional, Tuple

from PIL import Image
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from invitation_engine.config.settings import settings


def fit_on_page(image_size: Tuple[int, int], page_size: Tuple[float, float], margin: float) -> Tuple[float, float, float, float]:
    """Largest aspect-preserving box inside the page margins, centered. Returns ``(x, y, w, h)`` in points."""
    img_w, img_h = image_size
    page_w, page_h = page_size
    ratio = min((page_w - 2 * margin) / img_w, (page_h - 2 * margin) / img_h)
    w, h = img_w * ratio, img_h * ratio
    return (page_w - w) / 2.0, (page_h - h) / 2.0, w, h


def export_pdf(
    surface: Image.Image,
    page_size: Tuple[float, float] = A4,
    margin_mm: Optional[float] = None,
    title: Optional[str] = None,
) -> bytes:
    """Single-page PDF with the rendered invitation centered inside fixed margins."""
    margin = (settings.PDF_MARGIN_MM if margin_mm is None else margin_mm) * mm
    x, y, w, h = fit_on_page(surface.size, page_size, margin)

    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=page_size, invariant=1)
    if title:
        c.setTitle(title)
    c.drawImage(ImageReader(surface.convert("RGB")), x, y, width=w, height=h)
    c.showPage()
    c.save()
    return buf.getvalue()


def export_landscape_pdf(surface: Image.Image, margin_mm: Optional[float] = None, title: Optional[str] = None) -> bytes:
    return export_pdf(surface, page_size=landscape(A4), margin_mm=margin_mm, title=title)
