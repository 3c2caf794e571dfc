# invitation_engine/infrastructure/export/folded_card.py
import html
import re
from io import BytesIO
from typing import Optional

from PIL import Image

from invitation_engine.config.logging_config import get_logger
from invitation_engine.config.settings import settings
from invitation_engine.domain.descriptor import PartyData
from invitation_engine.domain.locales import get_locale
from invitation_engine.infrastructure.export.pdf import export_landscape_pdf

logger = get_logger(__name__, "FOLDED")

# (min, fluid, max) per text role; cqw is relative to the card container width
TYPE_SCALE = {
    "cover_kicker": ("1rem", "4cqw", "2.5rem"),
    "cover_title": ("1.2rem", "6cqw", "3.5rem"),
    "cover_subtitle": ("0.7rem", "2.5cqw", "1.2rem"),
    "section_title": ("0.8rem", "3cqw", "1.8rem"),
    "detail_icon": ("0.8rem", "3cqw", "1.5rem"),
    "detail_label": ("0.6rem", "2.5cqw", "1rem"),
    "detail_value": ("0.5rem", "2cqw", "0.9rem"),
    "rsvp_text": ("0.5rem", "2cqw", "0.9rem"),
    "rsvp_url": ("0.4rem", "1.5cqw", "0.7rem"),
    "closing": ("0.6rem", "2.5cqw", "1.2rem"),
    "body": ("0.6rem", "2.5cqw", "1rem"),
}
QR_SIDE = ("3rem", "12cqw", "8rem")


def _esc(text) -> str:
    return html.escape(str(text)) if text else ""


def fluid(role: str) -> str:
    lo, mid, hi = TYPE_SCALE[role]
    return f"clamp({lo}, {mid}, {hi})"


def _display_url(url: str) -> str:
    return re.sub(r"^https?://", "", url or "")


def _detail(icon: str, label: str, value: str) -> str:
    return f"""
        <div class="detail-item">
          <span class="emoji" style="font-size: {fluid('detail_icon')}">{icon}</span>
          <div>
            <div class="detail-label" style="font-size: {fluid('detail_label')}">{_esc(label)}</div>
            <div class="detail-value" style="font-size: {fluid('detail_value')}">{_esc(value)}</div>
          </div>
        </div>"""


def build_folded_card(party: PartyData, qr_data_url: str, rsvp_url: str, locale: str = "en") -> str:
    grammar = get_locale(locale)
    labels = grammar.card_labels
    when = f"{grammar.date(party.event_start)} · {grammar.time_range(party.event_start, party.event_end)}"

    notes = ""
    if party.notes:
        notes = f"""
        <div class="special-notes">
          <h3 style="font-size: {fluid('body')}">{_esc(labels['notes'])}</h3>
          <p style="font-size: {fluid('detail_value')}">{_esc(party.notes)}</p>
        </div>"""

    qr_slot = ""
    if qr_data_url:
        qr_slot = f"""
        <div class="qr-section">
          <img class="qr-code" src="{_esc(qr_data_url)}" alt="RSVP QR Code"
               style="width: clamp({', '.join(QR_SIDE)}); height: clamp({', '.join(QR_SIDE)})" />
          <div class="rsvp-text" style="font-size: {fluid('rsvp_text')}">{_esc(labels['scan'])}</div>
          <div class="rsvp-url" style="font-size: {fluid('rsvp_url')}">{_esc(labels['visit'])} {_esc(_display_url(rsvp_url))}</div>
        </div>"""

    return f"""<!DOCTYPE html>
<html><head><meta charset="utf-8"><title>{_esc(labels['card_title'])}</title><style>
* {{ box-sizing: border-box; margin: 0; padding: 0; }}
body {{ font-family: 'Georgia', serif; background: white; }}
.invitation-card {{
  container-type: inline-size;
  width: 100%; aspect-ratio: 3 / 2;
  margin: 0 auto; display: flex; position: relative; overflow: hidden;
  border: 3px solid #8B4513; border-radius: 15px; page-break-inside: avoid;
}}
.fold-line {{
  position: absolute; left: 50%; top: 0; bottom: 0; width: 2px; z-index: 10;
  background: repeating-linear-gradient(to bottom, #ccc 0px, #ccc 5px, transparent 5px, transparent 10px);
}}
.left-panel, .right-panel {{ width: 50%; position: relative; }}
.front-cover {{
  height: 100%; padding: clamp(0.8rem, 3cqw, 2rem); text-align: center; color: #8B4513;
  display: flex; flex-direction: column; justify-content: center;
  background: linear-gradient(135deg, #FFE5F1 0%, #FFCCCB 30%, #FFE4B5 100%);
}}
.inner-content {{
  height: 100%; padding: clamp(0.6rem, 2.5cqw, 1.6rem); color: #2C1810;
  display: flex; flex-direction: column; justify-content: space-between;
  background: linear-gradient(45deg, #FFF8DC 0%, #FFFACD 100%);
}}
.detail-item {{ display: flex; align-items: center; margin-bottom: clamp(0.3rem, 1.5cqw, 0.8rem); }}
.emoji {{ margin-right: clamp(0.3rem, 1.5cqw, 0.8rem); }}
.detail-label {{ font-weight: 600; }}
.special-notes {{ background: rgba(255,255,255,0.8); border-left: 4px solid #FF69B4; border-radius: 8px; padding: clamp(0.4rem, 1.5cqw, 1rem); }}
.qr-section {{ text-align: center; background: white; border: 2px solid #DDA0DD; border-radius: 10px; padding: clamp(0.5rem, 2cqw, 1rem); }}
.qr-code {{ display: block; margin: 0 auto clamp(0.3rem, 1cqw, 0.8rem); border-radius: 8px; }}
.rsvp-text {{ color: #8B4513; font-weight: bold; }}
.rsvp-url {{ color: #4B5563; word-break: break-all; }}
.closing {{ text-align: center; color: #DB2777; font-weight: 600; }}
@media print {{
  body {{ -webkit-print-color-adjust: exact; print-color-adjust: exact; }}
  .invitation-card {{ width: 287mm; height: 200mm; aspect-ratio: auto; }}
}}
</style></head><body>
<div class="invitation-card">
  <div class="fold-line"></div>
  <div class="left-panel">
    <div class="front-cover">
      <div style="font-size: {fluid('cover_kicker')}">{_esc(labels['youre_invited'])}</div>
      <div class="title" style="font-size: {fluid('cover_title')}; margin-bottom: clamp(0.5rem, 3cqw, 1.5rem)">{_esc(grammar.possessive(party.child_name))}</div>
      <div class="subtitle" style="font-size: {fluid('cover_subtitle')}; color: #CD853F">{_esc(labels['birthday_party'])}</div>
      <div style="font-size: {fluid('cover_subtitle')}; margin-top: clamp(0.5rem, 2cqw, 1rem)">{_esc(labels['join_us'])}</div>
    </div>
  </div>
  <div class="right-panel">
    <div class="inner-content">
      <div>
        <h2 style="font-size: {fluid('section_title')}; margin-bottom: clamp(0.5rem, 2cqw, 1rem)">{_esc(labels['details'])}</h2>
        <div class="details">{_detail('📅', labels['when'], when)}{_detail('📍', labels['where'], party.location)}{_detail('🎂', labels['age'], labels['years_old'].format(age=party.child_age))}
        </div>{notes}
      </div>{qr_slot}
      <div class="closing" style="font-size: {fluid('closing')}">{_esc(labels['closing'])}</div>
    </div>
  </div>
</div>
</body></html>"""


async def capture_folded_card(card_html: str, width: Optional[int] = None, height: Optional[int] = None) -> bytes:
    """Rasterize the card markup with headless Chromium; returns PNG bytes."""
    from playwright.async_api import async_playwright

    width = width or settings.FOLDED_CARD_WIDTH
    height = height or settings.FOLDED_CARD_HEIGHT
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=True)
        try:
            page = await browser.new_page(viewport={"width": width, "height": height})
            await page.set_content(card_html, wait_until="load")
            png = await page.locator(".invitation-card").screenshot()
        finally:
            await browser.close()
    logger.info(f"Folded card captured at {width}x{height}.")
    return png


async def export_folded_card_pdf(card_html: str) -> bytes:
    png = await capture_folded_card(card_html)
    with Image.open(BytesIO(png)) as capture:
        return export_landscape_pdf(capture)
