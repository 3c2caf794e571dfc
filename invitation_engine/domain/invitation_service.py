# invitation_engine/domain/invitation_service.py
import os
import time
from datetime import datetime, timezone
from typing import List, Optional, Tuple

import psutil
from PIL import Image

from invitation_engine.config.logging_config import get_logger
from invitation_engine.delivery.schemas.body import FoldedCardRequest, RenderRequest
from invitation_engine.domain import catalog
from invitation_engine.domain.compositor import render_invitation
from invitation_engine.domain.descriptor import TemplateDescriptor
from invitation_engine.domain.locales import get_locale
from invitation_engine.infrastructure.assets.loader import AssetLoader
from invitation_engine.infrastructure.export import folded_card, pdf, print_document, raster

logger = get_logger(__name__)


def _memory_mb() -> Optional[float]:
    try:
        return psutil.Process(os.getpid()).memory_info().rss / 1024 / 1024
    except psutil.Error as mem_error:
        logger.warning(f"Could not get memory info: {mem_error}")
        return None


class InvitationService:
    def __init__(self, loader: Optional[AssetLoader] = None, templates_dir: Optional[str] = None):
        self.loader = loader or AssetLoader(base_dir=templates_dir)
        self.templates_dir = templates_dir

    async def render(self, req: RenderRequest) -> Image.Image:
        run_id = req.template.id or "<draft>"
        logger.info(f"=== START RENDER template: {run_id} (locale={req.locale}, scale={req.scale}) ===")
        memory_mb = _memory_mb()
        if memory_mb is not None:
            logger.info(f"Memory usage at start: {memory_mb:.1f}MB for template: {run_id}")

        start = time.perf_counter()
        surface = await render_invitation(
            req.template, req.party, req.qr_code, req.locale, req.scale, loader=self.loader,
        )
        logger.info(f"=== COMPLETED RENDER template: {run_id} in {time.perf_counter() - start:.2f}s "
                    f"({surface.width}x{surface.height}) ===")
        return surface

    async def render_png(self, req: RenderRequest) -> Tuple[bytes, str]:
        surface = await self.render(req)
        return raster.export_png(surface), raster.download_filename(req.party.child_name, "png")

    async def render_pdf(self, req: RenderRequest) -> Tuple[bytes, str]:
        surface = await self.render(req)
        title = get_locale(req.locale).print_title(req.party.child_name)
        return pdf.export_pdf(surface, title=title), raster.download_filename(req.party.child_name, "pdf")

    async def render_print(self, req: RenderRequest) -> str:
        surface = await self.render(req)
        return print_document.build_print_document(surface, req.party.child_name, req.locale)

    def folded_card(self, req: FoldedCardRequest) -> str:
        return folded_card.build_folded_card(req.party, req.qr_code or "", req.rsvp_url, req.locale)

    async def folded_card_pdf(self, req: FoldedCardRequest) -> Tuple[bytes, str]:
        start = time.perf_counter()
        document = await folded_card.export_folded_card_pdf(self.folded_card(req))
        logger.info(f"Folded card PDF for '{req.party.child_name}' built in {time.perf_counter() - start:.2f}s.")
        return document, raster.download_filename(req.party.child_name, "pdf")

    def themes(self, now: Optional[datetime] = None) -> List[catalog.Theme]:
        return catalog.load_catalog(now or datetime.now(timezone.utc), self.templates_dir)

    def template(self, template_id: str) -> TemplateDescriptor:
        return catalog.load_template(template_id, self.templates_dir)
