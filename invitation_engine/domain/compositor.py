# invitation_engine/domain/compositor.py
import asyncio
import itertools
import traceback
from enum import Enum
from typing import Callable, Optional

from PIL import Image

from invitation_engine.config.logging_config import get_logger
from invitation_engine.domain.content import resolve_content
from invitation_engine.domain.descriptor import PartyData, TemplateDescriptor
from invitation_engine.domain.errors import ResourceLoadError
from invitation_engine.domain.locales import get_locale
from invitation_engine.infrastructure.assets.fonts import load_font
from invitation_engine.infrastructure.assets.loader import AssetLoader, ImageSource
from invitation_engine.infrastructure.raster import image_process

logger = get_logger(__name__, "COMPOSITOR")


def compose(
    descriptor: TemplateDescriptor,
    party: PartyData,
    background: Optional[Image.Image],
    qr_image: Optional[Image.Image],
    locale: str,
    scale: float = 1,
) -> Image.Image:
    surface = image_process.new_surface(descriptor.canvas_size, scale)

    if background is not None:
        image_process.stretch_to_frame(surface, background)
    elif descriptor.background_color:
        image_process.fill_frame(surface, descriptor.background_color)

    for element in descriptor.elements:
        content = resolve_content(element, party, locale)
        if not content:
            continue
        font = load_font(element.font, max(1, round(element.font_size * scale)))
        xy = (element.position.x * scale, element.position.y * scale)
        # Outline grows stroke_width logical px past the glyph edge
        stroke_width = element.stroke_width * scale if element.has_stroke else 0
        image_process.draw_text(
            surface, content, xy, font, element.color,
            align=element.align,
            stroke_color=element.stroke_color,
            stroke_width=stroke_width,
        )

    qr = descriptor.qr_overlay
    if qr_image is not None and qr is not None:
        image_process.draw_qr(surface, qr_image, (qr.position.x * scale, qr.position.y * scale), qr.size * scale, scale)

    return surface


async def render_invitation(
    descriptor: TemplateDescriptor,
    party: PartyData,
    qr: Optional[ImageSource] = None,
    locale: str = "en",
    scale: float = 1,
    loader: Optional[AssetLoader] = None,
) -> Image.Image:
    """One-shot render. Raises ``ResourceLoadError`` if an image cannot be loaded."""
    loader = loader or AssetLoader()
    snapshot = descriptor.model_copy(deep=True)
    wants_qr = qr is not None and snapshot.qr_overlay is not None

    # The QR fetch does not depend on the background, so it is issued right away
    qr_task = asyncio.ensure_future(loader.load_image(qr, snapshot.theme)) if wants_qr else None
    try:
        background = None
        if snapshot.background_image or not snapshot.background_color:
            background = await loader.load_image(snapshot.background_image, snapshot.theme)
        qr_image = await qr_task if qr_task is not None else None
    except BaseException:
        if qr_task is not None and not qr_task.done():
            qr_task.cancel()
        raise

    return compose(snapshot, party, background, qr_image, locale, scale)


class RenderState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class InvitationCompositor:
    """Preview session. Only the most recently started ``render`` may commit its result."""

    def __init__(
        self,
        loader: Optional[AssetLoader] = None,
        on_complete: Optional[Callable[[Image.Image], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ):
        self.loader = loader or AssetLoader()
        self.on_complete = on_complete
        self.on_error = on_error
        self.state = RenderState.IDLE
        self.surface: Optional[Image.Image] = None
        self.error: Optional[str] = None
        self._tokens = itertools.count(1)
        self._latest = 0

    def _is_current(self, token: int) -> bool:
        return token == self._latest

    async def render(
        self,
        descriptor: TemplateDescriptor,
        party: PartyData,
        qr: Optional[ImageSource] = None,
        locale: str = "en",
        scale: float = 1,
    ) -> Optional[Image.Image]:
        """Render and commit. Returns the committed surface, or None if the render failed or was superseded."""
        token = next(self._tokens)
        self._latest = token
        self.state = RenderState.LOADING
        self.error = None

        try:
            surface = await render_invitation(descriptor, party, qr, locale, scale, loader=self.loader)
        except Exception as e:
            if not self._is_current(token):
                logger.debug(f"Discarding failure of superseded render #{token}.")
                return None
            # The previous surface stays visible underneath the error state
            self.state = RenderState.FAILED
            self.error = get_locale(locale).render_error
            if isinstance(e, ResourceLoadError):
                logger.error(f"Render #{token} of template '{descriptor.id}' failed: {e}")
            else:
                logger.error(f"Render #{token} of template '{descriptor.id}' failed: {e}\n{traceback.format_exc()}")
            if self.on_error is not None:
                self.on_error(e)
            return None

        if not self._is_current(token):
            logger.debug(f"Discarding result of superseded render #{token} (latest is #{self._latest}).")
            return None

        self.surface = surface
        self.state = RenderState.READY
        logger.info(f"Render #{token} of template '{descriptor.id}' committed ({surface.width}x{surface.height}).")
        if self.on_complete is not None:
            self.on_complete(surface)
        return surface
