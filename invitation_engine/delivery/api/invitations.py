# invitation_engine/delivery/api/invitations.py
from datetime import datetime, timezone
from fastapi import APIRouter, Request, HTTPException, status
from fastapi.responses import HTMLResponse, Response
from invitation_engine.delivery.schemas.body import (
    CatalogResponse,
    FoldedCardRequest,
    PricingRequest,
    RenderRequest,
    TemplateDetail,
)
from invitation_engine.domain.errors import ResourceLoadError, TemplateNotFoundError
from invitation_engine.domain.invitation_service import InvitationService
from invitation_engine.domain.locales import get_locale
from invitation_engine.domain.pricing import EffectivePrice, evaluate
import logging
import traceback

router = APIRouter()
logger = logging.getLogger("uvicorn.error")


def _service(request: Request) -> InvitationService:
    service = getattr(request.app.state, "invitation_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service is not ready. Please try again in a moment.",
        )
    return service


def _attachment(filename: str) -> dict:
    return {"Content-Disposition": f'attachment; filename="{filename}"'}


async def _guarded(label: str, locale: str, coro):
    try:
        return await coro
    except HTTPException:
        raise
    except ResourceLoadError as e:
        logger.warning(f"=== {label} LOAD ERROR: {e} ===")
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=get_locale(locale).render_error)
    except Exception as e:
        logger.error(f"=== {label} ERROR: {e} ===\n{traceback.format_exc()}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error.",
        )


@router.get("/templates", response_model=CatalogResponse)
async def list_templates(request: Request):
    themes = _service(request).themes()
    return CatalogResponse(themes=themes, total_templates=sum(t.template_count for t in themes))


@router.get("/templates/{template_id}", response_model=TemplateDetail)
async def get_template(request: Request, template_id: str):
    try:
        descriptor = _service(request).template(template_id)
    except TemplateNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Template not found")
    return TemplateDetail(descriptor=descriptor, effective_price=evaluate(descriptor.pricing, datetime.now(timezone.utc)))


@router.post("/pricing/effective", response_model=EffectivePrice)
async def effective_price(body: PricingRequest):
    return evaluate(body.pricing, datetime.now(timezone.utc))


@router.post("/render")
async def render_png(request: Request, body: RenderRequest):
    service = _service(request)
    png, filename = await _guarded("RENDER", body.locale, service.render_png(body))
    return Response(content=png, media_type="image/png", headers=_attachment(filename))


@router.post("/render/pdf")
async def render_pdf(request: Request, body: RenderRequest):
    service = _service(request)
    document, filename = await _guarded("RENDER PDF", body.locale, service.render_pdf(body))
    return Response(content=document, media_type="application/pdf", headers=_attachment(filename))


@router.post("/render/print", response_class=HTMLResponse)
async def render_print(request: Request, body: RenderRequest):
    service = _service(request)
    return HTMLResponse(await _guarded("RENDER PRINT", body.locale, service.render_print(body)))


@router.post("/folded-card", response_class=HTMLResponse)
async def folded_card(request: Request, body: FoldedCardRequest):
    return HTMLResponse(_service(request).folded_card(body))


@router.post("/folded-card/pdf")
async def folded_card_pdf(request: Request, body: FoldedCardRequest):
    service = _service(request)
    document, filename = await _guarded("FOLDED CARD PDF", body.locale, service.folded_card_pdf(body))
    return Response(content=document, media_type="application/pdf", headers=_attachment(filename))
