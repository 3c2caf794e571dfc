from pydantic import BaseModel, Field
from typing import List, Optional

from invitation_engine.domain.catalog import Theme
from invitation_engine.domain.descriptor import PartyData, PricingConfig, TemplateDescriptor
from invitation_engine.domain.pricing import EffectivePrice

class RenderRequest(BaseModel):
    template: TemplateDescriptor
    party: PartyData
    qr_code: Optional[str] = None          # URL, file path or data URL of a pre-rendered QR bitmap
    locale: str = "en"
    scale: float = Field(1, gt=0, le=4)

class FoldedCardRequest(BaseModel):
    party: PartyData
    qr_code: Optional[str] = None          # data URL shown in the card's QR slot
    rsvp_url: str = ""
    locale: str = "en"

class PricingRequest(BaseModel):
    pricing: PricingConfig

class TemplateDetail(BaseModel):
    descriptor: TemplateDescriptor
    effective_price: EffectivePrice

class CatalogResponse(BaseModel):
    themes: List[Theme]
    total_templates: int
