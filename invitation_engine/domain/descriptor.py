# invitation_engine/domain/descriptor.py
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, model_validator

DEFAULT_CANVAS_SIZE = (1000, 1400)


class ElementKind(str, Enum):
    CHILD_NAME = "child_name"
    CHILD_AGE = "child_age"
    DATE = "date"
    TIME = "time"
    DATE_TIME = "date_time"
    LOCATION = "location"
    THEME = "theme"
    NOTES = "notes"
    TEXT = "text"


TextAlign = Literal["left", "center", "right"]


# Aliases are the key names used in the on-disk template configs
class _Model(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Position(_Model):
    x: float = 0
    y: float = 0


class TemplateElement(_Model):
    kind: ElementKind = Field(ElementKind.TEXT, alias="name")
    content: str = ""
    position: Position = Field(default_factory=Position)
    font: str = "Arial-Bold"
    font_size: float = Field(40, gt=0)
    color: str = "#000000"
    align: TextAlign = "left"
    stroke_color: Optional[str] = None
    stroke_width: Optional[float] = None
    remark: Optional[str] = None

    @property
    def has_stroke(self) -> bool:
        return bool(self.stroke_color) and bool(self.stroke_width)


class QRCodeConfig(_Model):
    position: Position = Field(default_factory=Position)
    size: float = 200
    dark_color: str = Field("#000000", alias="darkColor")
    light_color: str = Field("#FFFFFF", alias="lightColor")


class PricingConfig(_Model):
    price: float = Field(1.39, ge=0)
    currency: str = "USD"
    is_free: bool = Field(False, alias="isFree")
    free_until: Optional[datetime] = Field(None, alias="freeUntil")
    discount_percent: Optional[float] = Field(None, alias="discountPercent")
    original_price: Optional[float] = Field(None, alias="originalPrice")
    discount_ends_at: Optional[datetime] = Field(None, alias="discountEndDate")

    @model_validator(mode="before")
    @classmethod
    def _flatten_discount(cls, data: Any) -> Any:
        # Older configs nest the discount: {"enabled", "percent", "originalPrice", "endDate"}
        if not isinstance(data, dict) or "discount" not in data:
            return data
        data = dict(data)
        discount = data.pop("discount") or {}
        if discount.get("enabled"):
            data.setdefault("discountPercent", discount.get("percent"))
            data.setdefault("originalPrice", discount.get("originalPrice"))
            data.setdefault("discountEndDate", discount.get("endDate"))
        return data


class TemplateDescriptor(_Model):
    id: str = ""
    theme: str = ""
    name: str = ""
    canvas_size: Tuple[PositiveInt, PositiveInt] = DEFAULT_CANVAS_SIZE
    background_image: str = Field("", alias="template")
    background_color: Optional[str] = Field(None, alias="backgroundColor")
    elements: List[TemplateElement] = Field(default_factory=list)
    qr_overlay: Optional[QRCodeConfig] = Field(None, alias="qr_code")
    pricing: PricingConfig = Field(default_factory=PricingConfig)

    @property
    def width(self) -> int:
        return self.canvas_size[0]

    @property
    def height(self) -> int:
        return self.canvas_size[1]

    def config_dict(self) -> Dict[str, Any]:
        """The persisted part of the descriptor, in on-disk key names."""
        return self.model_dump(
            mode="json",
            by_alias=True,
            exclude={"id", "theme", "name"},
            exclude_none=True,
        )

    @classmethod
    def from_config(cls, template_id: str, theme: str, config: Dict[str, Any]) -> "TemplateDescriptor":
        return cls.model_validate({**config, "id": template_id, "theme": theme, "name": display_name(template_id)})


def display_name(template_id: str) -> str:
    """``dinosaur_1`` -> ``Dinosaur 1``."""
    return " ".join(word[:1].upper() + word[1:] for word in template_id.split("_"))


def parse_template_id(template_id: str) -> Optional[Tuple[str, str]]:
    """Split ``theme_index`` into ``(theme, template_id)``; theme names may contain underscores."""
    parts = template_id.split("_")
    if len(parts) < 2 or not all(parts):
        return None
    return "_".join(parts[:-1]), template_id


class PartyData(_Model):
    child_name: str = Field(alias="childName")
    child_age: int = Field(alias="childAge")
    event_start: datetime = Field(alias="eventDatetime")
    event_end: Optional[datetime] = Field(None, alias="eventEndDatetime")
    location: str = ""
    theme: Optional[str] = ""
    notes: Optional[str] = ""
