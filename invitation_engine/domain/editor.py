# invitation_engine/domain/editor.py
import json
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, TypeVar

from pydantic import BaseModel

from invitation_engine.config.logging_config import get_logger
from invitation_engine.domain.descriptor import (
    ElementKind,
    PartyData,
    Position,
    PricingConfig,
    QRCodeConfig,
    TemplateDescriptor,
    TemplateElement,
)
from invitation_engine.domain.pricing import EffectivePrice, evaluate

logger = get_logger(__name__, "EDITOR")

M = TypeVar("M", bound=BaseModel)

# Vertical gap between the date line and the time line, in multiples of the font size
SPLIT_LINE_SPACING = 1.5

DEFAULT_QR = QRCodeConfig(position=Position(x=400, y=1100), size=200, dark_color="#000000", light_color="#FFFFFF")


class EditorTab(str, Enum):
    ELEMENTS = "elements"
    QR = "qr"
    PRICING = "pricing"
    PREVIEW_DATA = "preview_data"


def new_text_element() -> TemplateElement:
    return TemplateElement(
        kind=ElementKind.TEXT,
        content="New Text",
        position=Position(x=100, y=100),
        font="Arial-Bold",
        font_size=40,
        color="#000000",
        align="left",
    )


def default_preview_party(now: Optional[datetime] = None) -> PartyData:
    now = now or datetime.now(timezone.utc)
    return PartyData(
        child_name="Emma",
        child_age=5,
        event_start=now + timedelta(days=7),
        location="123 Party Street, City",
        theme="Birthday",
        notes="",
    )


def split_date_time_element(element: TemplateElement) -> List[TemplateElement]:
    """``date_time`` -> ``[date, time]``; the time line sits 1.5 font sizes below the date line."""
    date_part = element.model_copy(deep=True, update={"kind": ElementKind.DATE})
    time_position = Position(
        x=element.position.x,
        y=element.position.y + element.font_size * SPLIT_LINE_SPACING,
    )
    time_part = element.model_copy(deep=True, update={"kind": ElementKind.TIME, "position": time_position})
    return [date_part, time_part]


def _merge_position(current: Position, patch: Any) -> Position:
    if isinstance(patch, Position):
        patch = patch.model_dump(exclude_unset=True)
    return Position.model_validate({**current.model_dump(), **dict(patch)})


def _validated_merge(model: M, patch: Dict[str, Any]) -> M:
    """Merge ``patch`` (field names or config keys) into ``model``; raises ``ValidationError`` on bad values."""
    fields = type(model).model_fields
    data = model.model_dump(by_alias=True)
    for key, value in patch.items():
        field = fields.get(key)
        # Field names are stored under their config key so each value is seen once
        data[(field.alias or key) if field is not None else key] = value
    return type(model).model_validate(data)


def _deny(message: str) -> bool:
    return False


class TemplateEditor:
    def __init__(
        self,
        descriptor: TemplateDescriptor,
        confirm: Callable[[str], bool] = _deny,
        preview_party: Optional[PartyData] = None,
    ):
        self.draft = descriptor.model_copy(deep=True)
        self.confirm = confirm
        self.active_tab = EditorTab.ELEMENTS
        self.preview_party = preview_party or default_preview_party()
        self.notices: List[str] = []
        self._migrate_date_time()

    # --- migration --------------------------------------------------------

    def _migrate_date_time(self) -> None:
        split = 0
        index = 0
        while index < len(self.draft.elements):
            if self.split_date_time(index):
                split += 1
                index += 2
            else:
                index += 1
        if split:
            notice = f"Split {split} combined date/time element(s) into separate date and time lines."
            self.notices.append(notice)
            logger.info(f"Template '{self.draft.id}': {notice}")

    # --- elements ---------------------------------------------------------

    def add_element(self) -> TemplateElement:
        element = new_text_element()
        self.draft.elements.append(element)
        return element

    def update_element(self, index: int, patch: Dict[str, Any]) -> TemplateElement:
        current = self.draft.elements[index]
        patch = dict(patch)
        if "position" in patch:
            patch["position"] = _merge_position(current.position, patch["position"])
        updated = _validated_merge(current, patch)
        self.draft.elements[index] = updated
        return updated

    def remove_element(self, index: int) -> bool:
        element = self.draft.elements[index]
        if not self.confirm(f"Delete element {index + 1} ({element.kind.value})? This cannot be undone."):
            return False
        del self.draft.elements[index]
        return True

    def split_date_time(self, index: int) -> bool:
        element = self.draft.elements[index]
        if element.kind is not ElementKind.DATE_TIME:
            return False
        self.draft.elements[index:index + 1] = split_date_time_element(element)
        return True

    # --- QR overlay -------------------------------------------------------

    def set_qr_overlay(self, patch: Optional[Dict[str, Any]]) -> bool:
        if patch is None:
            if self.draft.qr_overlay is None:
                return True
            if not self.confirm("Remove the QR code from this template?"):
                return False
            self.draft.qr_overlay = None
            return True

        current = self.draft.qr_overlay or DEFAULT_QR.model_copy(deep=True)
        patch = dict(patch)
        if "position" in patch:
            patch["position"] = _merge_position(current.position, patch["position"])
        self.draft.qr_overlay = _validated_merge(current, patch)
        return True

    # --- pricing ----------------------------------------------------------

    def set_pricing(self, patch: Dict[str, Any]) -> PricingConfig:
        self.draft.pricing = _validated_merge(self.draft.pricing, patch)
        return self.draft.pricing

    def effective_price(self, now: Optional[datetime] = None) -> EffectivePrice:
        return evaluate(self.draft.pricing, now or datetime.now(timezone.utc))

    # --- tabs & preview ---------------------------------------------------

    def select_tab(self, tab: EditorTab) -> None:
        self.active_tab = EditorTab(tab)

    def update_preview(self, patch: Dict[str, Any]) -> PartyData:
        self.preview_party = _validated_merge(self.preview_party, patch)
        return self.preview_party

    def snapshot(self) -> TemplateDescriptor:
        """Copy of the draft for a render; later edits never leak into it."""
        return self.draft.model_copy(deep=True)

    # --- JSON -------------------------------------------------------------

    def export_json(self) -> str:
        return json.dumps(self.draft.config_dict(), indent=2, ensure_ascii=False)

    def load_json(self, text: str) -> None:
        """Replace the draft config; raises ``json.JSONDecodeError`` / ``pydantic.ValidationError`` on bad input."""
        config = json.loads(text)
        self.draft = TemplateDescriptor.from_config(self.draft.id, self.draft.theme, config)
        self._migrate_date_time()
