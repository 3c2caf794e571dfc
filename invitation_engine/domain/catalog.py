# invitation_engine/domain/catalog.py
# Layout: <TEMPLATES_DIR>/<theme>/<theme>_<n>.json next to a .png or .jpg, optional theme.json
import json
import os
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError

from invitation_engine.config.logging_config import get_logger
from invitation_engine.config.settings import settings
from invitation_engine.domain.descriptor import TemplateDescriptor, parse_template_id
from invitation_engine.domain.errors import TemplateNotFoundError
from invitation_engine.domain.pricing import EffectivePrice, evaluate

logger = get_logger(__name__, "CATALOG")

DEFAULT_THEME_NAMES: Dict[str, Dict[str, str]] = {
    "default": {"zh": "默认", "en": "Default", "icon": "🎈"},
    "dinosaur": {"zh": "恐龙", "en": "Dinosaur", "icon": "🦖"},
    "princess": {"zh": "公主", "en": "Princess", "icon": "👸"},
    "superhero": {"zh": "超级英雄", "en": "Superhero", "icon": "🦸"},
    "unicorn": {"zh": "独角兽", "en": "Unicorn", "icon": "🦄"},
    "pirate": {"zh": "海盗", "en": "Pirate", "icon": "🏴‍☠️"},
    "space": {"zh": "太空", "en": "Space", "icon": "🚀"},
    "safari": {"zh": "丛林探险", "en": "Safari", "icon": "🦁"},
    "mermaid": {"zh": "美人鱼", "en": "Mermaid", "icon": "🧜‍♀️"},
    "cars": {"zh": "汽车", "en": "Cars", "icon": "🚗"},
    "robot": {"zh": "机器人", "en": "Robot", "icon": "🤖"},
    "fairy": {"zh": "精灵", "en": "Fairy", "icon": "🧚"},
    "sports": {"zh": "运动", "en": "Sports", "icon": "⚽"},
}
THEME_METADATA_FILE = "theme.json"
IMAGE_EXTENSIONS = (".png", ".jpg")


class CatalogTemplate(BaseModel):
    descriptor: TemplateDescriptor
    image_url: str
    effective_price: EffectivePrice


class Theme(BaseModel):
    id: str
    name: Dict[str, str]
    description: Optional[Dict[str, str]] = None
    icon: str
    templates: List[CatalogTemplate] = Field(default_factory=list)

    @property
    def template_count(self) -> int:
        return len(self.templates)


def _read_json(path: str) -> Optional[dict]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Failed to parse {path}: {e}")
        return None


def _find_image(files: List[str], base_name: str) -> Optional[str]:
    for ext in IMAGE_EXTENSIONS:
        if f"{base_name}{ext}" in files:
            return f"{base_name}{ext}"
    return None


def _load_theme(theme_dir: str, theme_id: str, now: datetime) -> Optional[Theme]:
    files = sorted(os.listdir(theme_dir))
    templates: List[CatalogTemplate] = []

    for json_file in files:
        if not json_file.endswith(".json") or json_file == THEME_METADATA_FILE:
            continue
        base_name = json_file[: -len(".json")]
        config = _read_json(os.path.join(theme_dir, json_file))
        if config is None:
            continue

        image_file = _find_image(files, base_name)
        if image_file is None and not config.get("backgroundColor"):
            logger.warning(f"Missing image for template: {json_file} in {theme_id}")
            continue
        if image_file is not None and not config.get("template"):
            config["template"] = image_file

        try:
            descriptor = TemplateDescriptor.from_config(base_name, theme_id, config)
        except ValidationError as e:
            logger.warning(f"Invalid template config {json_file} in {theme_id}: {e.error_count()} error(s)")
            continue

        templates.append(CatalogTemplate(
            descriptor=descriptor,
            image_url=f"/invitations/{theme_id}/{image_file}" if image_file else "",
            effective_price=evaluate(descriptor.pricing, now),
        ))

    if not templates:
        return None

    metadata = _read_json(os.path.join(theme_dir, THEME_METADATA_FILE)) if THEME_METADATA_FILE in files else None
    metadata = metadata or {}
    fallback_label = theme_id[:1].upper() + theme_id[1:]
    defaults = DEFAULT_THEME_NAMES.get(theme_id, {"zh": fallback_label, "en": fallback_label, "icon": "🎉"})
    return Theme(
        id=theme_id,
        name=metadata.get("name") or {"zh": defaults["zh"], "en": defaults["en"]},
        description=metadata.get("description"),
        icon=metadata.get("icon") or defaults["icon"],
        templates=templates,
    )


def load_catalog(now: datetime, templates_dir: Optional[str] = None) -> List[Theme]:
    templates_dir = templates_dir or settings.TEMPLATES_DIR
    if not os.path.isdir(templates_dir):
        logger.warning(f"Templates directory does not exist: {templates_dir}")
        return []

    themes = []
    for theme_id in sorted(os.listdir(templates_dir)):
        theme_dir = os.path.join(templates_dir, theme_id)
        if not os.path.isdir(theme_dir):
            continue
        theme = _load_theme(theme_dir, theme_id, now)
        if theme is not None:
            themes.append(theme)
    logger.info(f"Catalog loaded: {len(themes)} theme(s), {sum(t.template_count for t in themes)} template(s).")
    return themes


def load_template(template_id: str, templates_dir: Optional[str] = None) -> TemplateDescriptor:
    templates_dir = templates_dir or settings.TEMPLATES_DIR
    parsed = parse_template_id(template_id)
    if parsed is None:
        raise TemplateNotFoundError(template_id)
    theme, base_name = parsed
    path = os.path.join(templates_dir, theme, f"{base_name}.json")
    config = _read_json(path) if os.path.isfile(path) else None
    if config is None:
        raise TemplateNotFoundError(template_id)
    if not config.get("template"):
        image_file = _find_image(os.listdir(os.path.join(templates_dir, theme)), base_name)
        if image_file is not None:
            config["template"] = image_file
    return TemplateDescriptor.from_config(template_id, theme, config)
