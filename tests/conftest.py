"""Root conftest: shared fixtures for descriptors, party data and background images."""

from datetime import datetime

import pytest
from PIL import Image

from invitation_engine.domain.descriptor import (
    ElementKind,
    PartyData,
    Position,
    TemplateDescriptor,
    TemplateElement,
)

WHITE = (255, 255, 255, 255)


@pytest.fixture
def party():
    return PartyData(
        child_name="Emma",
        child_age=5,
        event_start=datetime(2026, 1, 15, 14, 30),
        event_end=datetime(2026, 1, 15, 16, 30),
        location="123 Party Street, City",
        theme="Dinosaur",
        notes="",
    )


@pytest.fixture
def make_background(tmp_path):
    """Writes a solid-color PNG and returns its absolute path."""
    def _make(color=WHITE, size=(100, 140), name="background.png"):
        path = tmp_path / name
        Image.new("RGBA", size, color).save(path)
        return str(path)
    return _make


@pytest.fixture
def make_descriptor(make_background):
    def _make(elements=None, canvas_size=(1000, 1400), background=None, **kwargs):
        return TemplateDescriptor(
            id="dinosaur_1",
            theme="dinosaur",
            name="Dinosaur 1",
            canvas_size=canvas_size,
            background_image=background or make_background(),
            elements=elements or [],
            **kwargs,
        )
    return _make


@pytest.fixture
def make_element():
    def _make(kind=ElementKind.TEXT, x=50, y=50, **kwargs) -> TemplateElement:
        return TemplateElement(kind=kind, position=Position(x=x, y=y), **kwargs)
    return _make
