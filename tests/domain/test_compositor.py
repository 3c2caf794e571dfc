"""Compositing Engine Tests: descriptor + party data -> raster surface.

Invariants:
    - Identical inputs produce byte-identical surfaces
    - Elements resolving to an empty string leave no pixels behind
    - The background is stretched to exactly canvas_size * scale
    - Only the most recently started render commits; stale results are dropped
    - A failed load leaves the previous surface in place and sets FAILED
    - Positions, outlines and the QR backing scale with the output scale
"""

import asyncio

import pytest
from PIL import Image, ImageOps

from invitation_engine.domain.compositor import (
    InvitationCompositor,
    RenderState,
    compose,
    render_invitation,
)
from invitation_engine.domain.descriptor import ElementKind, Position, QRCodeConfig
from invitation_engine.domain.errors import ResourceLoadError
from invitation_engine.domain.locales import get_locale

WHITE = (255, 255, 255, 255)
RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)


def _solid(color, size=(10, 14)):
    return Image.new("RGBA", size, color)


def _all_white(img):
    return img.convert("RGB").getextrema() == ((255, 255), (255, 255), (255, 255))


def _ink_box(img):
    """Bounding box of every non-white pixel."""
    return ImageOps.invert(img.convert("L")).getbbox()


class GatedLoader:
    """Serves solid images by name; named sources can be held back until released."""

    def __init__(self, colors):
        self.colors = colors
        self.gates = {}
        self.calls = []

    def hold(self, source):
        self.gates[source] = asyncio.Event()
        return self.gates[source]

    async def load_image(self, source, theme=""):
        self.calls.append(source)
        gate = self.gates.get(source)
        if gate is not None:
            await gate.wait()
        if source not in self.colors:
            raise ResourceLoadError(source, "not found")
        return _solid(self.colors[source])


# --- compose ------------------------------------------------------------------


def test_compose_is_deterministic(make_descriptor, make_element, party):
    descriptor = make_descriptor(elements=[
        make_element(ElementKind.CHILD_NAME, x=500, y=300, align="center", font_size=60),
        make_element(ElementKind.DATE_TIME, x=100, y=900, stroke_color="#FF0000", stroke_width=2),
    ])
    bg = _solid(WHITE)
    first = compose(descriptor, party, bg, None, "en")
    second = compose(descriptor, party, bg, None, "en")
    assert first.tobytes() == second.tobytes()


def test_empty_notes_element_draws_nothing(make_descriptor, make_element, party):
    name = make_element(ElementKind.CHILD_NAME, x=50, y=50)
    notes = make_element(ElementKind.NOTES, x=50, y=600)
    bg = _solid(WHITE)
    with_notes = compose(make_descriptor(elements=[name, notes]), party, bg, None, "en")
    without_notes = compose(make_descriptor(elements=[name]), party, bg, None, "en")
    assert with_notes.tobytes() == without_notes.tobytes()


def test_surface_size_follows_scale(make_descriptor, party):
    descriptor = make_descriptor(canvas_size=(300, 420))
    assert compose(descriptor, party, _solid(WHITE), None, "en").size == (300, 420)
    assert compose(descriptor, party, _solid(WHITE), None, "en", scale=2).size == (600, 840)


def test_background_color_fill_without_image(make_descriptor, party):
    descriptor = make_descriptor(canvas_size=(40, 40)).model_copy(
        update={"background_image": "", "background_color": "#00FF00"}
    )
    surface = compose(descriptor, party, None, None, "en")
    assert surface.getpixel((20, 20)) == (0, 255, 0, 255)


def test_stroke_is_drawn_around_text(make_descriptor, make_element, party):
    descriptor = make_descriptor(canvas_size=(600, 200), elements=[
        make_element(ElementKind.CHILD_NAME, x=20, y=20, font_size=80, stroke_color="#FF0000", stroke_width=3),
    ])
    surface = compose(descriptor, party, _solid(WHITE), None, "en").convert("RGB")
    colors = {c for _, c in surface.getcolors(maxcolors=600 * 200)}
    assert (255, 0, 0) in colors
    assert (0, 0, 0) in colors


def test_text_position_follows_scale(make_descriptor, make_element, party):
    descriptor = make_descriptor(canvas_size=(400, 200), elements=[
        make_element(ElementKind.CHILD_NAME, x=40, y=30, font_size=40),
    ])
    left, top, right, bottom = _ink_box(compose(descriptor, party, _solid(WHITE), None, "en"))
    surface = compose(descriptor, party, _solid(WHITE), None, "en", scale=2)
    left2, top2, right2, bottom2 = _ink_box(surface)

    assert left >= 40 and top >= 30
    assert abs(left2 - 2 * left) <= 3
    assert abs(top2 - 2 * top) <= 3
    assert (right2 - left2) == pytest.approx(2 * (right - left), rel=0.1)
    assert (bottom2 - top2) == pytest.approx(2 * (bottom - top), rel=0.1)
    assert _all_white(surface.crop((0, 0, 800, 60)))


@pytest.mark.parametrize("scale", [1, 2])
def test_stroke_extends_stroke_width_past_glyph(make_descriptor, make_element, party, scale):
    plain = make_element(x=100, y=40, content="I", font_size=80)
    outlined = plain.model_copy(update={"stroke_color": "#FF0000", "stroke_width": 4})
    bg = _solid(WHITE)
    plain_box = _ink_box(compose(make_descriptor(canvas_size=(300, 200), elements=[plain]), party, bg, None, "en", scale))
    outlined_box = _ink_box(compose(make_descriptor(canvas_size=(300, 200), elements=[outlined]), party, bg, None, "en", scale))

    expected = 4 * scale
    assert expected - 1 <= plain_box[0] - outlined_box[0] <= expected + 1
    assert expected - 1 <= outlined_box[2] - plain_box[2] <= expected + 1
    assert expected - 1 <= plain_box[1] - outlined_box[1] <= expected + 1


# --- end to end ---------------------------------------------------------------


@pytest.mark.asyncio
async def test_render_child_name_on_stretched_background(make_descriptor, make_element, make_background, party):
    descriptor = make_descriptor(
        background=make_background(WHITE, size=(100, 140)),
        elements=[make_element(ElementKind.CHILD_NAME, x=50, y=50, font_size=40, color="#000000")],
    )
    surface = await render_invitation(descriptor, party, locale="en")

    assert surface.size == (1000, 1400)
    text_region = surface.crop((50, 50, 450, 110)).convert("L")
    assert text_region.getextrema()[0] < 10
    assert _all_white(surface.crop((0, 0, 1000, 48)))
    assert _all_white(surface.crop((0, 200, 1000, 1400)))


@pytest.mark.asyncio
async def test_qr_is_drawn_over_white_backing(make_descriptor, make_background, party):
    descriptor = make_descriptor(
        canvas_size=(300, 300),
        background=make_background(RED, size=(30, 30)),
        qr_overlay=QRCodeConfig(position=Position(x=100, y=100), size=50),
    )
    surface = await render_invitation(descriptor, party, qr=_solid((0, 0, 0, 255), (20, 20)))

    assert surface.getpixel((97, 97)) == WHITE
    assert surface.getpixel((152, 152)) == WHITE
    assert surface.getpixel((125, 125)) == (0, 0, 0, 255)
    assert surface.getpixel((90, 90)) == RED


@pytest.mark.asyncio
async def test_qr_backing_follows_scale(make_descriptor, make_background, party):
    descriptor = make_descriptor(
        canvas_size=(300, 300),
        background=make_background(RED, size=(30, 30)),
        qr_overlay=QRCodeConfig(position=Position(x=100, y=100), size=50),
    )
    surface = await render_invitation(descriptor, party, qr=_solid((0, 0, 0, 255), (20, 20)), scale=2)

    assert surface.size == (600, 600)
    assert surface.getpixel((191, 191)) == WHITE
    assert surface.getpixel((308, 308)) == WHITE
    assert surface.getpixel((250, 250)) == (0, 0, 0, 255)
    assert surface.getpixel((185, 185)) == RED
    assert surface.getpixel((97, 97)) == RED


@pytest.mark.asyncio
async def test_qr_skipped_without_overlay_slot(make_descriptor, make_background, party):
    descriptor = make_descriptor(canvas_size=(300, 300), background=make_background(RED, size=(30, 30)))
    surface = await render_invitation(descriptor, party, qr=_solid((0, 0, 0, 255), (20, 20)))
    assert surface.getpixel((97, 97)) == RED
    assert surface.getpixel((125, 125)) == RED


@pytest.mark.asyncio
async def test_render_missing_background_raises(make_descriptor, party, tmp_path):
    descriptor = make_descriptor(background=str(tmp_path / "nope.png"))
    with pytest.raises(ResourceLoadError):
        await render_invitation(descriptor, party)


# --- last-started-wins --------------------------------------------------------


@pytest.mark.asyncio
async def test_stale_render_is_discarded(make_descriptor, party):
    loader = GatedLoader({"slow.png": RED, "fast.png": BLUE})
    gate = loader.hold("slow.png")
    compositor = InvitationCompositor(loader=loader)

    slow = asyncio.create_task(compositor.render(make_descriptor(canvas_size=(20, 20), background="slow.png"), party))
    await asyncio.sleep(0)
    committed = await compositor.render(make_descriptor(canvas_size=(20, 20), background="fast.png"), party)
    gate.set()
    stale = await slow

    assert stale is None
    assert committed is compositor.surface
    assert compositor.surface.getpixel((5, 5)) == BLUE
    assert compositor.state is RenderState.READY


@pytest.mark.asyncio
async def test_stale_failure_does_not_mark_failed(make_descriptor, party):
    loader = GatedLoader({"fast.png": BLUE})
    gate = loader.hold("broken.png")
    errors = []
    compositor = InvitationCompositor(loader=loader, on_error=errors.append)

    broken = asyncio.create_task(compositor.render(make_descriptor(canvas_size=(20, 20), background="broken.png"), party))
    await asyncio.sleep(0)
    await compositor.render(make_descriptor(canvas_size=(20, 20), background="fast.png"), party)
    gate.set()
    assert await broken is None

    assert compositor.state is RenderState.READY
    assert compositor.error is None
    assert errors == []


@pytest.mark.asyncio
async def test_failed_load_keeps_previous_surface(make_descriptor, party):
    loader = GatedLoader({"ok.png": BLUE})
    errors = []
    completed = []
    compositor = InvitationCompositor(loader=loader, on_complete=completed.append, on_error=errors.append)

    first = await compositor.render(make_descriptor(canvas_size=(20, 20), background="ok.png"), party)
    result = await compositor.render(make_descriptor(canvas_size=(20, 20), background="gone.png"), party, locale="zh")

    assert result is None
    assert compositor.state is RenderState.FAILED
    assert compositor.error == get_locale("zh").render_error
    assert compositor.surface is first
    assert completed == [first]
    assert len(errors) == 1 and isinstance(errors[0], ResourceLoadError)


@pytest.mark.asyncio
async def test_drawing_error_marks_render_failed(make_descriptor, make_element, party):
    loader = GatedLoader({"ok.png": BLUE})
    errors = []
    compositor = InvitationCompositor(loader=loader, on_error=errors.append)

    first = await compositor.render(make_descriptor(canvas_size=(20, 20), background="ok.png"), party)
    bad_color = make_descriptor(
        canvas_size=(20, 20), background="ok.png",
        elements=[make_element(ElementKind.CHILD_NAME, x=1, y=1, color="#12")],
    )
    result = await compositor.render(bad_color, party)

    assert result is None
    assert compositor.state is RenderState.FAILED
    assert compositor.error == get_locale("en").render_error
    assert compositor.surface is first
    assert len(errors) == 1 and isinstance(errors[0], ValueError)


@pytest.mark.asyncio
async def test_qr_fetch_starts_before_background_resolves(make_descriptor, party):
    loader = GatedLoader({"bg.png": WHITE, "qr.png": (0, 0, 0, 255)})
    gate = loader.hold("bg.png")
    descriptor = make_descriptor(
        canvas_size=(40, 40), background="bg.png",
        qr_overlay=QRCodeConfig(position=Position(x=10, y=10), size=10),
    )
    task = asyncio.create_task(render_invitation(descriptor, party, qr="qr.png", loader=loader))
    await asyncio.sleep(0)
    await asyncio.sleep(0)
    assert set(loader.calls) == {"bg.png", "qr.png"}
    gate.set()
    surface = await task
    assert surface.getpixel((15, 15)) == (0, 0, 0, 255)


@pytest.mark.asyncio
async def test_render_uses_snapshot_of_descriptor(make_descriptor, make_element, party):
    loader = GatedLoader({"bg.png": WHITE})
    gate = loader.hold("bg.png")
    descriptor = make_descriptor(canvas_size=(200, 100), background="bg.png")
    task = asyncio.create_task(render_invitation(descriptor, party, loader=loader))
    await asyncio.sleep(0)
    descriptor.elements.append(make_element(ElementKind.CHILD_NAME, x=10, y=10))
    gate.set()
    surface = await task
    assert _all_white(surface)
