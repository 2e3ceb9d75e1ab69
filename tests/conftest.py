import pytest
from PIL import Image, ImageDraw

from photoframe import create_app

FRAME_BORDER_COLOR = (200, 0, 0, 255)
WINDOW = (20, 20, 180, 180)


def make_background(size=(400, 300)):
    """RGB image whose pixels differ in both directions, so crops are distinguishable."""
    w, h = size
    red = Image.linear_gradient("L").rotate(90, expand=True).resize((w, h))
    green = Image.linear_gradient("L").resize((w, h))
    blue = Image.new("L", (w, h), 64)
    return Image.merge("RGB", (red, green, blue))


def make_frame(size=(200, 200), window=WINDOW):
    """Opaque border with a fully transparent window."""
    frame = Image.new("RGBA", size, FRAME_BORDER_COLOR)
    draw = ImageDraw.Draw(frame)
    left, top, right, bottom = window
    draw.rectangle((left, top, right - 1, bottom - 1), fill=(0, 0, 0, 0))
    return frame


@pytest.fixture
def background_path(tmp_path):
    path = tmp_path / "background.png"
    make_background().save(path, format="PNG")
    return str(path)


@pytest.fixture
def frame_path(tmp_path):
    path = tmp_path / "frame.png"
    make_frame().save(path, format="PNG")
    return str(path)


@pytest.fixture
def client():
    app = create_app({"TESTING": True, "ALLOW_LOCAL_SOURCES": True})
    return app.test_client()
