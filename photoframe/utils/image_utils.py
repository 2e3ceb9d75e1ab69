import io
import math
import os

from PIL import Image, UnidentifiedImageError

from photoframe.defaults import (
    FETCH_TIMEOUT,
    BLANK_FILL_COLOR,
    CROP_FILL_COLOR,
    RESAMPLE_FILTER,
    EXTENSION_FORMATS,
)
from .errors import (
    FetchError,
    DecodeError,
    UnsupportedFormatError,
    InvalidGeometryError,
    OutOfBoundsError,
)
from .fetch_utils import fetch_bytes, local_path


def decode_bytes(data: bytes) -> Image.Image:
    """
    Decodes raw bytes into a fully loaded Pillow image.
    The format is sniffed from the content itself.
    """
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError,
            OSError, ValueError) as e:
        raise DecodeError(f"Not a valid image: {e}") from e
    return image


def load_image(source: str, timeout: float = FETCH_TIMEOUT) -> Image.Image:
    return decode_bytes(fetch_bytes(source, timeout=timeout))


def format_for_path(path: str) -> str:
    """
    Picks the Pillow decoder for 'path' from its extension only
    (case-insensitive, jpeg == jpg). No content sniffing.
    """
    ext = os.path.splitext(path)[1].lstrip(".").lower()
    if ext == "jpeg":
        ext = "jpg"
    fmt = EXTENSION_FORMATS.get(ext)
    if fmt is None:
        raise UnsupportedFormatError(f"Unsupported image type '{ext}' for {path}")
    return fmt


def decode_by_extension(path: str) -> Image.Image:
    fmt = format_for_path(path)
    try:
        with open(local_path(path), "rb") as f:
            data = f.read()
    except OSError as e:
        raise FetchError(f"Failed to read {path}: {e}") from e

    try:
        image = Image.open(io.BytesIO(data), formats=[fmt])
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError,
            OSError, ValueError) as e:
        raise DecodeError(f"{path} is not a valid {fmt} image: {e}") from e
    return image


def width(image: Image.Image) -> int:
    if image is None:
        raise ValueError("image is required")
    return image.width


def height(image: Image.Image) -> int:
    if image is None:
        raise ValueError("image is required")
    return image.height


def _finite(name, value):
    try:
        ok = math.isfinite(value)
    except TypeError:
        ok = False
    if not ok:
        raise InvalidGeometryError(f"{name} must be a finite number, got {value!r}")


def pad_top(image: Image.Image, top_h, display_h) -> Image.Image:
    """
    Adds a gray band above 'image'.
    'top_h' is given against a reference height 'display_h' and is scaled
    to the real image height before padding.
    """
    _finite("top_h", top_h)
    _finite("display_h", display_h)
    if display_h <= 0:
        raise InvalidGeometryError(f"display_h must be positive, got {display_h}")
    if top_h < 0:
        raise InvalidGeometryError(f"top_h must not be negative, got {top_h}")

    org_w, org_h = image.size
    band = org_h / display_h * top_h
    limit = Image.MAX_IMAGE_PIXELS
    if not math.isfinite(band) or (limit and org_w * (org_h + band) > limit):
        raise InvalidGeometryError(
            f"top_h={top_h} at display_h={display_h} asks for a {band}px band "
            f"above a {org_w}x{org_h} image"
        )
    actual_top_h = int(band)

    padded = Image.new("RGB", (org_w, org_h + actual_top_h), BLANK_FILL_COLOR)
    padded.paste(image.convert("RGB"), (0, actual_top_h))
    return padded


def source_box(background_size, display_w, display_h,
               frame_x, frame_y, frame_w, frame_h):
    """
    Maps a rectangle authored against a display_w x display_h view of the
    background into real background pixels.

    Returns (left, top, right, bottom) as floats. The box may reach past the
    background edges; OutOfBoundsError is raised only when it does not
    overlap the background at all.
    """
    for name, value in (("display_w", display_w), ("display_h", display_h),
                        ("frame_x", frame_x), ("frame_y", frame_y),
                        ("frame_w", frame_w), ("frame_h", frame_h)):
        _finite(name, value)
    if display_w <= 0 or display_h <= 0:
        raise InvalidGeometryError(
            f"display size must be positive, got {display_w}x{display_h}"
        )
    if frame_w <= 0 or frame_h <= 0:
        raise InvalidGeometryError(
            f"target rectangle must be positive, got {frame_w}x{frame_h}"
        )

    bg_w, bg_h = background_size
    zoom = bg_w / display_w

    left = zoom * frame_x
    top = zoom * frame_y
    right = left + zoom * frame_w
    bottom = top + zoom * frame_h

    box = (left, top, right, bottom)
    if not all(math.isfinite(v) for v in box) or right <= left or bottom <= top:
        raise InvalidGeometryError(
            f"Rectangle ({frame_x}, {frame_y}, {frame_w}, {frame_h}) at display "
            f"{display_w}x{display_h} does not map to a usable source box"
        )

    if right <= 0 or bottom <= 0 or left >= bg_w or top >= bg_h:
        raise OutOfBoundsError(
            f"Rectangle ({frame_x}, {frame_y}, {frame_w}, {frame_h}) at display "
            f"{display_w}x{display_h} falls outside the {bg_w}x{bg_h} background"
        )
    return box


def _inner_edge(edge, start, scale, snap):
    """
    Snaps a source edge onto a whole output pixel, moving inward.
    Returns (source edge, output pixel).
    """
    exact = round((edge - start) * scale, 6)
    dest = int(snap(exact))
    if dest == exact:
        return edge, dest
    return start + dest / scale, dest


def crop_to_size(image: Image.Image, box, size) -> Image.Image:
    """
    Resamples 'box' of 'image' into an RGB buffer of 'size'.

    The zoom is set by the whole box. Where the box reaches past the image,
    the buffer keeps CROP_FILL_COLOR instead of stretching what is left.
    """
    left, top, right, bottom = box
    out_w, out_h = size
    scale_x = out_w / (right - left)
    scale_y = out_h / (bottom - top)

    x0, dx0 = _inner_edge(max(left, 0.0), left, scale_x, math.ceil)
    y0, dy0 = _inner_edge(max(top, 0.0), top, scale_y, math.ceil)
    x1, dx1 = _inner_edge(min(right, float(image.width)), left, scale_x, math.floor)
    y1, dy1 = _inner_edge(min(bottom, float(image.height)), top, scale_y, math.floor)

    canvas = Image.new("RGB", size, CROP_FILL_COLOR)
    # overlap thinner than one output pixel leaves the buffer blank
    if dx1 > dx0 and dy1 > dy0:
        piece = resample(image, (dx1 - dx0, dy1 - dy0), box=(x0, y0, x1, y1))
        canvas.paste(piece, (dx0, dy0))
    return canvas


def resample(image: Image.Image, size, box=None) -> Image.Image:
    """Resamples 'box' of 'image' (or all of it) into an RGB buffer of 'size'."""
    return image.convert("RGB").resize(size, RESAMPLE_FILTER, box=box)


def overlay_frame(base: Image.Image, frame: Image.Image) -> Image.Image:
    """
    Composites 'frame' over 'base' at (0, 0).
    Transparent frame pixels keep the base, opaque ones replace it.
    """
    canvas = base.convert("RGBA")
    overlay = frame.convert("RGBA")
    if overlay.size != canvas.size:
        raise ValueError(f"frame is {overlay.size}, base is {canvas.size}")
    return Image.alpha_composite(canvas, overlay).convert("RGB")
