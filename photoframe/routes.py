import math
import os

from flask import Blueprint, request, jsonify, send_file, current_app

from photoframe.defaults import OUTPUT_FORMATS
from photoframe.utils.global_utils import log, image_to_bytesio
from photoframe.utils.fetch_utils import is_remote
from photoframe.utils.merge_utils import ImageMerger, DisplayGeometry
from photoframe.utils.errors import (
    MergeError,
    FetchError,
    DecodeError,
    UnsupportedFormatError,
    InvalidGeometryError,
    OutOfBoundsError,
)

main_bp = Blueprint("main", __name__)

# Checked in order, so subclasses come before their parents
ERROR_STATUS = [
    (InvalidGeometryError, 400),
    (UnsupportedFormatError, 415),
    (DecodeError, 422),
    (OutOfBoundsError, 422),
    (FetchError, 502),
]


class RequestError(Exception):
    def __init__(self, message, status=400):
        super().__init__(message)
        self.status = status


def _error(msg, status):
    return jsonify({"error": msg}), status


def _source(data, key):
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise RequestError(f"'{key}' must be a non-empty string")
    value = value.strip()
    if not is_remote(value) and not current_app.config["ALLOW_LOCAL_SOURCES"]:
        raise RequestError(f"Local sources are disabled: {value}", 403)
    return value


def _number(data, key):
    value = data.get(key)
    if value is None or isinstance(value, bool):
        raise RequestError(f"'{key}' is required and must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise RequestError(f"'{key}' must be a number, got {value!r}")
    if not math.isfinite(number):
        raise RequestError(f"'{key}' must be a finite number, got {value!r}")
    return number


def _body():
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise RequestError("Request body must be a JSON object")
    return data


def _section(data, key):
    section = data.get(key)
    if section is None:
        return None
    if not isinstance(section, dict):
        raise RequestError(f"'{key}' must be an object")
    return section


def _output_format(data):
    name = str(data.get("format") or current_app.config["OUTPUT_FORMAT"]).lower()
    if name not in OUTPUT_FORMATS:
        raise RequestError(f"Unknown output format '{name}'")
    fmt, mimetype = OUTPUT_FORMATS[name]
    return name, fmt, mimetype


def _send_image(image, data, basename):
    name, fmt, mimetype = _output_format(data)
    buf = image_to_bytesio(image, fmt)
    return send_file(buf, mimetype=mimetype, download_name=f"{basename}.{name}")


def _merge_error_response(e: MergeError):
    for cls, status in ERROR_STATUS:
        if isinstance(e, cls):
            return _error(str(e), status)
    return _error(str(e), 500)


@main_bp.route("/merge", methods=["POST"])
def merge():
    """
    Merges a background photo with a frame photo.

    JSON body:
      background, frame : image URLs (or paths when local sources are allowed)
      geometry          : optional {display_w, display_h, frame_x, frame_y, frame_w, frame_h};
                          without it the whole background is scaled to the frame
      top_blank         : optional {top_h, display_h}, pads the background first
      format            : optional "png" / "jpeg"
    """
    try:
        data = _body()
        background = _source(data, "background")
        frame = _source(data, "frame")

        geometry = _section(data, "geometry")
        if geometry is not None:
            geometry = DisplayGeometry(*(_number(geometry, f) for f in DisplayGeometry._fields))

        padding = _section(data, "top_blank")
        top_h = display_h = None
        if padding is not None:
            top_h = _number(padding, "top_h")
            display_h = _number(padding, "display_h")

        _output_format(data)
    except RequestError as e:
        log(f"Rejected merge request: {e}", "routes")
        return _error(str(e), e.status)

    mode = "merge_images" if geometry is not None else "scale_to_fit"
    log(f"Merging background={background} frame={frame} mode={mode}", "routes")

    try:
        with ImageMerger(
            background,
            frame,
            timeout=current_app.config["FETCH_TIMEOUT"],
            background_top_h=top_h,
            background_display_h=display_h,
        ) as merger:
            if geometry is not None:
                result = merger.merge_images(*geometry)
            else:
                result = merger.scale_to_fit()
    except MergeError as e:
        log(f"Merge failed ({type(e).__name__}): {e}", "routes")
        return _merge_error_response(e)

    log(f"Merged image size: {result.width}x{result.height}", "routes")
    return _send_image(result, data, "merged")


@main_bp.route("/top-blank", methods=["POST"])
def top_blank():
    try:
        data = _body()
        background = _source(data, "background")
        top_h = _number(data, "top_h")
        display_h = _number(data, "display_h")
        _output_format(data)
    except RequestError as e:
        log(f"Rejected top-blank request: {e}", "routes")
        return _error(str(e), e.status)

    log(f"Padding background={background} top_h={top_h} display_h={display_h}", "routes")
    try:
        result = ImageMerger.add_top_blank(
            background, top_h, display_h,
            timeout=current_app.config["FETCH_TIMEOUT"],
        )
    except MergeError as e:
        log(f"Padding failed ({type(e).__name__}): {e}", "routes")
        return _merge_error_response(e)

    base = os.path.splitext(os.path.basename(background.split("?", 1)[0]))[0] or "background"
    return _send_image(result, data, f"{base}-padded")
