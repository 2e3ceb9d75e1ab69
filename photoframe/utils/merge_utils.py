from collections import namedtuple

from PIL import Image

from photoframe.defaults import FETCH_TIMEOUT
from . import image_utils
from .image_utils import (
    load_image,
    pad_top,
    source_box,
    crop_to_size,
    resample,
    overlay_frame,
)


# Authoring-time geometry: the reference size of the background and the
# window inside the frame where it shows through.
DisplayGeometry = namedtuple(
    "DisplayGeometry",
    ["display_w", "display_h", "frame_x", "frame_y", "frame_w", "frame_h"],
)


class ImageMerger:
    """
    Puts a frame photo (with transparent parts) over a background photo.

    The background is cropped and scaled so that it fills the frame's visible
    window, then the frame is composited on top. Typical use: drop a profile
    photo behind a magazine cover frame.

    A merger owns both decoded images. Close it (or use it as a context
    manager) to release them.
    """

    def __init__(self, background_source: str, frame_source: str,
                 timeout: float = FETCH_TIMEOUT,
                 background_top_h=None, background_display_h=None):
        self._background = None
        self._frame = None
        self.background_w = self.background_h = 0
        self.frame_w = self.frame_h = 0

        try:
            if background_top_h is not None and background_display_h is not None:
                # Frames often carry a masthead over the top of the window;
                # pad the background so the subject's face stays visible.
                self.background = self.add_top_blank(
                    background_source, background_top_h, background_display_h,
                    timeout=timeout,
                )
            else:
                self.background = load_image(background_source, timeout=timeout)
            self.frame = load_image(frame_source, timeout=timeout)
        except Exception:
            self.close()
            raise

    @property
    def background(self) -> Image.Image:
        return self._background

    @background.setter
    def background(self, image: Image.Image):
        self._background = image
        self.background_w = self.width(image)
        self.background_h = self.height(image)

    @property
    def frame(self) -> Image.Image:
        return self._frame

    @frame.setter
    def frame(self, image: Image.Image):
        self._frame = image
        self.frame_w = self.width(image)
        self.frame_h = self.height(image)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        for image in (self._background, self._frame):
            if image is not None:
                image.close()
        self._background = None
        self._frame = None

    @staticmethod
    def width(image: Image.Image) -> int:
        return image_utils.width(image)

    @staticmethod
    def height(image: Image.Image) -> int:
        return image_utils.height(image)

    @staticmethod
    def add_top_blank(background_source: str, top_h, display_h,
                      timeout: float = FETCH_TIMEOUT) -> Image.Image:
        """
        Loads a background and adds a blank gray band above it.
        'top_h' is measured against a reference height 'display_h'.
        """
        background = load_image(background_source, timeout=timeout)
        try:
            return pad_top(background, top_h, display_h)
        finally:
            background.close()

    def crop_displayed_image(self, display_w, display_h,
                             frame_x, frame_y, frame_w, frame_h) -> Image.Image:
        """
        Crops the background to the frame window and scales it to the frame size.

        (frame_x, frame_y, frame_w, frame_h) is where the background should
        appear, given against a display_w x display_h view of the background.
        """
        box = source_box(
            (self.background_w, self.background_h),
            display_w, display_h, frame_x, frame_y, frame_w, frame_h,
        )
        return crop_to_size(self.background, box, (self.frame_w, self.frame_h))

    def merge_images(self, display_w, display_h,
                     frame_x, frame_y, frame_w, frame_h) -> Image.Image:
        cropped = self.crop_displayed_image(
            display_w, display_h, frame_x, frame_y, frame_w, frame_h
        )
        return overlay_frame(cropped, self.frame)

    def scale_to_fit(self) -> Image.Image:
        """Scales the whole background to the frame size and puts the frame on top."""
        scaled = resample(self.background, (self.frame_w, self.frame_h))
        return overlay_frame(scaled, self.frame)
