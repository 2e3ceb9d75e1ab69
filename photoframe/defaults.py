from PIL import Image

# Seconds before a remote image fetch gives up
FETCH_TIMEOUT = 15.0

# Neutral gray used for the padding band added above a background
BLANK_FILL_COLOR = (192, 192, 192)

# Parts of a crop window that fall outside the background
CROP_FILL_COLOR = (0, 0, 0)

RESAMPLE_FILTER = Image.BILINEAR

# Extension -> Pillow decoder, "jpeg" is folded into "jpg" before lookup
EXTENSION_FORMATS = {
    "bmp": "BMP",
    "gif": "GIF",
    "jpg": "JPEG",
    "png": "PNG",
}

OUTPUT_FORMATS = {
    "png": ("PNG", "image/png"),
    "jpeg": ("JPEG", "image/jpeg"),
    "jpg": ("JPEG", "image/jpeg"),
}
DEFAULT_OUTPUT_FORMAT = "png"
