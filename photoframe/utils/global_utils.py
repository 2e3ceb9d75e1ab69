import io


def log(msg: str, module_name: str = "global_utils"):
    print(f"[{module_name}] {msg}")


def image_to_bytesio(image, fmt: str) -> io.BytesIO:
    """Encodes a Pillow image into an in-memory file ready to be sent."""
    buf = io.BytesIO()
    if fmt == "JPEG" and image.mode not in ("RGB", "L"):
        image = image.convert("RGB")
    image.save(buf, format=fmt)
    buf.seek(0)
    return buf
