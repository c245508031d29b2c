import io
from PIL import Image as PILImage, UnidentifiedImageError
from flask import current_app


ALLOWED_FORMATS = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "WEBP": "image/webp",
}
EXTENSIONS = {"PNG": "png", "JPEG": "jpg", "WEBP": "webp"}


def inspect_design(image_bytes):
    """Validate uploaded artwork and describe it.

    The bytes are left untouched: the dedup hash is computed over exactly
    what the vendor uploaded, so nothing here may re-encode them.

    Returns:
        dict with format, content_type, extension, byte_size, width, height

    Raises:
        ValueError on empty, oversized or unreadable input
    """
    max_size = current_app.config["MAX_DESIGN_BYTES"]
    if not image_bytes:
        raise ValueError("Design file is empty")
    if len(image_bytes) > max_size:
        raise ValueError(f"Design too large: {len(image_bytes)} bytes (max {max_size})")

    try:
        img = PILImage.open(io.BytesIO(image_bytes))
        img.verify()  # verify it's a real image
    except (UnidentifiedImageError, OSError, SyntaxError):
        raise ValueError("Invalid image file")

    # verify() leaves the image unusable; reopen for size
    img = PILImage.open(io.BytesIO(image_bytes))
    fmt = (img.format or "").upper()
    if fmt not in ALLOWED_FORMATS:
        raise ValueError(f"Unsupported design format: {fmt or 'unknown'}")

    width, height = img.size
    return {
        "format": fmt,
        "content_type": ALLOWED_FORMATS[fmt],
        "extension": EXTENSIONS[fmt],
        "byte_size": len(image_bytes),
        "width": width,
        "height": height,
    }
