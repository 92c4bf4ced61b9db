import io
from PIL import Image as PILImage, UnidentifiedImageError

from storefront.errors import ValidationError


ALLOWED_FORMATS = {"JPEG", "PNG", "WEBP", "GIF"}
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MB


def validate_image(image_bytes, filename=None):
    """Validate and sanitize uploaded image.

    - Checks file size
    - Verifies it's a real image via Pillow
    - Strips EXIF data by re-encoding
    - Converts to JPEG

    Returns:
        Sanitized JPEG bytes

    Raises:
        ValidationError on invalid input
    """
    label = filename or "image"
    if not image_bytes:
        raise ValidationError(f"{label} is empty")
    if len(image_bytes) > MAX_FILE_SIZE:
        raise ValidationError(
            f"{label} too large: {len(image_bytes)} bytes (max {MAX_FILE_SIZE})"
        )

    try:
        img = PILImage.open(io.BytesIO(image_bytes))
        img.verify()  # verify it's a real image
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise ValidationError(f"{label} is not a valid image file") from e

    if img.format not in ALLOWED_FORMATS:
        raise ValidationError(f"{label} has unsupported format {img.format}")

    # Re-open (verify() closes the file) and re-encode to strip EXIF
    img = PILImage.open(io.BytesIO(image_bytes))
    if img.mode not in ("RGB", "L"):
        img = img.convert("RGB")

    buffer = io.BytesIO()
    img.save(buffer, format="JPEG", quality=90)
    return buffer.getvalue()


def read_uploads(files, limit):
    """Read and sanitize a list of uploaded file objects.

    Every file is validated before anything is stored.
    """
    files = [f for f in (files or []) if f is not None]
    if len(files) > limit:
        raise ValidationError(f"At most {limit} images per request")
    return [
        validate_image(f.read(), getattr(f, "filename", None)) for f in files
    ]
