"""
Image helpers used by the editor.

Uploads are normalised to a 1024x1024 square before they reach the model, so
the model's output has the same size. Crops are applied locally and saves are
converted to WebP.
"""

from dataclasses import dataclass
from io import BytesIO
from PIL import Image, UnidentifiedImageError
import structlog

from exceptions import InvalidInputError

logger = structlog.get_logger(__name__)

SQUARE_SIZE = 1024


@dataclass(frozen=True)
class CropRect:
    """Crop rectangle in the image's natural pixel coordinates."""
    x: int
    y: int
    width: int
    height: int


def _open(data: bytes) -> Image.Image:
    try:
        image = Image.open(BytesIO(data))
        image.load()
        return image
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidInputError(f"Could not read image: {e}") from e


def _encode(image: Image.Image, fmt: str, **params) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format=fmt, **params)
    return buffer.getvalue()


def resize_to_square(data: bytes, size: int = SQUARE_SIZE) -> bytes:
    """
    Center-crop and scale an image to exactly size x size.

    Args:
        data: Encoded image bytes
        size: Output edge length in pixels

    Returns:
        PNG bytes

    Raises:
        InvalidInputError: If the bytes are not a readable image
    """
    image = _open(data)
    width, height = image.size

    # Scale so the short edge fills the square, then trim the long edge
    scale = max(size / width, size / height)
    scaled = image.resize(
        (max(size, round(width * scale)), max(size, round(height * scale))),
        Image.Resampling.LANCZOS
    )
    left = (scaled.width - size) // 2
    top = (scaled.height - size) // 2
    square = scaled.crop((left, top, left + size, top + size))

    logger.debug("image_resized_to_square", source=(width, height), size=size)
    return _encode(square, "PNG")


def crop_image(data: bytes, rect: CropRect) -> bytes:
    """
    Crop an image to a rectangle.

    Raises:
        InvalidInputError: Empty rectangle, rectangle outside the image,
            or unreadable bytes
    """
    image = _open(data)

    if rect.width <= 0 or rect.height <= 0:
        raise InvalidInputError("Please select an area to crop.")
    if (
        rect.x < 0 or rect.y < 0
        or rect.x + rect.width > image.width
        or rect.y + rect.height > image.height
    ):
        raise InvalidInputError(
            "Crop area falls outside the image.",
            details={"rect": [rect.x, rect.y, rect.width, rect.height], "size": list(image.size)}
        )

    cropped = image.crop((rect.x, rect.y, rect.x + rect.width, rect.y + rect.height))
    return _encode(cropped, "PNG")


def to_webp(data: bytes, quality: int = 100) -> bytes:
    """Re-encode an image as WebP."""
    image = _open(data)
    if image.mode not in ("RGB", "RGBA"):
        image = image.convert("RGBA")
    return _encode(image, "WEBP", quality=quality)
