"""
Image normalization for uploaded photos.
"""

import io

from PIL import Image, UnidentifiedImageError

from photo_api.errors import InvalidImageError

MAX_SIZE = (800, 800)
JPEG_QUALITY = 70
BACKGROUND_COLOR = (255, 255, 255)


def _has_transparency(image: Image.Image) -> bool:
    if image.mode in ("RGBA", "LA", "PA", "RGBa", "La"):
        return True
    return "transparency" in image.info


def _flatten(image: Image.Image) -> Image.Image:
    if not _has_transparency(image):
        return image.convert("RGB")
    rgba = image.convert("RGBA")
    background = Image.new("RGBA", rgba.size, (*BACKGROUND_COLOR, 255))
    return Image.alpha_composite(background, rgba).convert("RGB")


def load_image(data: bytes) -> Image.Image:
    """
    Decode raw bytes into a fully loaded Pillow image.
    Raises InvalidImageError if the bytes are not a supported image.
    """
    if not data:
        error_message = "Empty image body"
        raise InvalidImageError(error_message)
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError) as exc:
        error_message = f"Unable to decode image: {exc}"
        raise InvalidImageError(error_message) from exc
    except (OSError, ValueError) as exc:
        error_message = f"Corrupt image data: {exc}"
        raise InvalidImageError(error_message) from exc
    return image


def normalize_image(data: bytes) -> bytes:
    """
    Fit the image inside MAX_SIZE keeping its aspect ratio (never upscaling),
    flatten any transparency onto white and re-encode as JPEG.
    """
    with load_image(data) as image:
        flattened = _flatten(image)
    flattened.thumbnail(MAX_SIZE, Image.Resampling.LANCZOS)
    out = io.BytesIO()
    flattened.save(out, format="JPEG", quality=JPEG_QUALITY)
    return out.getvalue()
