"""Photo checks and preprocessing done before a request is built."""

from __future__ import annotations

import logging
from io import BytesIO

from PIL import Image, ImageOps, UnidentifiedImageError

from .errors import InvalidImageError
from .types import ImageFile

logger = logging.getLogger(__name__)

VALID_IMAGE_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png", "image/webp"})
MAX_IMAGE_BYTES = 10 * 1024 * 1024

MIN_FACE_DIMENSION = 200
MIN_ASPECT_RATIO = 0.5
MAX_ASPECT_RATIO = 2.0

_PIL_FORMATS = {
    "image/jpeg": "JPEG",
    "image/jpg": "JPEG",
    "image/png": "PNG",
    "image/webp": "WEBP",
}


def validate_image(image: ImageFile) -> None:
    """Reject anything that is not a JPEG, PNG or WebP of at most 10MB."""
    if image.mime_type not in VALID_IMAGE_TYPES:
        raise InvalidImageError("Please upload a valid image file (JPEG, PNG, or WebP)")
    if image.size > MAX_IMAGE_BYTES:
        raise InvalidImageError("Image file size must be less than 10MB")


def resize_image(image: ImageFile, max_width: int = 1024, max_height: int = 1024) -> ImageFile:
    """Scale the photo down proportionally so it fits ``max_width`` x ``max_height``.

    Images already within bounds, or that Pillow cannot decode, are returned
    untouched.
    """
    try:
        with Image.open(BytesIO(image.data)) as source:
            if source.width <= max_width and source.height <= max_height:
                return image

            resized = ImageOps.exif_transpose(source)
            resized.thumbnail((max_width, max_height), Image.LANCZOS)

            format_ = _PIL_FORMATS.get(image.mime_type or "", source.format or "PNG")
            if format_ == "JPEG" and resized.mode not in {"RGB", "L"}:
                resized = resized.convert("RGB")

            save_kwargs = {"format": format_}
            if format_ in {"JPEG", "WEBP"}:
                save_kwargs["quality"] = 90
            output = BytesIO()
            resized.save(output, **save_kwargs)
    except (UnidentifiedImageError, OSError) as exc:
        logger.warning("Could not resize %s, keeping original: %s", image.name, exc)
        return image

    logger.debug("Resized %s to %sx%s", image.name, resized.width, resized.height)
    return ImageFile(name=image.name, data=output.getvalue(), content_type=image.content_type)


def has_face(image: ImageFile) -> bool:
    """Cheap stand-in for face detection based on size and aspect ratio."""
    try:
        with Image.open(BytesIO(image.data)) as source:
            width, height = source.size
    except (UnidentifiedImageError, OSError):
        return False

    if width < MIN_FACE_DIMENSION or height < MIN_FACE_DIMENSION:
        return False
    return MIN_ASPECT_RATIO <= width / height <= MAX_ASPECT_RATIO
