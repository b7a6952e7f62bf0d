"""
avatars.py — Avatar Pipeline

Validate an uploaded image and normalize it to the canonical avatar format:
a square AVATAR_SIZE x AVATAR_SIZE PNG (center-cropped, then resized).
Whatever the client uploads, storage and retrieval only ever see PNG.
"""

from __future__ import annotations

import io
import re

from PIL import Image, ImageOps, UnidentifiedImageError

from taskapi.core.config import settings
from taskapi.core.errors import ValidationError

ACCEPTED_EXTENSIONS = re.compile(r"\.(jpg|jpeg|png)$", re.IGNORECASE)
# MPO is the multi-picture JPEG many phones write under a .jpg name
ACCEPTED_FORMATS = {"JPEG", "MPO", "PNG"}

NOT_AN_IMAGE = "Please upload an image."
TOO_LARGE = "File too large"


def normalize_avatar(filename: str, data: bytes) -> bytes:
    """
    Return the canonical PNG for an uploaded avatar.

    Raises:
        ValidationError: upload too large, wrong extension, or content that is
            not a JPEG/PNG image.
    """
    if len(data) > settings.AVATAR_MAX_BYTES:
        raise ValidationError.for_field("avatar", TOO_LARGE)
    if not filename or not ACCEPTED_EXTENSIONS.search(filename):
        raise ValidationError.for_field("avatar", NOT_AN_IMAGE)

    try:
        with Image.open(io.BytesIO(data)) as image:
            if image.format not in ACCEPTED_FORMATS:
                raise ValidationError.for_field("avatar", NOT_AN_IMAGE)
            # Only the first frame of a multi-picture file becomes the avatar
            image.seek(0)
            image.load()
            image = ImageOps.exif_transpose(image)
            if image.mode not in ("RGB", "RGBA"):
                image = image.convert("RGBA")
            size = (settings.AVATAR_SIZE, settings.AVATAR_SIZE)
            fitted = ImageOps.fit(image, size, method=Image.Resampling.LANCZOS)
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError):
        raise ValidationError.for_field("avatar", NOT_AN_IMAGE)

    out = io.BytesIO()
    fitted.save(out, format="PNG")
    return out.getvalue()
