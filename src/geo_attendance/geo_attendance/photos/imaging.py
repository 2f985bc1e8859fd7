from __future__ import annotations

import base64
import binascii
import io

from PIL import Image, UnidentifiedImageError

from ..core.constants import PHOTO_MAX_HEIGHT, PHOTO_MAX_WIDTH
from ..core.exceptions import PhotoUploadError


def decode_image_payload(payload: str) -> bytes:
    """Decode a base64 photo, with or without a ``data:image/...;base64,`` prefix."""
    if not payload or not payload.strip():
        raise PhotoUploadError("Empty photo payload")

    data = payload.strip()
    if data.startswith("data:"):
        header, sep, data = data.partition(",")
        if not sep or ";base64" not in header:
            raise PhotoUploadError("Photo data URI is not base64 encoded")

    # MIME-style payloads wrap at 76 columns.
    data = "".join(data.split())
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise PhotoUploadError(f"Invalid base64 photo payload: {e}") from e


def prepare_photo(raw: bytes, *, max_size: tuple[int, int] = (PHOTO_MAX_WIDTH, PHOTO_MAX_HEIGHT)) -> bytes:
    """Re-encode as JPEG, shrinking to fit max_size (aspect ratio kept)."""
    try:
        with Image.open(io.BytesIO(raw)) as header_check:
            header_check.verify()
        with Image.open(io.BytesIO(raw)) as img:
            img = img.convert("RGB")
            img.thumbnail(max_size)
            out = io.BytesIO()
            img.save(out, format="JPEG", quality=85)
            return out.getvalue()
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise PhotoUploadError(f"Unreadable photo: {e}") from e


def to_data_uri(jpeg: bytes) -> str:
    return "data:image/jpeg;base64," + base64.b64encode(jpeg).decode("ascii")
