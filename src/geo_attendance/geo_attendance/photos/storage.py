from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional, Protocol

import cloudinary.uploader

from ..core.constants import (
    DEFAULT_PHOTO_FOLDER,
    DEFAULT_PHOTO_UPLOAD_TIMEOUT_SECONDS,
    PHOTO_MAX_HEIGHT,
    PHOTO_MAX_WIDTH,
)
from ..core.exceptions import PhotoUploadError
from .imaging import decode_image_payload, prepare_photo, to_data_uri

logger = logging.getLogger(__name__)

Uploader = Callable[..., dict]


@dataclass(frozen=True)
class UploadResult:
    success: bool
    url: Optional[str] = None
    public_id: Optional[str] = None
    error: Optional[str] = None


class PhotoStorage(Protocol):
    """Durable storage for attendance photos."""

    def upload(self, image_data: str, *, user_id: str, taken_at: datetime) -> UploadResult:
        raise NotImplementedError


def photo_public_id(user_id: str, taken_at: datetime) -> str:
    return f"{user_id}_{taken_at:%Y-%m-%d}_{taken_at:%H-%M-%S}"


@dataclass(frozen=True)
class CloudinaryConfig:
    cloud_name: str
    api_key: str
    api_secret: str
    folder: str = DEFAULT_PHOTO_FOLDER

    def credentials(self) -> dict[str, Any]:
        return {"cloud_name": self.cloud_name, "api_key": self.api_key, "api_secret": self.api_secret}


class CloudinaryPhotoStorage(PhotoStorage):
    """Uploads through the Cloudinary SDK.

    Credentials go with each call, so the SDK's global config stays untouched.
    Never raises: every failure comes back as ``UploadResult(success=False)``.
    """

    def __init__(
        self,
        config: CloudinaryConfig,
        *,
        timeout_seconds: float = DEFAULT_PHOTO_UPLOAD_TIMEOUT_SECONDS,
        uploader: Optional[Uploader] = None,
    ):
        self._config = config
        self._timeout = float(timeout_seconds)
        self._uploader = uploader or cloudinary.uploader.upload

    def upload(self, image_data: str, *, user_id: str, taken_at: datetime) -> UploadResult:
        public_id = photo_public_id(user_id, taken_at)
        try:
            jpeg = prepare_photo(decode_image_payload(image_data))
        except PhotoUploadError as e:
            logger.warning("[photos] rejected photo for user_id=%s: %s", user_id, e)
            return UploadResult(success=False, public_id=public_id, error=str(e))

        try:
            body = self._uploader(
                to_data_uri(jpeg),
                public_id=public_id,
                folder=self._config.folder,
                tags=["attendance", user_id],
                transformation=[{"width": PHOTO_MAX_WIDTH, "height": PHOTO_MAX_HEIGHT, "crop": "limit"}],
                resource_type="image",
                timeout=self._timeout,
                **self._config.credentials(),
            )
            url = (body or {}).get("secure_url")
            if not url:
                raise PhotoUploadError("Upload response has no secure_url")
        except Exception as e:
            # SDK errors, urllib3 transport errors and bad responses all end here.
            logger.warning("[photos] upload FAILED for user_id=%s: %s", user_id, e)
            return UploadResult(success=False, public_id=public_id, error=str(e))

        stored_id = body.get("public_id", public_id)
        logger.info("[photos] uploaded %s for user_id=%s", stored_id, user_id)
        return UploadResult(success=True, url=url, public_id=stored_id)
