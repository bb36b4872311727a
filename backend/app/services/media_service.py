import logging
from typing import Dict, List, Optional
from fastapi import UploadFile
from app.core.config import settings
from app.core.exceptions import PayloadTooLarge, UnsupportedMediaType, ValidationError
from app.storage.local_storage import storage

logger = logging.getLogger(__name__)

# Content types accepted for auction media. Browsers report STL models under
# several names, including the generic binary type.
ALLOWED_CONTENT_TYPES = {
    "image/png",
    "image/jpeg",
    "image/jpg",
    "image/webp",
    "model/stl",
    "model/amf",
    "application/sla",
    "application/octet-stream",
}

IMAGE_SLOTS = ["image_required", "image_optional1", "image_optional2", "image_optional3"]


class MediaService:
    @staticmethod
    def is_allowed(content_type: Optional[str], filename: Optional[str]) -> bool:
        """Accept known image/3D model content types, or any file named *.stl"""
        if content_type and content_type.lower() in ALLOWED_CONTENT_TYPES:
            return True
        return bool(filename) and filename.lower().endswith(".stl")

    @staticmethod
    async def read_validated(file: UploadFile) -> bytes:
        """Read an uploaded file, rejecting disallowed types and oversized files"""
        if not MediaService.is_allowed(file.content_type, file.filename):
            logger.info(f"Rejected upload {file.filename!r} of type {file.content_type!r}")
            raise UnsupportedMediaType()

        # Read one byte past the limit so oversized files are detected
        # without loading arbitrarily large bodies
        content = await file.read(settings.MAX_FILE_SIZE + 1)
        if len(content) > settings.MAX_FILE_SIZE:
            raise PayloadTooLarge(
                f"File too large. Maximum size is {settings.MAX_FILE_SIZE // (1024 * 1024)}MB"
            )
        return content

    @staticmethod
    async def store_auction_media(
        images: Optional[List[UploadFile]],
        model_3d: Optional[List[UploadFile]],
    ) -> Dict[str, Optional[str]]:
        """
        Validate and store the media of a new auction.

        Every file is validated before any is written, so a rejected file
        leaves nothing behind. Returns the auction columns for the stored
        paths: the first image fills the required slot, the next three the
        optional ones, plus the 3D model if one was sent.
        """
        images = [f for f in images or [] if f.filename]
        models = [f for f in model_3d or [] if f.filename]

        if len(images) > settings.MAX_IMAGES or len(models) > 1:
            raise ValidationError("Unexpected field")

        image_contents = [(f.filename, await MediaService.read_validated(f)) for f in images]
        model_contents = [(f.filename, await MediaService.read_validated(f)) for f in models]

        # A fifth image is validated but has no slot to be stored in
        stored_images: List[str] = []
        stored_models: List[str] = []
        try:
            for name, content in image_contents[:len(IMAGE_SLOTS)]:
                stored_images.append(storage.save_bytes(content, name))
            for name, content in model_contents:
                stored_models.append(storage.save_bytes(content, name))
        except OSError:
            logger.exception("Storing auction media failed")
            MediaService.delete_media(stored_images + stored_models)
            raise

        media = {slot: None for slot in IMAGE_SLOTS}
        for slot, path in zip(IMAGE_SLOTS, stored_images):
            media[slot] = path
        media["model_3d"] = stored_models[0] if stored_models else None
        return media

    @staticmethod
    def delete_media(paths: List[str]) -> None:
        """Remove stored media files; missing files are ignored"""
        for path in paths:
            storage.delete_file(path)


media_service = MediaService()
