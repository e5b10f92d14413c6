"""
placement_api/services/avatar_service.py

Purpose: Profile picture storage

- Persists uploaded images into the GridFS bucket
- Opens download streams and yields their chunks
- Deletes stored images
"""

from typing import Any, AsyncIterator, Optional

from bson import ObjectId
from fastapi import UploadFile
from gridfs.errors import NoFile
from pymongo.errors import PyMongoError

from placement_api.core.config import Settings, settings as default_settings
from placement_api.core.exceptions import ResourceNotFoundError, StorageError, ValidationError
from placement_api.core.logging import get_logger

logger = get_logger(__name__)


class AvatarService:
    """
    Wraps the avatar GridFS bucket.
    """

    def __init__(self, bucket, config: Optional[Settings] = None):
        self.bucket = bucket
        self.config = config or default_settings

    async def store_upload(self, file: UploadFile, owner_id: str) -> ObjectId:
        """
        Validates an uploaded image and writes it to the bucket.

        Args:
            file: Multipart file part
            owner_id: Id of the uploading user, kept in file metadata

        Returns:
            Id of the stored file

        Raises:
            ValidationError: unsupported content type, empty or oversized file
            StorageError: the bucket rejected the write
        """
        content_type = (file.content_type or "").lower()
        if content_type not in self.config.AVATAR_ALLOWED_CONTENT_TYPES:
            raise ValidationError(
                "Unsupported file type",
                details={"content_type": content_type, "allowed": self.config.AVATAR_ALLOWED_CONTENT_TYPES}
            )

        # Read one byte past the limit to detect oversized uploads
        data = await file.read(self.config.AVATAR_MAX_BYTES + 1)
        if not data:
            raise ValidationError("Uploaded file is empty")
        if len(data) > self.config.AVATAR_MAX_BYTES:
            raise ValidationError(
                "File too large",
                details={"max_bytes": self.config.AVATAR_MAX_BYTES}
            )

        try:
            file_id = await self.bucket.upload_from_stream(
                file.filename or "avatar",
                data,
                metadata={"contentType": content_type, "userId": owner_id}
            )
        except PyMongoError as e:
            raise StorageError("Failed to store avatar") from e

        logger.info(
            f"Avatar stored ({len(data)} bytes)",
            extra={"user_id": owner_id, "file_id": str(file_id)}
        )
        return file_id

    async def open(self, file_id: ObjectId):
        """
        Opens a download stream for a stored file.

        Raises:
            ResourceNotFoundError: no file with that id
            StorageError: the bucket could not be read
        """
        try:
            return await self.bucket.open_download_stream(file_id)
        except NoFile as e:
            raise ResourceNotFoundError("File not found") from e
        except PyMongoError as e:
            raise StorageError("Failed to retrieve profile picture") from e

    async def stream(self, grid_out: Any, file_id: ObjectId) -> AsyncIterator[bytes]:
        """
        Yields the chunks of an open download stream, closing it afterwards.

        Once the response has started the status can no longer change, so a
        read failure is logged and re-raised to abort the transfer.
        """
        try:
            while True:
                chunk = await grid_out.readchunk()
                if not chunk:
                    break
                yield chunk
        except Exception:
            logger.error("Error streaming file", extra={"file_id": str(file_id)}, exc_info=True)
            raise
        finally:
            grid_out.close()

        logger.debug("Avatar stream completed", extra={"file_id": str(file_id)})

    async def delete(self, file_id: ObjectId) -> bool:
        """
        Deletes a stored file.

        Returns:
            True if the file was deleted, False if it was already missing

        Raises:
            StorageError: the bucket reported any other failure
        """
        try:
            await self.bucket.delete(file_id)
        except NoFile:
            logger.warning("Avatar file already missing from store", extra={"file_id": str(file_id)})
            return False
        except PyMongoError as e:
            raise StorageError("Error removing avatar.") from e

        logger.info("Avatar file deleted", extra={"file_id": str(file_id)})
        return True
