"""
Blog Backend - Post Image Storage Service
==========================================

What:  Validates, stores, resolves and removes uploaded post images.
How:   Checks extension, size and emptiness, then writes the bytes with
       aiofiles to a date-organized directory under a UUID filename.
Who:   Called by PostService for PUT/GET /api/posts/{id}/image and when a
       post is deleted.

Directory Structure:
    storage/
    └── 2026/
        └── 10/
            └── 19/
                ├── a1b2c3d4-....jpg
                └── e5f6a7b8-....png

Only relative paths (e.g. "2026/10/19/a1b2....png") are stored in the
database. resolve() turns them back into absolute paths and refuses any
path that would escape the storage root.
"""

import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

import aiofiles

from blog.config import settings
from blog.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

# Extension → media type served back by GET /api/posts/{id}/image
IMAGE_MEDIA_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
}

ALLOWED_EXTENSIONS = set(IMAGE_MEDIA_TYPES)


class FileService:
    """
    Manages the lifecycle of post images on disk.

    Lifecycle of an uploaded image:
        1. Route reads the multipart upload → validate_and_store()
        2. Extension, size and emptiness checks
        3. Bytes written under storage_root/YYYY/MM/DD/<uuid><ext>
        4. Relative path stored on the post by PostService
        5. Replaced or deleted posts: cleanup_file() removes the old file
    """

    def __init__(self, storage_root: Optional[str] = None):
        """
        Args:
            storage_root: Override the default storage path (used in tests).
                          If None, uses settings.storage_root.
        """
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    def validate_extension(self, filename: str) -> str:
        """Returns the normalized (lowercase, dotted) extension or raises ValidationError."""
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="image",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Check the declared size first, then the actual byte count.

        Raises:
            ValidationError for empty uploads or uploads above max_file_size.
        """
        max_mb = settings.max_file_size / (1024 * 1024)

        if actual_size == 0:
            raise ValidationError(message="Uploaded image is empty.", field="image")

        if content_length and content_length > settings.max_file_size:
            raise ValidationError(
                message=f"File size exceeds maximum of {max_mb:.0f}MB. Please upload a smaller image.",
                field="image",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )

        if actual_size > settings.max_file_size:
            raise ValidationError(
                message=f"File size ({actual_size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB.",
                field="image",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

    def _generate_storage_path(self, extension: str) -> Tuple[Path, str]:
        """Returns (absolute_path, relative_path) for a new YYYY/MM/DD/<uuid><ext> file."""
        date_dir = datetime.now(timezone.utc).strftime("%Y/%m/%d")
        relative_path = f"{date_dir}/{uuid.uuid4()}{extension}"
        return self.storage_root / relative_path, relative_path

    async def store_file(self, content: bytes, extension: str) -> Tuple[str, str]:
        """
        Write validated bytes to disk.

        Raises:
            FileStorageError if directory creation or the write fails.
        """
        absolute_path, relative_path = self._generate_storage_path(extension)

        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            ) from e

        logger.info("File stored: %s (%d bytes)", relative_path, len(content))
        return str(absolute_path), relative_path

    def resolve(self, relative_path: str) -> Path:
        """
        Absolute path of a stored image.

        Raises:
            ValidationError if the path points outside the storage root.
        """
        full_path = (self.storage_root / relative_path).resolve()
        if not full_path.is_relative_to(self.storage_root):
            raise ValidationError(message="Invalid file path", context={"path": relative_path})
        return full_path

    @staticmethod
    def media_type(path: Path) -> str:
        return IMAGE_MEDIA_TYPES.get(path.suffix.lower(), "application/octet-stream")

    async def cleanup_file(self, file_path: str) -> None:
        """
        Best-effort removal of an image that no post references any more.

        Runs as a background task after the response; failures are logged,
        not raised.
        """
        try:
            path = Path(file_path)
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", path.name)
            else:
                logger.debug("Cleanup: file already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", file_path, str(e))

    async def validate_and_store(
        self,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> Tuple[str, str]:
        """
        Validate an upload and store it.

        Returns:
            (absolute_path, relative_path_for_db)
        """
        ext = self.validate_extension(filename)
        self.validate_size(content_length, len(content))
        return await self.store_file(content, ext)


file_service = FileService()
