"""
PetHaven Backend — Blob Storage Service
=========================================

What:  Stores uploaded pet images and hands back a durable URL.
Why:   Pet photos are served by URL from the catalog; the database only keeps
       the URL, never the bytes.
How:   Validates content type and size, writes the bytes to a date-organized
       directory under STORAGE_ROOT with a UUID filename.
Who:   Called by POST /upload and by PetService when attaching an image.

Directory Structure:
    storage/
    └── 2026/
        └── 10/
            └── 19/
                ├── 3c1f...e2.jpg
                └── 9ab0...41.png

Security:
    - UUID filenames: no user input ever reaches the file system path
    - resolve(): refuses paths that escape STORAGE_ROOT
    - Size check against the declared length before looking at the bytes
"""

import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

import aiofiles

from app.config import settings
from app.exceptions import FileStorageError, NotFoundError, ValidationError
from app.schemas.pet import UploadResponse

logger = logging.getLogger(__name__)

# ── Allowed File Types ────────────────────────────────────────────────────
ALLOWED_CONTENT_TYPES = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/webp": ".webp",
}

# Used when the client sends no usable content type (curl -F without ;type=)
EXTENSION_CONTENT_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
}


class FileService:
    """
    Manages upload validation, storage and lookup of stored blobs.

    Lifecycle of an uploaded file:
        1. store_upload() resolves the content type (header, then extension)
        2. Size check (declared length, then actual length)
        3. Bytes written to YYYY/MM/DD/<uuid>.<ext>
        4. URL returned; callers persist it
        5. cleanup_file() removes it again if the caller's DB write fails
    """

    def __init__(self, storage_root: Optional[str] = None):
        """
        Args:
            storage_root: Override the default storage path (used in tests).
        """
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    def resolve_content_type(self, content_type: Optional[str], filename: Optional[str]) -> Tuple[str, str]:
        """
        Pick the content type and file extension for an upload.

        Returns:
            (content_type, extension)

        Raises:
            ValidationError if neither the header nor the filename names an allowed type.
        """
        declared = (content_type or "").split(";")[0].strip().lower()
        if declared in ALLOWED_CONTENT_TYPES:
            return declared, ALLOWED_CONTENT_TYPES[declared]

        ext = Path(filename or "").suffix.lower()
        if declared in ("", "application/octet-stream") and ext in EXTENSION_CONTENT_TYPES:
            return EXTENSION_CONTENT_TYPES[ext], ".jpg" if ext == ".jpeg" else ext

        raise ValidationError(
            message=(
                f"File type '{declared or ext or 'unknown'}' is not supported. "
                f"Allowed types: {', '.join(sorted(set(ALLOWED_CONTENT_TYPES.values())))}"
            ),
            field="file",
            context={"content_type": declared, "extension": ext},
        )

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Reject empty files and files above settings.max_file_size.

        The declared Content-Length is checked first; the actual byte count
        catches clients that under-report it.
        """
        max_mb = settings.max_file_size / (1024 * 1024)

        if actual_size == 0:
            raise ValidationError(message="Uploaded file is empty.", field="file")

        if content_length and content_length > settings.max_file_size:
            raise ValidationError(
                message=f"File size exceeds maximum of {max_mb:.0f}MB. Please upload a smaller image.",
                field="file",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )

        if actual_size > settings.max_file_size:
            raise ValidationError(
                message=f"File size ({actual_size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB.",
                field="file",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

    def _generate_storage_path(self, extension: str) -> Tuple[Path, str]:
        """(absolute_path, relative_path) for a new YYYY/MM/DD/<uuid><ext> blob."""
        now = datetime.now(timezone.utc)
        relative_path = f"{now.strftime('%Y/%m/%d')}/{uuid.uuid4()}{extension}"
        return self.storage_root / relative_path, relative_path

    def public_url(self, relative_path: str) -> str:
        return f"{settings.public_base_url.rstrip('/')}/files/{relative_path}"

    async def store_file(self, content: bytes, extension: str) -> Tuple[str, str]:
        """
        Write validated bytes to disk.

        Returns:
            (absolute_path, relative_path)

        Raises:
            FileStorageError if the directory or file cannot be written.
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
            )

        logger.info("File stored: %s (%d bytes)", relative_path, len(content))
        return str(absolute_path), relative_path

    async def store_upload(
        self,
        filename: Optional[str],
        content_type: Optional[str],
        content: bytes,
        content_length: Optional[int] = None,
    ) -> UploadResponse:
        """
        Validate and store an upload; the blob storage entry point.

        Validation order (cheapest first): content type → size → write.
        """
        resolved_type, ext = self.resolve_content_type(content_type, filename)
        self.validate_size(content_length, len(content))
        _, relative_path = await self.store_file(content, ext)
        return UploadResponse(
            url=self.public_url(relative_path),
            path=relative_path,
            content_type=resolved_type,
            size=len(content),
        )

    def resolve(self, relative_path: str) -> Path:
        """
        Absolute path of a stored blob.

        Raises:
            ValidationError: the path escapes STORAGE_ROOT
            NotFoundError:   no such file
        """
        full_path = (self.storage_root / relative_path).resolve()
        if self.storage_root not in full_path.parents:
            raise ValidationError(message="Invalid file path", field="path")
        if not full_path.is_file():
            raise NotFoundError(resource="file", resource_id=relative_path)
        return full_path

    async def cleanup_file(self, relative_path: str) -> None:
        """
        Best-effort removal of a blob whose database write failed.

        Failures are logged, not raised: the user's request already failed
        for a different reason and an orphaned file is harmless.
        """
        path = self.storage_root / relative_path
        try:
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", relative_path)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", relative_path, str(e))

    def relative_path_from_url(self, url: Optional[str]) -> Optional[str]:
        """Inverse of public_url(); None for URLs this service did not issue."""
        marker = "/files/"
        if not url or marker not in url:
            return None
        return url.split(marker, 1)[1]


# ── Singleton Instance ────────────────────────────────────────────────────
file_service = FileService()
