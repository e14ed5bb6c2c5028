"""
Blob storage for pet photos and health record attachments.

``BlobStore`` is the contract the services depend on. ``LocalFileStore``
keeps files under a directory tree, one sub-directory per container, and
serves them from ``{public_base_url}/{container}/{file_id}``.
"""

import asyncio
import logging
import uuid
from pathlib import Path, PurePath, PurePosixPath
from typing import Optional, Protocol, Tuple, runtime_checkable
from urllib.parse import urlparse

from ..exceptions import InvalidInputException, StoreFailureException
from ..utils.config import PetPalSettings
from ..utils.validation import validate_file_extension

logger = logging.getLogger(__name__)

DOCUMENTS_CONTAINER = "documents"
PET_IMAGES_CONTAINER = "pets"

DOCUMENT_EXTENSIONS = (".pdf", ".doc", ".docx", ".txt", ".jpg", ".jpeg", ".png")
IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif")


def allowed_extensions(container: str) -> Tuple[str, ...]:
    """Document containers take office files and images; all others images only."""
    if DOCUMENTS_CONTAINER in container.lower():
        return DOCUMENT_EXTENSIONS
    return IMAGE_EXTENSIONS


def check_extension(filename: str, container: str) -> str:
    """
    Return the lower-cased extension of ``filename``.

    Raises:
        InvalidInputException: If the extension is not allowed in ``container``
    """
    result = validate_file_extension(filename, allowed_extensions(container))
    if not result.is_valid:
        logger.warning(f"Rejected upload '{filename}' for container '{container}'")
        raise InvalidInputException(
            result.first_error or "File type is not allowed",
            field="file",
            value=filename,
        )
    return result.value


@runtime_checkable
class BlobStore(Protocol):
    """Opaque file storage keyed by container and file id."""

    async def save(self, filename: str, content: bytes, container: str) -> str:
        """Store ``content`` and return the new file id."""
        ...

    async def delete(self, file_id: str, container: str) -> None:
        ...

    def url_for(self, file_id: str, container: str) -> str:
        ...


class LocalFileStore:
    """``BlobStore`` backed by the local filesystem."""

    def __init__(self, root: Path, public_base_url: str):
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")

    @classmethod
    def from_settings(cls, settings: PetPalSettings) -> "LocalFileStore":
        return cls(Path(settings.upload_root), settings.public_base_url)

    def _path(self, file_id: str, container: str) -> Path:
        if PurePath(file_id).name != file_id or PurePath(container).name != container:
            raise InvalidInputException(
                "Invalid file reference", field="file", value=file_id
            )
        return self.root / container / file_id

    async def save(self, filename: str, content: bytes, container: str) -> str:
        """
        Write ``content`` under a fresh unique name.

        Raises:
            InvalidInputException: If the file type is not allowed
            StoreFailureException: If the file cannot be written
        """
        extension = check_extension(filename, container)
        file_id = f"{uuid.uuid4().hex}{extension}"
        path = self._path(file_id, container)

        try:
            await asyncio.to_thread(path.parent.mkdir, parents=True, exist_ok=True)
            await asyncio.to_thread(path.write_bytes, content)
        except OSError as e:
            raise StoreFailureException(
                "Failed to store file", operation="save_file", original_error=e
            ) from e

        logger.info(f"Stored {filename} as {container}/{file_id}")
        return file_id

    async def delete(self, file_id: str, container: str) -> None:
        path = self._path(file_id, container)
        try:
            await asyncio.to_thread(path.unlink, missing_ok=True)
        except OSError as e:
            raise StoreFailureException(
                "Failed to delete file", operation="delete_file", original_error=e
            ) from e
        logger.info(f"Deleted {container}/{file_id}")

    def url_for(self, file_id: str, container: str) -> str:
        return f"{self.public_base_url}/{container}/{file_id}"


def file_id_from_url(url: Optional[str]) -> Optional[str]:
    """Last path segment of a blob URL, which is the file id."""
    if not url:
        return None
    name = PurePosixPath(urlparse(url).path).name
    return name or None
