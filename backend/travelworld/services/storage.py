"""Image storage for experience uploads.

Uploads are validated (count, size, extension, MIME type) and written to a
local directory that the app serves under ``/uploads``. The store returns
absolute URLs so the frontend can render them directly.
"""

import logging
import uuid
from pathlib import Path, PurePosixPath

from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from travelworld.config import settings
from travelworld.errors import ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {"jpeg", "jpg", "png", "gif", "webp"}
ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"}


def _extension(filename: str | None) -> str:
    return PurePosixPath(filename or "").suffix.lower().lstrip(".")


def check_upload_count(files: list[UploadFile], max_files: int) -> None:
    if len(files) > max_files:
        raise ValidationError.from_fields(
            [{"field": "images", "message": f"Too many files. Maximum {max_files} files allowed."}]
        )


def check_image_type(file: UploadFile) -> None:
    """Both the extension and the declared MIME type must be an allowed image type."""
    if _extension(file.filename) not in ALLOWED_EXTENSIONS or (file.content_type or "").lower() not in ALLOWED_CONTENT_TYPES:
        raise ValidationError.from_fields(
            [{"field": "images", "message": "Only image files (JPEG, JPG, PNG, GIF, WEBP) are allowed"}]
        )


async def read_limited(file: UploadFile, max_bytes: int) -> bytes:
    """Read an upload, rejecting it as soon as it exceeds ``max_bytes``."""
    data = await file.read(max_bytes + 1)
    if len(data) > max_bytes:
        limit_mb = max_bytes // (1024 * 1024)
        raise ValidationError.from_fields(
            [{"field": "images", "message": f"File size too large. Maximum size is {limit_mb}MB per file."}]
        )
    return data


class LocalImageStore:
    """Writes images under ``root`` and addresses them as ``{base_url}/uploads/<name>``."""

    def __init__(
        self,
        root: str | Path,
        base_url: str,
        max_files: int = 10,
        max_bytes: int = 5 * 1024 * 1024,
    ) -> None:
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")
        self.max_files = max_files
        self.max_bytes = max_bytes

    def url_for(self, name: str) -> str:
        return f"{self.base_url}/uploads/{name}"

    def _path_for_url(self, url: str) -> Path | None:
        prefix = f"{self.base_url}/uploads/"
        if not url.startswith(prefix):
            return None
        name = url[len(prefix):]
        if not name or "/" in name or name.startswith("."):
            return None
        return self.root / name

    async def save_all(self, files: list[UploadFile]) -> list[str]:
        """Validate every file first, then write them; returns their URLs in order."""
        files = [f for f in files if f.filename]
        check_upload_count(files, self.max_files)
        for file in files:
            check_image_type(file)

        payloads = [(file, await read_limited(file, self.max_bytes)) for file in files]

        await run_in_threadpool(self.root.mkdir, parents=True, exist_ok=True)
        urls = []
        for file, data in payloads:
            name = f"{uuid.uuid4().hex}.{_extension(file.filename)}"
            await run_in_threadpool((self.root / name).write_bytes, data)
            urls.append(self.url_for(name))
        if urls:
            logger.info("Stored %d uploaded image(s) in %s", len(urls), self.root)
        return urls

    async def delete(self, url: str) -> None:
        """Remove a previously stored image; URLs this store did not issue are ignored."""
        path = self._path_for_url(url)
        if path is not None:
            await run_in_threadpool(path.unlink, missing_ok=True)


def get_image_store() -> LocalImageStore:
    """FastAPI dependency returning the configured image store."""
    return LocalImageStore(
        settings.upload_dir,
        settings.public_base_url,
        max_files=settings.max_upload_files,
        max_bytes=settings.max_upload_size_bytes,
    )
