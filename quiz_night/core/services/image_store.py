"""Upload and clean up question images in the platform's object storage."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
import re
from urllib.parse import unquote, urlparse

from quiz_night.backend.base import BackendError, ObjectStorage
from quiz_night.constants.backend_constants import BUCKET_GAME_ASSETS, PUBLIC_OBJECT_PREFIX
from quiz_night.core.models import QuestionKind

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def _sanitize_filename(filename: str) -> str:
    base = filename.replace("\\", "/").rsplit("/", 1)[-1]
    cleaned = _UNSAFE_FILENAME_CHARS.sub("_", base).strip("._")
    return cleaned or "image"


class ImageStore:
    """Question images live in one bucket, namespaced by kind and upload time."""

    def __init__(self, storage: ObjectStorage, bucket: str = BUCKET_GAME_ASSETS) -> None:
        self._storage = storage
        self._bucket = bucket
        self._path_pattern = re.compile(
            re.escape(f"{PUBLIC_OBJECT_PREFIX}{bucket}/") + r"(.+)$"
        )

    @property
    def bucket(self) -> str:
        return self._bucket

    def build_object_path(self, kind: QuestionKind, filename: str, now: datetime | None = None) -> str:
        moment = now or datetime.now(timezone.utc)
        timestamp_ms = int(moment.timestamp() * 1000)
        return f"{kind.value}/{timestamp_ms}_{_sanitize_filename(filename)}"

    def upload_image(
        self,
        kind: QuestionKind,
        filename: str,
        data: bytes,
        content_type: str | None = None,
    ) -> str:
        """Store an image and return its public URL."""
        if not data:
            raise ValueError("Image file is empty.")
        path = self._storage.upload(self._bucket, self.build_object_path(kind, filename), data, content_type)
        logger.info("Uploaded image %s", path)
        return self._storage.public_url(self._bucket, path)

    def extract_file_path(self, url: str) -> str | None:
        """Return the object path of a public URL from this bucket, or None."""
        try:
            parsed = urlparse(url)
        except ValueError:
            logger.warning("Could not parse image URL %r", url)
            return None
        match = self._path_pattern.search(parsed.path)
        if match is None:
            return None
        return unquote(match.group(1))

    def delete_images(self, image_urls: list[str]) -> bool:
        """Delete every image we own; failures are logged per item and never raised."""
        all_deleted = True
        for url in image_urls:
            path = self.extract_file_path(url)
            if path is None:
                logger.warning("Skipping image outside the %s bucket: %s", self._bucket, url)
                all_deleted = False
                continue
            try:
                self._storage.delete(self._bucket, path)
            except BackendError as exc:
                logger.error("Failed to delete image %s: %s", path, exc)
                all_deleted = False
            else:
                logger.info("Deleted image %s", path)
        return all_deleted
