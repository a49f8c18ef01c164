"""
Object storage access for one Supabase Storage bucket.

Objects are public-read; URLs come straight from the bucket with no signing.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
import time
from typing import Optional
from urllib.parse import unquote
import structlog

from supabase import Client

from exceptions import StorageError, ImageUploadError, store_message

logger = structlog.get_logger(__name__)

# Supabase keeps this marker object in "empty" folders
PLACEHOLDER_OBJECT = ".emptyFolderPlaceholder"


@dataclass
class UploadItem:
    """A file received from the dashboard, ready to store."""
    filename: str
    content: bytes
    content_type: Optional[str] = None


def timestamped_name(filename: str, separator: str = "_") -> str:
    """Prefix a filename with the current epoch milliseconds."""
    millis = time.time_ns() // 1_000_000
    return f"{millis}{separator}{filename}"


class StorageService:
    """
    One storage bucket.

    Handles:
    - Uploading objects and resolving their public URLs
    - Listing and removing objects
    - Concurrent upload batches that stop at the first failure
    """

    def __init__(self, db: Client, bucket: str):
        self.db = db
        self.bucket_name = bucket

    @property
    def bucket(self):
        return self.db.storage.from_(self.bucket_name)

    # ===================
    # SINGLE OBJECTS
    # ===================

    def upload(self, name: str, content: bytes, content_type: Optional[str] = None) -> str:
        """
        Upload one object.

        Returns:
            Stored object name

        Raises:
            StorageError: If the bucket rejects the upload
        """
        try:
            self._put(name, content, content_type)
            return name
        except Exception as e:
            logger.error(
                "storage_upload_failed",
                bucket=self.bucket_name,
                name=name,
                error=str(e)
            )
            raise StorageError("upload", store_message(e), details={"name": name})

    def public_url(self, name: str) -> str:
        """Public URL for an object. No request is made."""
        return self.bucket.get_public_url(name)

    def name_from_url(self, url: str) -> Optional[str]:
        """
        Recover the object name from one of this bucket's public URLs.

        Returns None for URLs that point elsewhere.
        """
        marker = f"/object/public/{self.bucket_name}/"
        _, found, name = url.partition(marker)
        if not found or not name:
            return None
        return unquote(name.split("?", 1)[0])

    def list_names(self, limit: int = 100) -> list[str]:
        """
        List object names at the bucket root.

        Raises:
            StorageError: If the listing fails
        """
        try:
            entries = self.bucket.list("", {"limit": limit})
        except Exception as e:
            logger.error(
                "storage_list_failed",
                bucket=self.bucket_name,
                error=str(e)
            )
            raise StorageError("list", store_message(e))

        return [
            entry["name"]
            for entry in entries or []
            if entry.get("name") and entry["name"] != PLACEHOLDER_OBJECT
        ]

    def remove(self, names: list[str]) -> list[str]:
        """
        Remove objects.

        Returns:
            Names the bucket reported as removed

        Raises:
            StorageError: If the removal fails
        """
        if not names:
            return []

        try:
            removed = self.bucket.remove(names)
        except Exception as e:
            logger.error(
                "storage_remove_failed",
                bucket=self.bucket_name,
                names=names,
                error=str(e)
            )
            raise StorageError("remove", store_message(e), details={"names": names})

        removed_names = [entry.get("name") for entry in removed or [] if isinstance(entry, dict)]
        logger.info(
            "storage_objects_removed",
            bucket=self.bucket_name,
            requested=len(names),
            removed=len(removed_names)
        )
        return removed_names

    # ===================
    # BATCHES
    # ===================

    def upload_batch(
        self,
        files: list[UploadItem],
        separator: str = "-",
        max_workers: int = 4,
        cleanup_on_failure: bool = False
    ) -> list[str]:
        """
        Upload files concurrently and return their public URLs.

        URLs come back in the order the files were given, whatever order
        the uploads finish in. The first failure aborts the batch: uploads
        not yet started are cancelled and ImageUploadError is raised. When
        cleanup_on_failure is set, objects that did get stored are removed
        again (best effort); otherwise they are left in the bucket.

        Args:
            files: Files to store
            separator: Joins the timestamp prefix and the filename
            max_workers: Upload threads
            cleanup_on_failure: Remove completed uploads if the batch fails

        Returns:
            Public URLs, one per file

        Raises:
            ImageUploadError: If any upload fails
        """
        if not files:
            return []

        logger.info(
            "upload_batch_started",
            bucket=self.bucket_name,
            files=len(files)
        )

        names: list[Optional[str]] = [None] * len(files)
        stored: list[str] = []
        failure: Optional[tuple[str, Exception]] = None

        with ThreadPoolExecutor(max_workers=min(max_workers, len(files))) as pool:
            futures = {
                pool.submit(self._upload_timestamped, item, separator): index
                for index, item in enumerate(files)
            }

            for future in as_completed(futures):
                if future.cancelled():
                    continue
                index = futures[future]
                try:
                    names[index] = future.result()
                    stored.append(names[index])
                except Exception as e:
                    if failure is None:
                        failure = (files[index].filename, e)
                        for pending in futures:
                            pending.cancel()

        if failure is not None:
            filename, error = failure
            logger.error(
                "upload_batch_failed",
                bucket=self.bucket_name,
                filename=filename,
                stored=len(stored),
                cleanup=cleanup_on_failure,
                error=str(error)
            )
            if cleanup_on_failure:
                self._discard(stored)
                stored = []
            raise ImageUploadError(filename, store_message(error), uploaded=stored)

        logger.info(
            "upload_batch_complete",
            bucket=self.bucket_name,
            files=len(files)
        )

        return [self.public_url(name) for name in names]

    # ===================
    # INTERNALS
    # ===================

    def _put(self, name: str, content: bytes, content_type: Optional[str]) -> None:
        file_options = {"content-type": content_type} if content_type else None
        self.bucket.upload(name, content, file_options=file_options)

    def _upload_timestamped(self, item: UploadItem, separator: str) -> str:
        name = timestamped_name(item.filename, separator)
        logger.debug(
            "uploading_object",
            bucket=self.bucket_name,
            name=name,
            size_bytes=len(item.content)
        )
        self._put(name, item.content, item.content_type)
        return name

    def _discard(self, names: list[str]) -> None:
        """Remove partial uploads; failures are logged, not raised."""
        if not names:
            return
        try:
            self.bucket.remove(names)
            logger.info("partial_uploads_removed", bucket=self.bucket_name, names=names)
        except Exception as e:
            logger.warning(
                "partial_upload_cleanup_failed",
                bucket=self.bucket_name,
                names=names,
                error=str(e)
            )

