"""
Unit tests for StorageService.
"""

import re
import time

import pytest

from services.storage_service import StorageService, UploadItem, timestamped_name
from exceptions import StorageError, ImageUploadError

from tests.conftest import MOCK_STORAGE_URL
from tests.factories import UploadFactory


BUCKET = "productsimgs"


@pytest.fixture
def storage(mock_supabase) -> StorageService:
    return StorageService(mock_supabase, BUCKET)


@pytest.fixture
def bucket(mock_supabase):
    return mock_supabase.bucket(BUCKET)


class TestTimestampedName:

    def test_prefix_is_epoch_millis(self):
        before = time.time_ns() // 1_000_000
        name = timestamped_name("report.xlsx")
        after = time.time_ns() // 1_000_000

        prefix, _, rest = name.partition("_")
        assert before <= int(prefix) <= after
        assert rest == "report.xlsx"

    def test_custom_separator(self):
        assert re.fullmatch(r"\d{13}-photo\.jpg", timestamped_name("photo.jpg", "-"))


class TestSingleObjects:

    def test_upload_stores_object(self, storage, bucket):
        assert storage.upload("a.xlsx", b"data", "application/octet-stream") == "a.xlsx"
        assert bucket.objects["a.xlsx"] == b"data"

    def test_upload_failure_raises_storage_error(self, storage, bucket):
        bucket.fail_uploads_matching = "a.xlsx"

        with pytest.raises(StorageError) as exc_info:
            storage.upload("a.xlsx", b"data")

        assert exc_info.value.status_code == 502
        assert "maximum allowed size" in exc_info.value.message

    def test_public_url(self, storage):
        assert storage.public_url("1-a.jpg") == f"{MOCK_STORAGE_URL}/{BUCKET}/1-a.jpg"

    def test_name_from_url_round_trips_encoded_names(self, storage):
        url = storage.public_url("1735689600000-صورة 1.jpg")

        assert storage.name_from_url(url) == "1735689600000-صورة 1.jpg"

    def test_name_from_url_ignores_other_buckets(self, storage):
        assert storage.name_from_url(f"{MOCK_STORAGE_URL}/sheets/1_a.xlsx") is None
        assert storage.name_from_url("https://cdn.example.com/a.jpg") is None

    def test_list_names_skips_placeholder(self, storage, bucket):
        bucket.objects[".emptyFolderPlaceholder"] = b""
        bucket.objects["1_a.xlsx"] = b"x"

        assert storage.list_names() == ["1_a.xlsx"]

    def test_list_failure_raises_storage_error(self, storage, bucket):
        bucket.fail_list = True

        with pytest.raises(StorageError):
            storage.list_names()

    def test_remove_reports_removed_names(self, storage, bucket):
        bucket.objects["1_a.xlsx"] = b"x"

        assert storage.remove(["1_a.xlsx", "missing.xlsx"]) == ["1_a.xlsx"]
        assert bucket.objects == {}

    def test_remove_nothing_makes_no_call(self, storage, bucket):
        assert storage.remove([]) == []
        assert bucket.remove_calls == []


class TestUploadBatch:

    def test_urls_follow_input_order(self, storage, bucket):
        """Completion order does not affect result order."""
        original_upload = bucket.upload

        def slow_first(path, file, file_options=None):
            if path.endswith("-first.jpg"):
                time.sleep(0.05)
            return original_upload(path, file, file_options)

        bucket.upload = slow_first

        urls = storage.upload_batch(UploadFactory.images("first.jpg", "second.jpg", "third.jpg"))

        assert [url.rsplit("-", 1)[1] for url in urls] == ["first.jpg", "second.jpg", "third.jpg"]

    def test_empty_batch(self, storage, bucket):
        assert storage.upload_batch([]) == []
        assert bucket.upload_calls == []

    def test_content_type_is_forwarded(self, storage, bucket):
        uploads = []
        original_upload = bucket.upload

        def recording(path, file, file_options=None):
            uploads.append(file_options)
            return original_upload(path, file, file_options)

        bucket.upload = recording

        storage.upload_batch([UploadItem("a.png", b"png", "image/png")])

        assert uploads == [{"content-type": "image/png"}]

    def test_failure_names_the_file(self, storage, bucket):
        bucket.fail_uploads_matching = "bad"

        with pytest.raises(ImageUploadError) as exc_info:
            storage.upload_batch(UploadFactory.images("good.jpg", "bad.jpg"), max_workers=1)

        error = exc_info.value
        assert error.details["filename"] == "bad.jpg"
        assert len(error.details["uploaded"]) == 1
        assert error.details["uploaded"][0].endswith("-good.jpg")

    def test_cleanup_removes_uploads_finished_after_the_failure(self, storage, bucket):
        bucket.fail_uploads_matching = "first"

        with pytest.raises(ImageUploadError) as exc_info:
            storage.upload_batch(
                UploadFactory.images("first.jpg", "second.jpg", "third.jpg"),
                max_workers=1,
                cleanup_on_failure=True
            )

        assert exc_info.value.details["filename"] == "first.jpg"
        assert bucket.objects == {}

    def test_cleanup_failure_still_raises_upload_error(self, storage, bucket):
        bucket.fail_uploads_matching = "bad"
        bucket.fail_remove = True

        with pytest.raises(ImageUploadError):
            storage.upload_batch(
                UploadFactory.images("good.jpg", "bad.jpg"),
                max_workers=1,
                cleanup_on_failure=True
            )

        assert len(bucket.objects) == 1
