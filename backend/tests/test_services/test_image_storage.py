"""Unit tests for upload validation and the local image store."""

import io

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from travelworld.errors import ValidationError
from travelworld.services.storage import LocalImageStore, check_image_type, check_upload_count, read_limited


def _upload(name: str = "photo.png", content_type: str = "image/png", data: bytes = b"img") -> UploadFile:
    return UploadFile(
        file=io.BytesIO(data),
        filename=name,
        headers=Headers({"content-type": content_type}),
    )


class TestValidation:
    def test_count_limit(self):
        check_upload_count([_upload()] * 10, 10)
        with pytest.raises(ValidationError, match="Too many files"):
            check_upload_count([_upload()] * 11, 10)

    @pytest.mark.parametrize(
        ("name", "content_type"),
        [("a.JPG", "image/jpeg"), ("b.webp", "image/webp"), ("c.gif", "image/gif")],
    )
    def test_allowed_types(self, name, content_type):
        check_image_type(_upload(name, content_type))

    @pytest.mark.parametrize(
        ("name", "content_type"),
        [
            ("script.exe", "image/png"),
            ("photo.png", "application/octet-stream"),
            ("noextension", "image/png"),
        ],
    )
    def test_rejected_types(self, name, content_type):
        with pytest.raises(ValidationError, match="Only image files"):
            check_image_type(_upload(name, content_type))

    async def test_size_limit(self):
        assert await read_limited(_upload(data=b"x" * 10), 10) == b"x" * 10
        with pytest.raises(ValidationError, match="File size too large"):
            await read_limited(_upload(data=b"x" * 11), 10)


class TestLocalImageStore:
    async def test_save_and_delete(self, tmp_path):
        store = LocalImageStore(tmp_path, "http://cdn.test/")
        urls = await store.save_all([_upload("one.png"), _upload("two.jpg", "image/jpeg")])

        assert len(urls) == 2
        assert all(url.startswith("http://cdn.test/uploads/") for url in urls)
        assert urls[1].endswith(".jpg")
        names = [url.rsplit("/", 1)[1] for url in urls]
        assert sorted(p.name for p in tmp_path.iterdir()) == sorted(names)

        await store.delete(urls[0])
        assert not (tmp_path / names[0]).exists()
        assert (tmp_path / names[1]).exists()

    async def test_nothing_written_when_one_file_is_invalid(self, tmp_path):
        store = LocalImageStore(tmp_path / "uploads", "http://cdn.test")
        with pytest.raises(ValidationError):
            await store.save_all([_upload("ok.png"), _upload("bad.txt", "text/plain")])
        assert not (tmp_path / "uploads").exists()

    async def test_foreign_urls_ignored(self, tmp_path):
        store = LocalImageStore(tmp_path / "store", "http://cdn.test")
        outside = tmp_path / "keep.png"
        outside.write_bytes(b"x")
        await store.delete("http://elsewhere.test/uploads/keep.png")
        await store.delete("http://cdn.test/uploads/../keep.png")
        assert outside.exists()
