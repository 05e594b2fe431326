import asyncio
import io

import pytest
from fastapi import HTTPException, UploadFile
from fastapi.testclient import TestClient

from photometa import config
from photometa.main import app
from photometa.routers.metadata import _extract
from photometa.services.export import NO_EXIF_NOTICE, NOT_JPEG_NOTICE


@pytest.fixture
def client():
	return TestClient(app)


def upload(client, path, name, data, content_type, **form):
	return client.post(path, files={"file": (name, data, content_type)}, data=form)


def test_extract_jpeg(client, camera_jpeg_bytes):
	resp = upload(client, "/metadata", "IMG_0001.jpg", camera_jpeg_bytes, "image/jpeg", last_modified="1704067200000")
	assert resp.status_code == 200
	body = resp.json()
	assert body["notice"] is None
	meta = body["metadata"]
	assert meta["file_name"] == "IMG_0001.jpg"
	assert meta["file_type"] == "image/jpeg"
	assert meta["file_size"] == len(camera_jpeg_bytes)
	assert meta["last_modified"] == "2024-01-01T00:00:00+00:00"
	assert (meta["width"], meta["height"]) == (64, 48)
	assert meta["aspect_ratio"] == "4:3"
	assert meta["exif"]["Make"] == "Canon"
	assert meta["exif"]["ExposureTime"] == "1/125"


def test_extract_png_has_notice(client, png_bytes):
	resp = upload(client, "/metadata", "banner.png", png_bytes, "image/png")
	assert resp.status_code == 200
	body = resp.json()
	assert body["notice"] == NOT_JPEG_NOTICE
	assert body["metadata"]["exif"] == {}
	assert body["metadata"]["aspect_ratio"] == "16:9"
	assert body["metadata"]["last_modified"] is None


def test_extract_stripped_jpeg(client, plain_jpeg_bytes):
	resp = upload(client, "/metadata", "square.jpg", plain_jpeg_bytes, "image/jpeg")
	assert resp.json()["notice"] == NO_EXIF_NOTICE
	assert resp.json()["metadata"]["orientation"] == "Square"


def test_text_block(client, camera_jpeg_bytes):
	resp = upload(client, "/metadata/text", "IMG_0001.jpg", camera_jpeg_bytes, "image/jpeg")
	assert resp.status_code == 200
	assert resp.headers["content-type"].startswith("text/plain")
	lines = resp.text.splitlines()
	assert lines[0] == "File: IMG_0001.jpg"
	assert "Dimensions: 64 × 48 px" in lines
	assert "Make: Canon" in lines


def test_export_download(client, camera_jpeg_bytes):
	resp = upload(client, "/metadata/export", "IMG_0001.jpg", camera_jpeg_bytes, "image/jpeg")
	assert resp.status_code == 200
	assert resp.headers["content-disposition"] == 'attachment; filename="IMG_0001.jpg-metadata.json"'
	assert resp.json()["exif"]["Model"] == "Canon EOS 5D Mark IV"


def test_empty_upload(client):
	resp = upload(client, "/metadata", "empty.jpg", b"", "image/jpeg")
	assert resp.status_code == 400


def test_not_an_image(client):
	resp = upload(client, "/metadata", "notes.txt", b"hello world", "text/plain")
	assert resp.status_code == 422


def test_upload_too_large(client, png_bytes, monkeypatch):
	monkeypatch.setattr(config, "MAX_UPLOAD_BYTES", 16)
	resp = upload(client, "/metadata", "banner.png", png_bytes, "image/png")
	assert resp.status_code == 413


def test_sub_ifd_setting(client, camera_jpeg_bytes, monkeypatch):
	monkeypatch.setattr(config, "FOLLOW_EXIF_IFD", False)
	resp = upload(client, "/metadata", "IMG_0001.jpg", camera_jpeg_bytes, "image/jpeg")
	assert "ExposureTime" not in resp.json()["metadata"]["exif"]


def test_declared_size_is_checked_before_reading(monkeypatch):
	monkeypatch.setattr(config, "MAX_UPLOAD_BYTES", 16)
	# the declared size is over the limit even though the body itself is small
	upload_file = UploadFile(file=io.BytesIO(b"\xff\xd8"), size=1 << 30, filename="huge.jpg")
	with pytest.raises(HTTPException) as e:
		asyncio.run(_extract(upload_file, None))
	assert e.value.status_code == 413
	assert upload_file.file.tell() == 0


def test_out_of_range_last_modified_is_ignored(client, png_bytes):
	resp = upload(client, "/metadata", "banner.png", png_bytes, "image/png", last_modified=str(10 ** 18))
	assert resp.status_code == 200
	assert resp.json()["metadata"]["last_modified"] is None
