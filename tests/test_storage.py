import io

import pytest
from PIL import Image
from moto import mock_aws

import civic_api.storage as storage
from civic_api.photo_utils import detect_mime_type, validate_image
from civic_api.storage_s3 import S3Storage
from conftest import png_bytes


@pytest.fixture
def s3():
    with mock_aws():
        yield S3Storage()


def test_image_key_is_owner_scoped_and_sanitized():
    key = storage.build_image_key("user-1", "../My Photo (1).PNG", timestamp_ms=1700000000000)
    assert key == "user-1/1700000000000-My_Photo_1_.PNG"
    assert storage.build_image_key("user-1", "", timestamp_ms=1) == "user-1/1-image"


def test_upload_to_s3_returns_public_url(s3, monkeypatch):
    s3.ensure_bucket()
    monkeypatch.setattr(storage, "_s3", s3)

    url = storage.upload_report_image("user-1", "pothole.png", png_bytes(), "image/png")

    key = url.split(".amazonaws.com/", 1)[1]
    assert url.startswith("https://report-images.s3.us-east-1.amazonaws.com/user-1/")
    head = s3.head_object(key)
    assert head["ContentType"] == "image/png"


def test_s3_failure_falls_back_to_local(s3, monkeypatch):
    # bucket never created, so put_object fails
    monkeypatch.setattr(storage, "_s3", s3)

    url = storage.upload_report_image("user-2", "pothole.png", png_bytes(), "image/png")

    assert url.startswith("/storage/report-images/user-2/")
    key = url[len("/storage/report-images/"):]
    assert (storage.LOCAL_STORAGE_PATH / "report-images" / key).read_bytes() == png_bytes()


def test_local_upload_writes_file():
    url = storage.upload_report_image("user-3", "bin.png", b"data", "image/png")
    key = url[len("/storage/report-images/"):]
    assert (storage.LOCAL_STORAGE_PATH / "report-images" / key).read_bytes() == b"data"


def test_image_validation():
    assert validate_image(png_bytes(), "ok.png") == (True, None)
    assert validate_image(b"", "empty.png")[0] is False
    assert validate_image(png_bytes(), "ok.exe")[0] is False
    assert validate_image(b"not an image", "fake.jpg")[0] is False
    assert detect_mime_type(png_bytes(), "mislabelled.jpg") == "image/png"


def test_decompression_bomb_is_invalid_not_an_error():
    buf = io.BytesIO()
    Image.new("1", (20000, 20000)).save(buf, format="PNG")
    data = buf.getvalue()

    is_valid, error = validate_image(data, "huge.png")
    assert is_valid is False
    assert error.startswith("Invalid image file")
    assert detect_mime_type(data, "huge.png") == "image/png"
