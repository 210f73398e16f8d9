"""Tests for image helpers."""

import base64
from io import BytesIO

import pytest
from PIL import Image

from kidcreatives.utils.errors import ImageProcessingError
from kidcreatives.utils.images import (
    base64_to_bytes,
    detect_mime_type,
    guess_mime_type,
    image_to_data_url,
    prepare_upload,
    resize_if_needed,
    split_data_url,
)

from .conftest import make_png_b64


def jpeg_bytes(size=(8, 8)) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, "blue").save(buffer, format="JPEG")
    return buffer.getvalue()


class TestDataUrls:

    def test_split_data_url(self):
        assert split_data_url("data:image/webp;base64,QUJD") == ("QUJD", "image/webp")

    def test_plain_base64_passes_through(self):
        assert split_data_url("QUJD") == ("QUJD", None)

    def test_image_to_data_url(self):
        assert image_to_data_url("QUJD", "image/png") == "data:image/png;base64,QUJD"

    def test_base64_to_bytes_accepts_data_url(self):
        assert base64_to_bytes("data:image/png;base64,QUJD") == b"ABC"

    def test_invalid_base64(self):
        with pytest.raises(ImageProcessingError):
            base64_to_bytes("not base64!")


class TestMimeTypes:

    def test_detects_png_and_jpeg(self):
        assert detect_mime_type(base64_to_bytes(make_png_b64())) == "image/png"
        assert detect_mime_type(jpeg_bytes()) == "image/jpeg"

    def test_unreadable_image(self):
        with pytest.raises(ImageProcessingError):
            detect_mime_type(b"definitely not an image")

    def test_guess_never_raises(self):
        assert guess_mime_type("QUJD", default="image/png") == "image/png"
        assert guess_mime_type("???", default="image/webp") == "image/webp"
        assert guess_mime_type(make_png_b64(), default="image/webp") == "image/png"


class TestPrepareUpload:

    def test_detected_type_wins_over_declared(self):
        payload, mime_type = prepare_upload(make_png_b64(), "image/jpeg")
        assert mime_type == "image/png"
        assert base64_to_bytes(payload)

    def test_data_url_is_unwrapped(self):
        image_b64 = base64.b64encode(jpeg_bytes()).decode("utf-8")
        payload, mime_type = prepare_upload(f"data:image/jpeg;base64,{image_b64}")
        assert payload == image_b64
        assert mime_type == "image/jpeg"

    def test_empty_upload(self):
        with pytest.raises(ImageProcessingError):
            prepare_upload("")

    def test_not_an_image(self):
        with pytest.raises(ImageProcessingError):
            prepare_upload(base64.b64encode(b"hello").decode("utf-8"))

    def test_oversized_upload_is_shrunk(self):
        payload, _ = prepare_upload(make_png_b64(size=(4096, 1024)))

        with Image.open(BytesIO(base64_to_bytes(payload))) as image:
            assert image.size == (2048, 512)


def test_resize_leaves_small_images_alone():
    original = jpeg_bytes()
    assert resize_if_needed(original) is original
