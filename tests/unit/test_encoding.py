"""Unit tests for image encoding helpers."""

import base64
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from promptcraft.core.encoding import (
    decode_base64,
    detect_mime_type,
    encode_file_base64,
    load_reference_image,
    save_image,
    strip_data_url_header,
)


class TestBase64:
    """Tests for base64 helpers."""

    def test_encode_file_has_no_header(self, png_file):
        encoded = encode_file_base64(png_file)
        assert not encoded.startswith("data:")
        assert base64.b64decode(encoded) == png_file.read_bytes()

    def test_encode_missing_file_raises(self, temp_dir):
        with pytest.raises(OSError):
            encode_file_base64(temp_dir / "missing.png")

    def test_strip_header(self):
        assert strip_data_url_header("data:image/png;base64,QUJD") == "QUJD"

    def test_strip_header_leaves_plain_payload(self):
        assert strip_data_url_header("QUJD") == "QUJD"

    def test_decode_with_and_without_header(self):
        assert decode_base64("QUJD") == b"ABC"
        assert decode_base64("data:image/png;base64,QUJD") == b"ABC"

    def test_decode_invalid(self):
        with pytest.raises(ValueError, match="Invalid base64"):
            decode_base64("not base64!!")


class TestDetectMimeType:
    """Tests for content-based MIME detection."""

    def test_png(self, png_file):
        assert detect_mime_type(png_file) == "image/png"

    def test_jpeg(self, jpeg_file):
        assert detect_mime_type(jpeg_file) == "image/jpeg"

    def test_not_an_image(self, text_file):
        assert detect_mime_type(text_file) is None

    def test_renamed_file_reports_real_type(self, temp_dir, jpeg_file):
        renamed = temp_dir / "actually-jpeg.png"
        renamed.write_bytes(jpeg_file.read_bytes())
        assert detect_mime_type(renamed) == "image/jpeg"


class TestLoadReferenceImage:
    """Tests for load_reference_image."""

    def test_describes_file(self, png_file):
        image = load_reference_image(png_file)
        assert image.name == "reference.png"
        assert image.path == str(png_file)
        assert image.mime_type == "image/png"
        assert image.size == png_file.stat().st_size

    def test_missing_file_raises(self, temp_dir):
        with pytest.raises(OSError):
            load_reference_image(temp_dir / "missing.png")


class TestSaveImage:
    """Tests for save_image."""

    def test_saves_data_url(self, temp_dir):
        path = save_image("data:image/png;base64,QUJD", temp_dir / "out")

        assert path.parent == temp_dir / "out"
        assert path.name.startswith("ai-generated-image-")
        assert path.suffix == ".png"
        assert path.read_bytes() == b"ABC"

    def test_downloads_http_url(self, temp_dir):
        response = Mock(content=b"PNGDATA")
        with patch("promptcraft.core.encoding.httpx.get", return_value=response) as mock_get:
            path = save_image("https://cdn.test/image.png", temp_dir)

        mock_get.assert_called_once()
        response.raise_for_status.assert_called_once()
        assert Path(path).read_bytes() == b"PNGDATA"

    def test_rejects_other_sources(self, temp_dir):
        with pytest.raises(ValueError, match="Invalid image source"):
            save_image("ftp://example.com/a.png", temp_dir)
