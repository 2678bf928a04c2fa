"""Tests for media/detect.py and PendingFile.from_path."""

from __future__ import annotations

import pytest

from catalogmedia.media.detect import detect_mime_type, mime_to_extension, sniff_mime
from catalogmedia.models import MediaKind, PendingFile


def _ftyp(brand: bytes) -> bytes:
    return b"\x00\x00\x00\x18ftyp" + brand + b"\x00\x00\x02\x00isommp41"


class TestSniffMime:
    @pytest.mark.parametrize(
        "data, expected",
        [
            (b"\x89PNG\r\n\x1a\n" + b"\x00" * 8, "image/png"),
            (b"\xff\xd8\xff\xe0" + b"\x00" * 8, "image/jpeg"),
            (b"GIF89a" + b"\x00" * 8, "image/gif"),
            (b"GIF87a", "image/gif"),
            (b"RIFF\x00\x00\x00\x00WEBPVP8 ", "image/webp"),
            (b"RIFF\x00\x00\x00\x00AVI LIST", "video/x-msvideo"),
            (b"BM" + b"\x00" * 12, "image/bmp"),
            (b"\x1a\x45\xdf\xa3" + b"\x00" * 8, "video/webm"),
            (b"%PDF-1.7\n", "application/pdf"),
        ],
    )
    def test_magic_bytes(self, data, expected):
        assert sniff_mime(data) == expected

    @pytest.mark.parametrize(
        "brand, expected",
        [
            (b"isom", "video/mp4"),
            (b"mp42", "video/mp4"),
            (b"qt  ", "video/quicktime"),
            (b"M4V ", "video/x-m4v"),
            (b"3gp4", "video/3gpp"),
            (b"avif", "image/avif"),
            (b"heic", "image/heic"),
        ],
    )
    def test_iso_media_brands(self, brand, expected):
        assert sniff_mime(_ftyp(brand)) == expected

    def test_riff_without_known_form_is_unknown(self):
        assert sniff_mime(b"RIFF\x00\x00\x00\x00WAVEfmt ") is None

    def test_short_riff_is_unknown(self):
        assert sniff_mime(b"RIFF") is None

    def test_unknown_bytes(self):
        assert sniff_mime(b"hello world, plain text") is None

    def test_empty(self):
        assert sniff_mime(b"") is None


class TestDetectMimeType:
    def test_content_wins_over_extension(self, image_bytes):
        # A PNG saved with a .jpg name is still a PNG.
        assert detect_mime_type("kush.jpg", image_bytes(4, 4)) == "image/png"

    def test_extension_fallback(self):
        assert detect_mime_type("clip.mp4", b"not a real header") == "video/mp4"

    def test_empty_data_uses_extension(self):
        assert detect_mime_type("photo.png", b"") == "image/png"

    def test_unknown_everything(self):
        assert detect_mime_type("README", b"just text") == "application/octet-stream"


class TestMimeToExtension:
    @pytest.mark.parametrize(
        "mime, ext",
        [
            ("image/jpeg", ".jpg"),
            ("image/png", ".png"),
            ("video/quicktime", ".mov"),
            ("video/mp4", ".mp4"),
            ("application/x-unknown", ".bin"),
        ],
    )
    def test_mapping(self, mime, ext):
        assert mime_to_extension(mime) == ext


class TestPendingFileFromPath:
    def test_reads_bytes_and_sniffs_type(self, tmp_path, image_bytes):
        data = image_bytes(10, 10)
        path = tmp_path / "gelato-41.png"
        path.write_bytes(data)

        file = PendingFile.from_path(path)
        assert file.name == "gelato-41.png"
        assert file.mime_type == "image/png"
        assert file.data == data
        assert file.size_bytes == len(data)
        assert file.kind == MediaKind.IMAGE

    def test_explicit_mime_type_is_kept(self, tmp_path):
        path = tmp_path / "menu.pdf"
        path.write_bytes(b"%PDF-1.4\n")
        file = PendingFile.from_path(str(path), mime_type="video/mp4")
        assert file.mime_type == "video/mp4"

    def test_video_from_disk(self, tmp_path):
        path = tmp_path / "tour.mov"
        path.write_bytes(_ftyp(b"qt  ") + b"\x00" * 64)
        file = PendingFile.from_path(path)
        assert file.mime_type == "video/quicktime"
        assert file.kind == MediaKind.VIDEO

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            PendingFile.from_path(tmp_path / "nope.png")
