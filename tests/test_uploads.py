"""Tests for upload validation and naming."""

import re

import pytest

from artwork_catalog.uploads import (
    extension_from_mime,
    generate_upload_filename,
    is_valid_image_type,
    sanitize_filename,
)


@pytest.mark.parametrize(
    "name, expected",
    [
        ("My Photo (1)", "MyPhoto1"),
        ("obra_final-v2", "obra_final-v2"),
        ("ñandú", "and"),
        ("...", "image"),
        ("", "image"),
        ("x" * 80, "x" * 50),
    ],
)
def test_sanitize_filename(name: str, expected: str):
    assert sanitize_filename(name) == expected


@pytest.mark.parametrize(
    "content_type, valid",
    [
        ("image/jpeg", True),
        ("image/png", True),
        ("image/gif", True),
        ("IMAGE/PNG; charset=binary", True),
        ("image/webp", False),
        ("text/plain", False),
        (None, False),
    ],
)
def test_is_valid_image_type(content_type, valid: bool):
    assert is_valid_image_type(content_type) is valid


def test_extension_from_mime():
    assert extension_from_mime("image/jpeg") == ".jpg"
    assert extension_from_mime("image/gif") == ".gif"
    assert extension_from_mime("application/pdf") == ""


class TestGenerateUploadFilename:
    def test_keeps_original_extension(self):
        name = generate_upload_filename("Sketch 03.PNG", "image/png")
        assert re.fullmatch(r"\d+_Sketch03\.png", name)

    def test_extension_from_content_type(self):
        name = generate_upload_filename("scan", "image/jpeg")
        assert re.fullmatch(r"\d+_scan\.jpg", name)

    def test_non_image_extension_uses_content_type(self):
        name = generate_upload_filename("photo.heic", "image/jpeg")
        assert re.fullmatch(r"\d+_photo\.jpg", name)

    def test_client_path_is_dropped(self):
        name = generate_upload_filename("C:\\Users\\ana\\..\\cuadro.gif", "image/gif")
        assert re.fullmatch(r"\d+_cuadro\.gif", name)

    def test_missing_name(self):
        name = generate_upload_filename(None, "image/png")
        assert re.fullmatch(r"\d+_image\.png", name)
