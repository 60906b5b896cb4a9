import base64

import pytest

from presentation_lab.errors import ValidationError
from presentation_lab.media import (
    MAX_UPLOAD_BYTES,
    media_entry_from_upload,
    media_entry_from_url,
    youtube_thumbnail_url,
)
from presentation_lab.slide_models import ImageRef, MediaKind

from tests.llm_stubs import png_bytes


@pytest.mark.parametrize(
    "url",
    [
        "https://www.youtube.com/watch?v=SlDb256ENuM",
        "https://youtu.be/SlDb256ENuM",
        "https://m.youtube.com/watch?v=abc",
    ],
)
def test_youtube_urls_become_videos(url):
    entry = media_entry_from_url(url, " Farm tour ")
    assert entry.kind is MediaKind.VIDEO
    assert entry.label == "Farm tour"
    assert entry.locator == url


def test_other_urls_become_links():
    entry = media_entry_from_url("https://bhoominaturals.example/about", "About")
    assert entry.kind is MediaKind.LINK
    assert not entry.is_embedded


@pytest.mark.parametrize(
    "url, label, message",
    [
        ("https://example.com", "", "Please provide a title."),
        ("", "Docs", "Please provide a URL."),
        ("not a url", "Docs", "Please enter a valid URL."),
        ("ftp://example.com/file", "Docs", "Please enter a valid URL."),
    ],
)
def test_invalid_url_input(url, label, message):
    with pytest.raises(ValidationError, match=message):
        media_entry_from_url(url, label)


def test_upload_becomes_embedded_photo():
    data = png_bytes()
    entry = media_entry_from_upload(data, "image/png", "Harvest")

    assert entry.kind is MediaKind.PHOTO
    assert entry.is_embedded
    assert entry.locator == "data:image/png;base64," + base64.b64encode(data).decode("ascii")
    assert ImageRef.from_data_uri(entry.locator).data == data


def test_upload_size_limit():
    with pytest.raises(ValidationError, match="Image size cannot exceed 2MB."):
        media_entry_from_upload(b"0" * (MAX_UPLOAD_BYTES + 1), "image/png", "Too big")


def test_upload_rejects_non_images():
    with pytest.raises(ValidationError, match="Unsupported image type"):
        media_entry_from_upload(b"%PDF-1.4", "application/pdf", "Brochure")
    with pytest.raises(ValidationError, match="Please select an image file."):
        media_entry_from_upload(b"", "image/png", "Empty")


def test_youtube_thumbnail_url():
    assert (
        youtube_thumbnail_url("https://www.youtube.com/watch?v=SlDb256ENuM")
        == "https://img.youtube.com/vi/SlDb256ENuM/hqdefault.jpg"
    )
    assert youtube_thumbnail_url("https://youtu.be/abc123") == "https://img.youtube.com/vi/abc123/hqdefault.jpg"
    assert youtube_thumbnail_url("https://youtube.com/") is None


def test_data_uri_parsing_rejects_garbage():
    with pytest.raises(ValueError):
        ImageRef.from_data_uri("https://example.com/photo.png")
