"""Turn raw user input into :class:`MediaEntry` objects for the media slide."""

from __future__ import annotations

import base64
from typing import Optional
from urllib.parse import parse_qs, urlparse

from .errors import ValidationError
from .slide_models import MediaEntry, MediaKind

MAX_UPLOAD_BYTES = 2 * 1024 * 1024
ALLOWED_IMAGE_TYPES = ("image/png", "image/jpeg", "image/gif", "image/webp")
YOUTUBE_HOSTS = ("youtube.com", "youtu.be")


def _require_label(label: str) -> str:
    cleaned = (label or "").strip()
    if not cleaned:
        raise ValidationError("Please provide a title.")
    return cleaned


def is_youtube_url(url: str) -> bool:
    host = (urlparse(url).hostname or "").lower()
    return any(host == domain or host.endswith("." + domain) for domain in YOUTUBE_HOSTS)


def media_entry_from_url(url: str, label: str) -> MediaEntry:
    """Classify ``url`` as a video or a generic link."""

    title = _require_label(label)
    url = (url or "").strip()
    if not url:
        raise ValidationError("Please provide a URL.")
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError("Please enter a valid URL.")
    kind = MediaKind.VIDEO if is_youtube_url(url) else MediaKind.LINK
    return MediaEntry(kind=kind, locator=url, label=title)


def media_entry_from_upload(data: bytes, mime_type: str, label: str) -> MediaEntry:
    """Embed an uploaded image as a data URI photo entry."""

    title = _require_label(label)
    if not data:
        raise ValidationError("Please select an image file.")
    if len(data) > MAX_UPLOAD_BYTES:
        raise ValidationError("Image size cannot exceed 2MB.")
    if mime_type not in ALLOWED_IMAGE_TYPES:
        raise ValidationError(f"Unsupported image type: {mime_type}")
    encoded = base64.b64encode(data).decode("ascii")
    return MediaEntry(
        kind=MediaKind.PHOTO,
        locator=f"data:{mime_type};base64,{encoded}",
        label=title,
    )


def youtube_thumbnail_url(url: str) -> Optional[str]:
    """Return the ``hqdefault`` thumbnail for a YouTube link, if one can be derived."""

    parsed = urlparse(url)
    video_id = parse_qs(parsed.query).get("v", [None])[0]
    if not video_id:
        segments = [segment for segment in parsed.path.split("/") if segment]
        video_id = segments[-1] if segments else None
    if not video_id:
        return None
    return f"https://img.youtube.com/vi/{video_id}/hqdefault.jpg"
