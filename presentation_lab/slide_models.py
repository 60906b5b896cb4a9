"""Data models describing the slide outline and per-slide runtime state."""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class SlideKind(str, Enum):
    CONTENT = "content"
    MEDIA = "media"


class Status(str, Enum):
    """Lifecycle of a slide's text or image."""

    UNINITIALIZED = "uninitialized"
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


class MediaKind(str, Enum):
    VIDEO = "video"
    LINK = "link"
    PHOTO = "photo"

    @property
    def label(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True, slots=True)
class SlideDescriptor:
    """Static definition of a slide in the outline."""

    slide_id: int
    title: str
    prompt_topic: str
    kind: SlideKind = SlideKind.CONTENT
    video_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SlideDescriptor":
        return cls(
            slide_id=int(data["id"]),
            title=data.get("title", ""),
            prompt_topic=data.get("prompt_topic") or data.get("promptTopic", ""),
            kind=SlideKind(data.get("type", data.get("kind", SlideKind.CONTENT.value))),
            video_id=data.get("video_id") or data.get("videoId"),
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.slide_id,
            "title": self.title,
            "prompt_topic": self.prompt_topic,
            "type": self.kind.value,
        }
        if self.video_id:
            payload["video_id"] = self.video_id
        return payload


@dataclass(slots=True)
class ContentBody:
    """Title, optional subtitle and bullet points of a text slide."""

    title: str
    body: List[str] = field(default_factory=list)
    subtitle: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContentBody":
        subtitle = data.get("subtitle")
        return cls(
            title=str(data.get("title", "")).strip(),
            body=[str(item).strip() for item in data.get("body", []) if str(item).strip()],
            subtitle=str(subtitle).strip() if subtitle else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"title": self.title, "body": list(self.body)}
        if self.subtitle:
            payload["subtitle"] = self.subtitle
        return payload


@dataclass(frozen=True, slots=True)
class MediaEntry:
    """A single resource on the media slide."""

    kind: MediaKind
    locator: str
    label: str

    @property
    def is_embedded(self) -> bool:
        return self.locator.startswith("data:")

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind.value, "url": self.locator, "title": self.label}


@dataclass(slots=True)
class MediaGallery:
    """Title and ordered resource list of a media slide."""

    title: str
    items: List[MediaEntry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "items": [item.to_dict() for item in self.items]}


SlideContent = Union[ContentBody, MediaGallery]

_DATA_URI = re.compile(r"^data:(?P<mime>[\w/+.-]+);base64,(?P<data>.*)$", re.DOTALL)


@dataclass(frozen=True, slots=True)
class ImageRef:
    """Opaque handle to generated or uploaded bitmap data."""

    data: bytes
    mime_type: str = "image/png"

    def to_data_uri(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"

    @classmethod
    def from_data_uri(cls, uri: str) -> "ImageRef":
        match = _DATA_URI.match(uri or "")
        if match is None:
            raise ValueError("Not a base64 data URI")
        try:
            data = base64.b64decode(match.group("data"), validate=True)
        except binascii.Error as exc:
            raise ValueError("Data URI payload is not valid base64") from exc
        return cls(data=data, mime_type=match.group("mime"))


@dataclass(slots=True)
class SlideRuntimeState:
    """Mutable generation state of one slide.

    ``content`` holds a :class:`ContentBody` for content slides and a
    :class:`MediaGallery` for media slides; the descriptor's ``kind`` decides
    which one, see :attr:`content_body` and :attr:`media_gallery`.
    """

    descriptor: SlideDescriptor
    text_status: Status = Status.UNINITIALIZED
    image_status: Status = Status.UNINITIALIZED
    content: Optional[SlideContent] = None
    image_ref: Optional[ImageRef] = None

    @property
    def slide_id(self) -> int:
        return self.descriptor.slide_id

    @property
    def kind(self) -> SlideKind:
        return self.descriptor.kind

    @property
    def content_body(self) -> Optional[ContentBody]:
        if self.kind is not SlideKind.CONTENT:
            return None
        return self.content  # type: ignore[return-value]

    @property
    def media_gallery(self) -> Optional[MediaGallery]:
        if self.kind is not SlideKind.MEDIA:
            return None
        return self.content  # type: ignore[return-value]

    @property
    def is_exportable(self) -> bool:
        return self.text_status is Status.READY and self.content is not None

    def copy(self) -> "SlideRuntimeState":
        """Return a detached copy that shares no mutable lists with ``self``."""

        content: Optional[SlideContent] = self.content
        if isinstance(content, ContentBody):
            content = replace(content, body=list(content.body))
        elif isinstance(content, MediaGallery):
            content = replace(content, items=list(content.items))
        return replace(self, content=content)
