"""Static slide outline and its optional JSON manifest."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from .slide_models import SlideDescriptor, SlideKind

DEFAULT_PRESENTATION_TITLE = "Bhoomi Naturals Presentation"

PRESENTATION_OUTLINE: Tuple[SlideDescriptor, ...] = (
    SlideDescriptor(1, "Introduction", "Introduction of Bhoomi Naturals", SlideKind.CONTENT, "SlDb256ENuM"),
    SlideDescriptor(2, "Our Services", "Farm development & management services - what it includes", SlideKind.CONTENT, "sAg5202T_cE"),
    SlideDescriptor(3, "Our Approach", "Our approach to farm management, focusing on first principles", SlideKind.CONTENT, "Hnz-6J7btQA"),
    SlideDescriptor(4, "Benefits to Owners", "Benefits to Farm owners", SlideKind.CONTENT, "SlDb256ENuM"),
    SlideDescriptor(5, "Our Credentials", "Credentials - hinting at past projects & farm owner experiences", SlideKind.CONTENT, "wD72T26_p8s"),
    SlideDescriptor(6, "Why Bhoomi Naturals?", "Why Bhoomi naturals? Their USP and experience", SlideKind.CONTENT, "sAg5202T_cE"),
    SlideDescriptor(
        7,
        "Resources & Media",
        'A "Resources" slide with placeholder links for real photos, YouTube video references, '
        "and other relevant sites for more information.",
        SlideKind.MEDIA,
    ),
    SlideDescriptor(8, "Contact Us", 'A "Contact Us" slide with placeholder contact information', SlideKind.CONTENT),
)


def validate_outline(descriptors: Iterable[SlideDescriptor]) -> List[SlideDescriptor]:
    outline = list(descriptors)
    if not outline:
        raise ValueError("Outline must contain at least one slide")
    seen = set()
    for descriptor in outline:
        if descriptor.slide_id in seen:
            raise ValueError(f"Duplicate slide id in outline: {descriptor.slide_id}")
        seen.add(descriptor.slide_id)
    return outline


def load_outline(path: Path) -> Tuple[str, List[SlideDescriptor]]:
    """Read ``(presentation_title, descriptors)`` from a JSON manifest.

    The manifest looks like::

        {"presentation_title": "...",
         "slides": [{"id": 1, "title": "...", "prompt_topic": "...", "type": "content"}]}
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Outline manifest not found at {path}")
    data = json.loads(path.read_text(encoding="utf-8"))
    try:
        descriptors = [SlideDescriptor.from_dict(item) for item in data.get("slides", [])]
    except KeyError as exc:
        raise ValueError(f"Outline entry is missing field {exc}") from exc
    title = data.get("presentation_title") or DEFAULT_PRESENTATION_TITLE
    return title, validate_outline(descriptors)


def resolve_outline(path: Optional[Path] = None) -> Tuple[str, List[SlideDescriptor]]:
    if path is None:
        return DEFAULT_PRESENTATION_TITLE, list(PRESENTATION_OUTLINE)
    return load_outline(path)
