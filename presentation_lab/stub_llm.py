"""Offline LLM client used when no provider credentials are configured."""

from __future__ import annotations

import hashlib
import io
import json
import re
import textwrap
from typing import List, Optional

from PIL import Image, ImageDraw

from LLM_API.data_classes import (
    BaseResponse,
    GeneratedImage,
    ImageGenerationRequest,
    ImageGenerationResponse,
    StructuredOutputRequest,
    StructuredOutputResponse,
)

_TOPIC = re.compile(r'topic for this specific slide is "(?P<topic>[^"]*)"')
_REQUEST = re.compile(r'User\'s Request: "(?P<request>.*)"')
_TITLE = re.compile(r"^Title: (?P<title>.*)$", re.MULTILINE)
_BULLET = re.compile(r"^(?:Body: )?- (?P<point>.*)$", re.MULTILINE)

# blues, greens and earthy tones
_PALETTE = [
    (31, 78, 121),
    (46, 125, 50),
    (129, 199, 132),
    (141, 110, 99),
    (93, 64, 55),
    (38, 166, 154),
]


def _extract_topic(prompt: str, *, max_width: int = 60) -> str:
    match = _TOPIC.search(prompt or "")
    topic = match.group("topic") if match else (prompt or "").strip()
    if not topic:
        return "Overview"
    return textwrap.shorten(topic, width=max_width, placeholder="…")


class StubSlideLLM:
    """Mimics structured output and image generation deterministically."""

    model_name = "stub-structured"
    image_model_name = "stub-image"

    def __init__(self, *, image_size: tuple = (640, 360)) -> None:
        self.image_size = image_size

    # ------------------------------------------------------------------
    # LLM compatible interface
    # ------------------------------------------------------------------
    def get_provider_name(self) -> str:
        return "Stub"

    def supports_feature(self, feature: str) -> bool:
        return feature in {"structured_output", "image_generation"}

    def generate_content(self, request) -> BaseResponse:
        topic = _extract_topic(getattr(request, "prompt", ""))
        return BaseResponse(text=f"Draft notes about {topic}.", model_used="stub-text")

    def generate_structured_output(
        self, request: StructuredOutputRequest
    ) -> StructuredOutputResponse:
        if request.schema_name == "slide_refinement":
            payload = self._refined_payload(request.prompt)
        else:
            payload = self._generated_payload(request.prompt)
        return StructuredOutputResponse(
            text=json.dumps(payload, ensure_ascii=False),
            parsed_output=payload,
            model_used=self.model_name,
        )

    def generate_image(self, request: ImageGenerationRequest) -> ImageGenerationResponse:
        return ImageGenerationResponse(
            images=[GeneratedImage(data=self._render_png(request.prompt), mime_type="image/png")],
            model_used=self.image_model_name,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _generated_payload(self, prompt: str) -> dict:
        topic = _extract_topic(prompt)
        return {
            "title": topic,
            "subtitle": "Draft generated offline",
            "body": [
                f"Why {topic.lower()} matters to farm owners",
                "What we deliver on the ground, season after season",
                "How success is measured and reported",
            ],
        }

    def _refined_payload(self, prompt: str) -> dict:
        title_match = _TITLE.search(prompt or "")
        request_match = _REQUEST.search(prompt or "")
        points: List[str] = [match.group("point") for match in _BULLET.finditer(prompt or "")]
        instruction: Optional[str] = request_match.group("request") if request_match else None
        if instruction:
            points.append(f"Revised: {textwrap.shorten(instruction, width=80, placeholder='…')}")
        return {
            "title": title_match.group("title") if title_match else "Refined slide",
            "body": points or ["Refined content"],
        }

    def _render_png(self, prompt: str) -> bytes:
        digest = hashlib.sha256((prompt or "").encode("utf-8")).digest()
        width, height = self.image_size
        image = Image.new("RGB", (width, height), _PALETTE[digest[0] % len(_PALETTE)])
        draw = ImageDraw.Draw(image)
        for idx in range(4):
            color = _PALETTE[digest[idx + 1] % len(_PALETTE)]
            radius = height // (3 + idx)
            cx = digest[idx + 5] * width // 255
            cy = digest[idx + 9] * height // 255
            draw.ellipse((cx - radius, cy - radius, cx + radius, cy + radius), fill=color)
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()
