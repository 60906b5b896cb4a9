"""Slide text, refinement and illustration requests backed by an LLM provider."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Optional, Protocol

from LLM_API.data_classes import (
    ImageGenerationRequest,
    StructuredOutputRequest,
    StructuredOutputResponse,
    create_image_request,
)
from LLM_API.exceptions import LLMAPIError, LLMError, LLMUnsupportedFeatureError

from .errors import GenerationError, ImageError, RefinementError
from .slide_models import (
    ContentBody,
    ImageRef,
    MediaGallery,
    SlideContent,
    SlideKind,
)

LOGGER = logging.getLogger(__name__)

MEDIA_SLIDE_TITLE = "Resources & Media"

SLIDE_CONTENT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "title": {
            "type": "string",
            "description": "A concise and engaging title for the slide.",
        },
        "subtitle": {
            "type": "string",
            "description": "An optional short subtitle to complement the title.",
        },
        "body": {
            "type": "array",
            "description": (
                "The main content of the slide, as an array of bullet points (strings). "
                "Keep each point concise."
            ),
            "items": {"type": "string"},
        },
    },
    "required": ["title", "body"],
}


class SlideCollaborator(Protocol):
    """What the slide store needs from a content backend."""

    async def generate(
        self, topic: str, presentation_title: str, kind: SlideKind
    ) -> SlideContent: ...

    async def refine(self, content: ContentBody, instruction: str) -> ContentBody: ...

    async def generate_image(self, content: ContentBody) -> ImageRef: ...


class SlideWriter:
    """Generate, refine and illustrate slides through a ``CallModel`` client.

    Provider clients are blocking, so every call is pushed to a worker thread;
    the coroutine itself never touches shared state.
    """

    def __init__(self, llm_client, *, media_title: str = MEDIA_SLIDE_TITLE) -> None:
        self.llm_client = llm_client
        self.media_title = media_title

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def generate(
        self, topic: str, presentation_title: str, kind: SlideKind
    ) -> SlideContent:
        if kind is SlideKind.MEDIA:
            # Media slides are curated by hand, the gallery starts empty.
            return MediaGallery(title=self.media_title, items=[])

        prompt = _generation_prompt(topic, presentation_title)
        try:
            payload = await asyncio.to_thread(self._request_content, prompt, "slide_content")
        except (LLMError, ValueError) as exc:
            LOGGER.warning("Slide generation for %r failed: %s", topic, exc)
            raise GenerationError("Failed to generate slide content. Please try again.") from exc

        content = _content_from_payload(payload)
        if content is None:
            raise GenerationError("Generated slide content is missing a title or bullet points.")
        return content

    async def refine(self, content: ContentBody, instruction: str) -> ContentBody:
        if not instruction or not instruction.strip():
            raise RefinementError("Please describe how the slide should change.")

        prompt = _refinement_prompt(content, instruction.strip())
        try:
            payload = await asyncio.to_thread(self._request_content, prompt, "slide_refinement")
        except (LLMError, ValueError) as exc:
            LOGGER.warning("Slide refinement failed: %s", exc)
            raise RefinementError("Failed to refine slide content. Please try again.") from exc

        refined = _content_from_payload(payload)
        if refined is None:
            raise RefinementError("Refined slide content is missing a title or bullet points.")
        return refined

    async def generate_image(self, content: ContentBody) -> ImageRef:
        request = create_image_request(_image_prompt(content), aspect_ratio="16:9")
        try:
            return await asyncio.to_thread(self._request_image, request)
        except (LLMError, ValueError) as exc:
            LOGGER.warning("Slide image generation failed: %s", exc)
            raise ImageError("Failed to generate slide image. Please try again.") from exc

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _request_content(self, prompt: str, schema_name: str) -> Dict[str, Any]:
        if self.llm_client is None:
            raise LLMAPIError(message="LLM client is required to generate slide content")
        request = StructuredOutputRequest(
            prompt=prompt,
            schema=SLIDE_CONTENT_SCHEMA,
            schema_name=schema_name,
            instructions="Respond with JSON only.",
        )
        response = self.llm_client.generate_structured_output(request)
        parsed = _extract_parsed_output(response)
        if parsed is None:
            raise LLMAPIError(
                message=getattr(response, "error", None) or "Empty structured output",
                provider=_provider_name(self.llm_client),
                error_type="structured_output",
            )
        return parsed

    def _request_image(self, request: ImageGenerationRequest) -> ImageRef:
        if self.llm_client is None:
            raise LLMAPIError(message="LLM client is required to generate images")
        supports = getattr(self.llm_client, "supports_feature", None)
        if supports is not None and not supports("image_generation"):
            raise LLMUnsupportedFeatureError(
                message="Image generation is not available for this provider",
                provider=_provider_name(self.llm_client),
                error_type="image_generation",
            )
        response = self.llm_client.generate_image(request)
        image = response.first_image if response is not None else None
        if response is None or response.error or image is None:
            raise LLMAPIError(
                message=getattr(response, "error", None) or "No images were generated.",
                provider=_provider_name(self.llm_client),
                error_type="image_generation",
            )
        return ImageRef(data=image.data, mime_type=image.mime_type)


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------

def _generation_prompt(topic: str, presentation_title: str) -> str:
    return (
        "You are a presentation creator. Your task is to generate the content for a single "
        f'slide of a presentation titled "{presentation_title}". The topic for this specific '
        f'slide is "{topic}". Generate a title, an optional subtitle, and the body content as '
        "a list of bullet points. Ensure the content is professional, clear, and concise."
    )


def _refinement_prompt(content: ContentBody, instruction: str) -> str:
    body = "\n".join(f"- {point}" for point in content.body)
    sections = [
        "You are a presentation editor. A user wants to refine the content of a slide.",
        "",
        "Original Content:",
        f"Title: {content.title}",
        f"Subtitle: {content.subtitle or 'N/A'}",
        f"Body: {body}",
        "",
        f'User\'s Request: "{instruction}"',
        "",
        "Based on the user's request, generate the refined slide content. Adhere to the original "
        "JSON structure with a title, an optional subtitle, and a body with bullet points.",
    ]
    return "\n".join(sections)


def _image_prompt(content: ContentBody) -> str:
    return (
        "Generate a purely visual, professional, and minimalistic vector illustration for a "
        f"presentation slide. The slide's topic is \"{content.title}: {', '.join(content.body)}\".\n"
        "Key requirements:\n"
        "- Strictly no text: do not include any words, letters, numbers, or any form of "
        "typography in the generated image. The image must be entirely pictorial.\n"
        "- Style: Modern, clean, abstract, and conceptual.\n"
        "- Color Palette: Use a harmonious blend of blues, greens, and earthy tones.\n"
        "- Content: The image must be purely symbolic and represent the core idea of the slide "
        "without being literal.\n"
        "- Composition: Simple, elegant, and free of clutter."
    )


def _extract_parsed_output(
    response: Optional[StructuredOutputResponse],
) -> Optional[Dict[str, Any]]:
    if response is None:
        return None
    if isinstance(response.parsed_output, dict):
        return response.parsed_output
    if response.text:
        try:
            parsed = json.loads(response.text)
        except json.JSONDecodeError:
            LOGGER.debug("Failed to parse structured output text: %s", response.text)
        else:
            if isinstance(parsed, dict):
                return parsed
    if response.validation_error:
        LOGGER.warning("Validation error: %s", response.validation_error)
    return None


def _content_from_payload(payload: Dict[str, Any]) -> Optional[ContentBody]:
    body = payload.get("body")
    if not isinstance(body, list):
        return None
    content = ContentBody.from_dict(payload)
    if not content.title or not content.body:
        return None
    return content


def _provider_name(llm_client) -> str:
    getter = getattr(llm_client, "get_provider_name", None)
    return getter() if callable(getter) else llm_client.__class__.__name__
