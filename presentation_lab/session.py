"""Wire settings, provider client, collaborator and store together."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Optional, TypeVar

from LLM_API.exceptions import LLMError

from .config import AppSettings
from .outline import resolve_outline
from .slide_generation import SlideWriter
from .slide_store import SlideStateStore
from .stub_llm import StubSlideLLM

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


def create_llm_client(settings: AppSettings):
    """Instantiate the configured provider; providers are imported lazily."""

    if settings.provider == "gemini":
        from LLM_API.providers.gemini import GeminiModel

        kwargs = {}
        if settings.text_model:
            kwargs["model_name"] = settings.text_model
        if settings.image_model:
            kwargs["image_model_name"] = settings.image_model
        return GeminiModel(**kwargs)
    if settings.provider == "openai":
        from LLM_API.providers.openai import OpenAIModel

        kwargs = {}
        if settings.text_model:
            kwargs["model_name"] = settings.text_model
        if settings.image_model:
            kwargs["image_model_name"] = settings.image_model
        return OpenAIModel(**kwargs)
    return StubSlideLLM()


def create_store(settings: AppSettings, *, llm_client=None) -> SlideStateStore:
    manifest_title, outline = resolve_outline(settings.outline_path)
    if llm_client is None:
        try:
            llm_client = create_llm_client(settings)
        except LLMError as exc:
            LOGGER.warning("Falling back to the offline stub: %s", exc)
            llm_client = StubSlideLLM()
    return SlideStateStore(
        outline,
        SlideWriter(llm_client),
        presentation_title=settings.presentation_title or manifest_title,
    )


def run_intent(intent: Awaitable[T], *, loop: Optional[asyncio.AbstractEventLoop] = None) -> T:
    """Drive a store intent to completion from synchronous code."""

    if loop is not None:
        return loop.run_until_complete(intent)
    return asyncio.run(intent)
