"""Runtime settings read from the environment (and a local ``.env`` file)."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_EXPORT_FILENAME = "Bhoomi-Naturals-Presentation.pdf"
SUPPORTED_PROVIDERS = ("stub", "gemini", "openai")


@dataclass(frozen=True)
class AppSettings:
    provider: str = "stub"
    text_model: Optional[str] = None
    image_model: Optional[str] = None
    presentation_title: Optional[str] = None
    outline_path: Optional[Path] = None
    export_filename: str = DEFAULT_EXPORT_FILENAME
    log_level: str = "INFO"

    @property
    def pptx_filename(self) -> str:
        return str(Path(self.export_filename).with_suffix(".pptx"))

    @classmethod
    def from_env(cls, *, dotenv: bool = True) -> "AppSettings":
        if dotenv:
            load_dotenv()
        provider = os.getenv("PRESENTATION_LAB_PROVIDER", "stub").strip().lower()
        if provider not in SUPPORTED_PROVIDERS:
            raise ValueError(
                f"Unsupported provider '{provider}'. Choose one of: {', '.join(SUPPORTED_PROVIDERS)}"
            )
        outline = os.getenv("PRESENTATION_LAB_OUTLINE")
        return cls(
            provider=provider,
            text_model=os.getenv("PRESENTATION_LAB_TEXT_MODEL") or None,
            image_model=os.getenv("PRESENTATION_LAB_IMAGE_MODEL") or None,
            presentation_title=os.getenv("PRESENTATION_LAB_TITLE") or None,
            outline_path=Path(outline) if outline else None,
            export_filename=os.getenv("PRESENTATION_LAB_EXPORT_FILENAME") or DEFAULT_EXPORT_FILENAME,
            log_level=(os.getenv("PRESENTATION_LAB_LOG_LEVEL") or "INFO").upper(),
        )


def configure_logging(settings: AppSettings) -> None:
    level = getattr(logging, settings.log_level, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
