"""Outline-driven presentation authoring with AI-generated slides."""

from .config import AppSettings
from .errors import (
    ExportError,
    GenerationError,
    ImageError,
    NothingToExportError,
    PresentationLabError,
    RefinementError,
    ValidationError,
)
from .media import media_entry_from_upload, media_entry_from_url
from .outline import PRESENTATION_OUTLINE, load_outline
from .pdf_exporter import PageLayout, PdfDeckExporter
from .pptx_renderer import PptxDeckRenderer
from .slide_generation import SlideCollaborator, SlideWriter
from .slide_models import (
    ContentBody,
    ImageRef,
    MediaEntry,
    MediaGallery,
    MediaKind,
    SlideDescriptor,
    SlideKind,
    SlideRuntimeState,
    Status,
)
from .slide_store import SlideStateStore

__all__ = [
    "AppSettings",
    "PresentationLabError",
    "GenerationError",
    "RefinementError",
    "ImageError",
    "ExportError",
    "NothingToExportError",
    "ValidationError",
    "media_entry_from_url",
    "media_entry_from_upload",
    "PRESENTATION_OUTLINE",
    "load_outline",
    "PageLayout",
    "PdfDeckExporter",
    "PptxDeckRenderer",
    "SlideCollaborator",
    "SlideWriter",
    "ContentBody",
    "ImageRef",
    "MediaEntry",
    "MediaGallery",
    "MediaKind",
    "SlideDescriptor",
    "SlideKind",
    "SlideRuntimeState",
    "Status",
    "SlideStateStore",
]
