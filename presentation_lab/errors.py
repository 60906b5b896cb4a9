"""Exception hierarchy shared by the store, collaborators and exporters."""

from __future__ import annotations

from typing import Optional


class PresentationLabError(Exception):
    """Base class for all presentation lab failures."""


class GenerationError(PresentationLabError):
    """Slide text could not be generated."""

    def __init__(self, message: str, *, slide_id: Optional[int] = None) -> None:
        super().__init__(message)
        self.slide_id = slide_id


class RefinementError(PresentationLabError):
    """A refine request was rejected or the refinement call failed."""

    def __init__(self, message: str, *, slide_id: Optional[int] = None) -> None:
        super().__init__(message)
        self.slide_id = slide_id


class ImageError(PresentationLabError):
    """Slide illustration could not be generated."""


class ExportError(PresentationLabError):
    """The deck could not be laid out or encoded."""


class NothingToExportError(ExportError):
    """No slide has generated content yet."""


class ValidationError(PresentationLabError):
    """User supplied media input is malformed."""
