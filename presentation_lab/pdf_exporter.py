"""Lay out generated slides onto fixed 16:9 pages and encode them as PDF.

Layout and rendering are split: :meth:`PdfDeckExporter.layout` turns slide
states into :class:`PageLayout` objects (positions measured from the top-left
corner, ``y`` being the text baseline), and :meth:`PdfDeckExporter.export`
draws those pages with reportlab.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from reportlab.lib.colors import Color
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen.canvas import Canvas

from .config import DEFAULT_EXPORT_FILENAME
from .errors import ExportError, NothingToExportError
from .outline import DEFAULT_PRESENTATION_TITLE
from .slide_models import (
    ContentBody,
    ImageRef,
    MediaEntry,
    MediaGallery,
    SlideKind,
    SlideRuntimeState,
)

LOGGER = logging.getLogger(__name__)

PAGE_WIDTH = 1280
PAGE_HEIGHT = 720
PADDING = 60
TOP_MARGIN = 120
BOTTOM_LIMIT = PAGE_HEIGHT - 100
LINE_HEIGHT_FACTOR = 1.15

TITLE_FONT = ("Helvetica-Bold", 48)
SUBTITLE_FONT = ("Helvetica", 24)
BODY_FONT = ("Helvetica", 20)
MEDIA_LABEL_FONT = ("Helvetica-Bold", 22)
MEDIA_LINK_FONT = ("Helvetica", 18)
CHECK_FONT = "ZapfDingbats"
CHECK_GLYPH = "3"  # a19, the check mark in ZapfDingbats

TEXT_COLUMN_WIDTH = 600
BULLET_INDENT = 25
BULLET_LINE_HEIGHT = 22
BULLET_GAP = 15
TITLE_GAP = 40
SUBTITLE_GAP = 30
MEDIA_TITLE_GAP = 50
MEDIA_LABEL_LINE_HEIGHT = 24
MEDIA_ENTRY_ADVANCE = 50
IMAGE_BOX = (700, 110, 520, 292.5)
IMAGE_FALLBACK_POSITION = (860, 360)
IMAGE_FALLBACK_TEXT = "Image failed to load"

RGB = Tuple[int, int, int]
BACKGROUND: RGB = (31, 41, 55)
TITLE_COLOR: RGB = (134, 239, 172)
SUBTITLE_COLOR: RGB = (156, 163, 175)
CHECK_COLOR: RGB = (74, 222, 128)
BODY_COLOR: RGB = (209, 213, 219)
LINK_COLOR: RGB = (107, 114, 128)
ERROR_COLOR: RGB = (239, 68, 68)


@dataclass
class TextRun:
    text: str
    x: float
    y: float
    font: str
    size: float
    color: RGB
    link: Optional[str] = None


@dataclass
class ImagePlacement:
    image: ImageRef
    x: float
    y: float
    width: float
    height: float


@dataclass
class PageLayout:
    """Everything drawn on one PDF page."""

    slide_id: int
    texts: List[TextRun] = field(default_factory=list)
    images: List[ImagePlacement] = field(default_factory=list)

    def lines(self) -> List[str]:
        return [run.text for run in self.texts]

    def check_marks(self) -> int:
        return sum(1 for run in self.texts if run.font == CHECK_FONT)


def wrap_text(text: str, font: Tuple[str, float], max_width: float) -> List[str]:
    name, size = font
    return simpleSplit(text, name, size, max_width) or [""]


def text_height(lines: Sequence[str], font: Tuple[str, float]) -> float:
    return len(lines) * font[1] * LINE_HEIGHT_FACTOR


def _fit_single_line(text: str, font: Tuple[str, float], max_width: float) -> str:
    name, size = font
    if stringWidth(text, name, size) <= max_width:
        return text
    ellipsis = "..."
    while text and stringWidth(text + ellipsis, name, size) > max_width:
        text = text[:-1]
    return text + ellipsis


def _color(rgb: RGB) -> Color:
    return Color(rgb[0] / 255, rgb[1] / 255, rgb[2] / 255)


class PdfDeckExporter:
    """Export the generated slides of a deck to a single PDF document."""

    def __init__(
        self,
        *,
        presentation_title: str = DEFAULT_PRESENTATION_TITLE,
        filename: str = DEFAULT_EXPORT_FILENAME,
    ) -> None:
        self.presentation_title = presentation_title
        self.filename = filename

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def layout(self, slides: Sequence[SlideRuntimeState]) -> List[PageLayout]:
        """Return page layouts for every slide with generated content."""

        pages: List[PageLayout] = []
        for state in slides:
            if not state.is_exportable:
                continue
            if state.kind is SlideKind.CONTENT:
                pages.append(self._layout_content(state.slide_id, state.content_body, state.image_ref))
            else:
                pages.extend(self._layout_media(state.slide_id, state.media_gallery))
        return pages

    def export(self, slides: Sequence[SlideRuntimeState]) -> bytes:
        """Return the PDF bytes for ``slides``.

        Raises :class:`NothingToExportError` when no slide is ready and
        :class:`ExportError` for any layout or encoding failure.
        """

        if not any(state.is_exportable for state in slides):
            raise NothingToExportError(
                "Please generate content for at least one slide before downloading."
            )
        try:
            pages = self.layout(slides)
            data = self.render(pages)
        except Exception as exc:
            LOGGER.exception("Failed to generate PDF")
            raise ExportError("An error occurred while generating the PDF.") from exc
        LOGGER.info("Exported %d page(s) to %s", len(pages), self.filename)
        return data

    def render(self, pages: Sequence[PageLayout]) -> bytes:
        buffer = io.BytesIO()
        canvas = Canvas(buffer, pagesize=(PAGE_WIDTH, PAGE_HEIGHT))
        canvas.setTitle(self.presentation_title)
        for page in pages:
            self._fill_background(canvas)
            for run in page.texts:
                self._draw_text(canvas, run)
            for placement in page.images:
                self._draw_image(canvas, placement)
            canvas.showPage()
        canvas.save()
        return buffer.getvalue()

    # ------------------------------------------------------------------
    # Layout helpers
    # ------------------------------------------------------------------
    def _layout_content(
        self, slide_id: int, content: ContentBody, image_ref: Optional[ImageRef]
    ) -> PageLayout:
        page = PageLayout(slide_id=slide_id)
        y: float = TOP_MARGIN

        y = self._add_block(page, content.title, TITLE_FONT, TITLE_COLOR, y, TEXT_COLUMN_WIDTH)
        y += TITLE_GAP
        if content.subtitle:
            y = self._add_block(page, content.subtitle, SUBTITLE_FONT, SUBTITLE_COLOR, y, TEXT_COLUMN_WIDTH)
            y += SUBTITLE_GAP

        name, size = BODY_FONT
        for point in content.body:
            page.texts.append(TextRun(CHECK_GLYPH, PADDING, y, CHECK_FONT, size, CHECK_COLOR))
            lines = wrap_text(point, BODY_FONT, TEXT_COLUMN_WIDTH - BULLET_INDENT)
            for idx, line in enumerate(lines):
                page.texts.append(
                    TextRun(line, PADDING + BULLET_INDENT, y + idx * BULLET_LINE_HEIGHT, name, size, BODY_COLOR)
                )
            y += len(lines) * BULLET_LINE_HEIGHT + BULLET_GAP

        if image_ref is not None:
            x, top, width, height = IMAGE_BOX
            if _image_is_readable(image_ref, slide_id):
                page.images.append(ImagePlacement(image_ref, x, top, width, height))
            else:
                page.texts.append(_image_fallback())
        return page

    def _layout_media(self, slide_id: int, gallery: MediaGallery) -> List[PageLayout]:
        full_width = PAGE_WIDTH - 2 * PADDING
        page = PageLayout(slide_id=slide_id)
        pages = [page]
        y: float = TOP_MARGIN

        self._add_block(page, gallery.title, TITLE_FONT, TITLE_COLOR, y, full_width)
        # Entries start one title line below, however far the title wraps.
        y += text_height([gallery.title], TITLE_FONT) + MEDIA_TITLE_GAP

        for entry in gallery.items:
            if y > BOTTOM_LIMIT:
                page = PageLayout(slide_id=slide_id)
                pages.append(page)
                y = TOP_MARGIN

            name, size = MEDIA_LABEL_FONT
            lines = wrap_text(_entry_heading(entry), MEDIA_LABEL_FONT, full_width)
            for idx, line in enumerate(lines):
                page.texts.append(
                    TextRun(line, PADDING, y + idx * MEDIA_LABEL_LINE_HEIGHT, name, size, BODY_COLOR)
                )
            y += len(lines) * MEDIA_LABEL_LINE_HEIGHT

            name, size = MEDIA_LINK_FONT
            page.texts.append(
                TextRun(
                    _entry_locator_text(entry, full_width),
                    PADDING + 2,
                    y,
                    name,
                    size,
                    LINK_COLOR,
                    link=None if entry.is_embedded else entry.locator,
                )
            )
            y += MEDIA_ENTRY_ADVANCE
        return pages

    def _add_block(
        self,
        page: PageLayout,
        text: str,
        font: Tuple[str, float],
        color: RGB,
        y: float,
        max_width: float,
    ) -> float:
        """Append wrapped ``text`` at ``y`` and return ``y`` advanced by its height."""

        name, size = font
        lines = wrap_text(text, font, max_width)
        for idx, line in enumerate(lines):
            page.texts.append(TextRun(line, PADDING, y + idx * size * LINE_HEIGHT_FACTOR, name, size, color))
        return y + text_height(lines, font)

    # ------------------------------------------------------------------
    # Drawing helpers
    # ------------------------------------------------------------------
    def _fill_background(self, canvas: Canvas) -> None:
        canvas.setFillColor(_color(BACKGROUND))
        canvas.rect(0, 0, PAGE_WIDTH, PAGE_HEIGHT, stroke=0, fill=1)

    def _draw_text(self, canvas: Canvas, run: TextRun) -> None:
        baseline = PAGE_HEIGHT - run.y
        canvas.setFont(run.font, run.size)
        canvas.setFillColor(_color(run.color))
        canvas.drawString(run.x, baseline, run.text)
        if run.link:
            width = stringWidth(run.text, run.font, run.size)
            canvas.linkURL(
                run.link,
                (run.x, baseline - run.size * 0.25, run.x + width, baseline + run.size),
                relative=0,
            )

    def _draw_image(self, canvas: Canvas, placement: ImagePlacement) -> None:
        try:
            canvas.drawImage(
                ImageReader(io.BytesIO(placement.image.data)),
                placement.x,
                PAGE_HEIGHT - placement.y - placement.height,
                width=placement.width,
                height=placement.height,
            )
        except Exception as exc:
            LOGGER.warning("Could not add image to PDF: %s", exc)
            self._draw_text(canvas, _image_fallback())


def _image_is_readable(image_ref: ImageRef, slide_id: int) -> bool:
    try:
        ImageReader(io.BytesIO(image_ref.data)).getSize()
    except Exception as exc:
        LOGGER.warning("Could not decode image for slide %s: %s", slide_id, exc)
        return False
    return True


def _image_fallback() -> TextRun:
    x, y = IMAGE_FALLBACK_POSITION
    return TextRun(IMAGE_FALLBACK_TEXT, x, y, BODY_FONT[0], BODY_FONT[1], ERROR_COLOR)


def _entry_heading(entry: MediaEntry) -> str:
    return f"[{entry.kind.label}] {entry.label}"


def _entry_locator_text(entry: MediaEntry, max_width: float) -> str:
    if entry.is_embedded:
        mime = entry.locator[5:].split(";", 1)[0]
        return f"Embedded image ({mime})"
    return _fit_single_line(entry.locator, MEDIA_LINK_FONT, max_width)
