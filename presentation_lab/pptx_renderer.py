"""Render generated slides into an editable PPTX deck."""

from __future__ import annotations

import io
import logging
from typing import List, Optional, Sequence

from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.util import Emu, Inches, Pt

from .errors import ExportError, NothingToExportError
from .pdf_exporter import (
    BACKGROUND,
    BODY_COLOR,
    CHECK_COLOR,
    ERROR_COLOR,
    IMAGE_BOX,
    IMAGE_FALLBACK_TEXT,
    LINK_COLOR,
    PAGE_WIDTH,
    RGB,
    SUBTITLE_COLOR,
    TITLE_COLOR,
)
from .slide_models import ContentBody, ImageRef, MediaGallery, SlideKind, SlideRuntimeState

LOGGER = logging.getLogger(__name__)

SLIDE_WIDTH = Inches(13.333)
SLIDE_HEIGHT = Inches(7.5)
BLANK_LAYOUT_INDEX = 6
MEDIA_ITEMS_PER_SLIDE = 6
CHECK_MARK = "✓"


def _px(value: float) -> Emu:
    """Convert a coordinate on the 1280-wide PDF canvas to EMU."""

    return Emu(int(value * SLIDE_WIDTH / PAGE_WIDTH))


def _rgb(color: RGB) -> RGBColor:
    return RGBColor(*color)


class PptxDeckRenderer:
    """Render slide states into PPTX binaries."""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def render(self, slides: Sequence[SlideRuntimeState]) -> io.BytesIO:
        """Return a PPTX stream with one slide per generated content slide."""

        exportable = [state for state in slides if state.is_exportable]
        if not exportable:
            raise NothingToExportError(
                "Please generate content for at least one slide before downloading."
            )
        try:
            presentation = Presentation()
            presentation.slide_width = SLIDE_WIDTH
            presentation.slide_height = SLIDE_HEIGHT
            for state in exportable:
                if state.kind is SlideKind.CONTENT:
                    self._add_content_slide(presentation, state.content_body, state.image_ref)
                else:
                    self._add_media_slides(presentation, state.media_gallery)

            buffer = io.BytesIO()
            presentation.save(buffer)
        except Exception as exc:
            LOGGER.exception("Failed to generate PPTX")
            raise ExportError("An error occurred while generating the PPTX.") from exc
        buffer.seek(0)
        return buffer

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _new_slide(self, presentation):
        slide = presentation.slides.add_slide(presentation.slide_layouts[BLANK_LAYOUT_INDEX])
        fill = slide.background.fill
        fill.solid()
        fill.fore_color.rgb = _rgb(BACKGROUND)
        return slide

    def _add_textbox(self, slide, text: str, *, left, top, width, height, size: int, color: RGB, bold=False):
        shape = slide.shapes.add_textbox(left, top, width, height)
        frame = shape.text_frame
        frame.word_wrap = True
        run = frame.paragraphs[0].add_run()
        run.text = text
        run.font.size = Pt(size)
        run.font.bold = bold
        run.font.color.rgb = _rgb(color)
        return shape

    def _add_content_slide(
        self, presentation, content: ContentBody, image_ref: Optional[ImageRef]
    ) -> None:
        slide = self._new_slide(presentation)
        self._add_textbox(
            slide, content.title,
            left=_px(60), top=_px(60), width=_px(600), height=_px(110),
            size=36, color=TITLE_COLOR, bold=True,
        )
        if content.subtitle:
            self._add_textbox(
                slide, content.subtitle,
                left=_px(60), top=_px(180), width=_px(600), height=_px(50),
                size=18, color=SUBTITLE_COLOR,
            )

        body = slide.shapes.add_textbox(_px(60), _px(250), _px(600), _px(420)).text_frame
        body.word_wrap = True
        for idx, point in enumerate(content.body):
            paragraph = body.paragraphs[0] if idx == 0 else body.add_paragraph()
            paragraph.space_after = Pt(8)
            mark = paragraph.add_run()
            mark.text = f"{CHECK_MARK} "
            mark.font.size = Pt(16)
            mark.font.color.rgb = _rgb(CHECK_COLOR)
            text = paragraph.add_run()
            text.text = point
            text.font.size = Pt(16)
            text.font.color.rgb = _rgb(BODY_COLOR)

        if image_ref is not None:
            x, y, width, height = IMAGE_BOX
            try:
                slide.shapes.add_picture(
                    io.BytesIO(image_ref.data), _px(x), _px(y), _px(width), _px(height)
                )
            except Exception as exc:
                LOGGER.warning("Could not add image to PPTX: %s", exc)
                self._add_textbox(
                    slide, IMAGE_FALLBACK_TEXT,
                    left=_px(x), top=_px(y + height / 2), width=_px(width), height=_px(40),
                    size=16, color=ERROR_COLOR,
                )

    def _add_media_slides(self, presentation, gallery: MediaGallery) -> None:
        chunks: List[list] = [
            gallery.items[start:start + MEDIA_ITEMS_PER_SLIDE]
            for start in range(0, len(gallery.items), MEDIA_ITEMS_PER_SLIDE)
        ] or [[]]
        for chunk in chunks:
            slide = self._new_slide(presentation)
            self._add_textbox(
                slide, gallery.title,
                left=_px(60), top=_px(60), width=_px(1160), height=_px(80),
                size=36, color=TITLE_COLOR, bold=True,
            )
            if not chunk:
                continue
            frame = slide.shapes.add_textbox(_px(60), _px(170), _px(1160), _px(500)).text_frame
            frame.word_wrap = True
            first = True
            for entry in chunk:
                heading = frame.paragraphs[0] if first else frame.add_paragraph()
                first = False
                run = heading.add_run()
                run.text = f"[{entry.kind.label}] {entry.label}"
                run.font.size = Pt(18)
                run.font.bold = True
                run.font.color.rgb = _rgb(BODY_COLOR)

                locator = frame.add_paragraph()
                locator.space_after = Pt(12)
                link = locator.add_run()
                link.font.size = Pt(14)
                link.font.color.rgb = _rgb(LINK_COLOR)
                if entry.is_embedded:
                    link.text = "Embedded image"
                else:
                    link.text = entry.locator
                    link.hyperlink.address = entry.locator
