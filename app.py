"""Streamlit UI for generating, refining and exporting the presentation."""

from __future__ import annotations

from typing import Optional

import streamlit as st

from presentation_lab.config import AppSettings, configure_logging
from presentation_lab.errors import (
    ExportError,
    NothingToExportError,
    PresentationLabError,
    ValidationError,
)
from presentation_lab.media import (
    media_entry_from_upload,
    media_entry_from_url,
    youtube_thumbnail_url,
)
from presentation_lab.pdf_exporter import PdfDeckExporter
from presentation_lab.pptx_renderer import PptxDeckRenderer
from presentation_lab.session import create_store, run_intent
from presentation_lab.slide_models import (
    ImageRef,
    MediaKind,
    SlideKind,
    SlideRuntimeState,
    Status,
)
from presentation_lab.slide_store import SlideStateStore

STATUS_BADGES = {
    Status.UNINITIALIZED: "○",
    Status.PENDING: "…",
    Status.READY: "✓",
    Status.FAILED: "⚠",
}


def _slide_label(index: int, state: SlideRuntimeState) -> str:
    """Sidebar label such as ``"1. Introduction ✓"``."""

    return f"{index + 1}. {state.descriptor.title} {STATUS_BADGES[state.text_status]}"


def _can_refine(state: SlideRuntimeState) -> bool:
    return state.kind is SlideKind.CONTENT and state.text_status is Status.READY


def _can_generate_image(state: SlideRuntimeState) -> bool:
    return _can_refine(state) and state.image_status is not Status.PENDING


def _invalidate_downloads() -> None:
    for key in ("pdf_bytes", "pptx_bytes"):
        st.session_state.pop(key, None)


@st.cache_resource(show_spinner=False)
def load_settings() -> AppSettings:
    settings = AppSettings.from_env()
    configure_logging(settings)
    return settings


def _get_store(settings: AppSettings) -> SlideStateStore:
    if "store" not in st.session_state:
        st.session_state["store"] = create_store(settings)
    return st.session_state["store"]


def _render_sidebar(store: SlideStateStore) -> None:
    st.header("Slides")
    for idx, state in enumerate(store.snapshot()):
        button_type = "primary" if idx == store.selected_index else "secondary"
        if st.button(_slide_label(idx, state), key=f"select_{state.slide_id}", type=button_type):
            with st.spinner("Generating slide content..."):
                run_intent(store.select_slide(idx))
            _invalidate_downloads()
            st.rerun()


def _render_content_slide(state: SlideRuntimeState) -> None:
    content = state.content_body
    text_col, image_col = st.columns([3, 2])
    with text_col:
        if content is None:
            st.info("Content has not been generated yet.")
        else:
            st.markdown(f"## {content.title}")
            if content.subtitle:
                st.markdown(f"*{content.subtitle}*")
            for point in content.body:
                st.markdown(f"✓ {point}")
    with image_col:
        if state.image_status is Status.READY and state.image_ref is not None:
            st.image(state.image_ref.data, use_container_width=True)
        elif state.image_status is Status.FAILED:
            st.error("Image generation failed. Try again from the refine panel.")
        elif state.descriptor.video_id:
            st.video(f"https://www.youtube.com/watch?v={state.descriptor.video_id}")


def _render_media_slide(store: SlideStateStore, state: SlideRuntimeState) -> None:
    gallery = state.media_gallery
    if gallery is None:
        st.info("Content has not been generated yet.")
        return

    st.markdown(f"## {gallery.title}")
    if not gallery.items:
        st.caption("No resources yet. Add videos, links or photos below.")
    for idx, entry in enumerate(gallery.items):
        cols = st.columns([1, 4, 1])
        with cols[0]:
            if entry.kind is MediaKind.PHOTO:
                st.image(ImageRef.from_data_uri(entry.locator).data, use_container_width=True)
            elif entry.kind is MediaKind.VIDEO:
                thumbnail = youtube_thumbnail_url(entry.locator)
                if thumbnail:
                    st.image(thumbnail, use_container_width=True)
        with cols[1]:
            st.markdown(f"**[{entry.kind.label}] {entry.label}**")
            if not entry.is_embedded:
                st.markdown(f"[{entry.locator}]({entry.locator})")
        with cols[2]:
            if st.button("Remove", key=f"remove_{state.slide_id}_{idx}"):
                store.remove_media_item(state.slide_id, idx)
                _invalidate_downloads()
                st.rerun()

    with st.expander("Add New Media", expanded=False):
        with st.form("add_media", clear_on_submit=True):
            source = st.radio("Media Type", ("URL (Link/Video)", "Upload Image"), horizontal=True)
            label = st.text_input("Title", placeholder="e.g., Bhoomi Naturals Farm")
            url = st.text_input("URL", placeholder="https://example.com")
            upload = st.file_uploader("Image File", type=["png", "jpg", "jpeg", "gif", "webp"])
            if st.form_submit_button("Add Media"):
                try:
                    if source == "Upload Image":
                        if upload is None:
                            raise ValidationError("Please select an image file.")
                        entry = media_entry_from_upload(upload.getvalue(), upload.type, label)
                    else:
                        entry = media_entry_from_url(url, label)
                except ValidationError as exc:
                    st.error(str(exc))
                else:
                    store.add_media_item(state.slide_id, entry)
                    _invalidate_downloads()
                    st.rerun()


def _render_refine_panel(store: SlideStateStore, state: SlideRuntimeState) -> None:
    st.subheader("Refine Content")
    if st.button(
        "Generate Image",
        disabled=not _can_generate_image(state),
        help="Image generation is only available for generated content slides.",
    ):
        with st.spinner("Generating image..."):
            run_intent(store.generate_image(state.slide_id))
        _invalidate_downloads()
        st.rerun()

    if _can_refine(state):
        st.caption(f'Use this chat to refine the content for "{state.descriptor.title}".')
    elif state.kind is SlideKind.MEDIA:
        st.caption("Refining is not available for media slides.")
    else:
        st.caption("Generate or select a slide to start refining its content.")

    with st.form("refine", clear_on_submit=False):
        instruction = st.text_area(
            "Instruction",
            placeholder='e.g., "Make the tone more formal"',
            disabled=not _can_refine(state),
        )
        if st.form_submit_button("Refine", disabled=not _can_refine(state)):
            if instruction.strip():
                try:
                    with st.spinner("Refining..."):
                        run_intent(store.refine(state.slide_id, instruction))
                except PresentationLabError as exc:
                    st.error(str(exc))
                else:
                    _invalidate_downloads()
                    st.rerun()


def _render_downloads(store: SlideStateStore, settings: AppSettings, title: str) -> None:
    st.subheader("Download")
    if not store.has_exportable():
        st.caption("Generate at least one slide to enable downloads.")
        return

    if st.button("Prepare PDF", type="primary"):
        exporter = PdfDeckExporter(presentation_title=title, filename=settings.export_filename)
        try:
            st.session_state["pdf_bytes"] = exporter.export(store.exportable())
        except NothingToExportError as exc:
            st.warning(str(exc))
        except ExportError as exc:
            st.error(str(exc))

    pdf_bytes: Optional[bytes] = st.session_state.get("pdf_bytes")
    if pdf_bytes:
        st.download_button(
            "Download PDF",
            data=pdf_bytes,
            file_name=settings.export_filename,
            mime="application/pdf",
        )

    if st.button("Prepare PPTX"):
        try:
            st.session_state["pptx_bytes"] = PptxDeckRenderer().render(store.exportable()).getvalue()
        except ExportError as exc:
            st.error(str(exc))
    pptx_bytes: Optional[bytes] = st.session_state.get("pptx_bytes")
    if pptx_bytes:
        st.download_button(
            "Download PPTX",
            data=pptx_bytes,
            file_name=settings.pptx_filename,
            mime="application/vnd.openxmlformats-officedocument.presentationml.presentation",
        )


def main() -> None:
    st.set_page_config(page_title="Bhoomi Presentation Lab", layout="wide")
    settings = load_settings()
    store = _get_store(settings)

    st.title("Bhoomi Presentation Lab")
    st.caption(f"Content provider: {settings.provider}")

    # Generate the selected slide on first visit; no-op afterwards.
    with st.spinner("Generating slide content..."):
        run_intent(store.reconcile())

    with st.sidebar:
        _render_sidebar(store)
        st.divider()
        _render_downloads(store, settings, store.presentation_title)

    state = store.selected
    main_col, chat_col = st.columns([3, 1])
    with main_col:
        header_cols = st.columns([4, 1])
        with header_cols[0]:
            st.markdown(f"#### {state.descriptor.title}")
        with header_cols[1]:
            if st.button("Regenerate", disabled=state.text_status is Status.PENDING):
                with st.spinner("Regenerating..."):
                    run_intent(store.regenerate(state.slide_id))
                _invalidate_downloads()
                st.rerun()

        if state.text_status is Status.FAILED:
            st.error("Content generation failed for this slide. Use Regenerate to try again.")
        if state.kind is SlideKind.MEDIA:
            _render_media_slide(store, state)
        else:
            _render_content_slide(state)
    with chat_col:
        _render_refine_panel(store, state)


if __name__ == "__main__":  # pragma: no cover - Streamlit handles execution
    main()
