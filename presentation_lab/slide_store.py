"""In-memory slide state store and the intents that drive it.

Every intent runs on a single asyncio event loop. A slide's status is set to
``PENDING`` before a collaborator is awaited and resolved only once the call
returns, so readers never observe half-applied updates. Calls for different
slides may interleave; each resolution only touches the slide it was issued
for.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Tuple

from .errors import RefinementError
from .outline import DEFAULT_PRESENTATION_TITLE, validate_outline
from .slide_generation import SlideCollaborator
from .slide_models import (
    MediaEntry,
    MediaGallery,
    SlideDescriptor,
    SlideKind,
    SlideRuntimeState,
    Status,
)

LOGGER = logging.getLogger(__name__)


class SlideStateStore:
    """Owns the runtime state of every slide in the outline."""

    def __init__(
        self,
        outline: Iterable[SlideDescriptor],
        collaborator: SlideCollaborator,
        *,
        presentation_title: str = DEFAULT_PRESENTATION_TITLE,
    ) -> None:
        self.collaborator = collaborator
        self.presentation_title = presentation_title
        self._outline: Tuple[SlideDescriptor, ...] = tuple(validate_outline(outline))
        self._states: Dict[int, SlideRuntimeState] = {
            descriptor.slide_id: SlideRuntimeState(descriptor=descriptor)
            for descriptor in self._outline
        }
        self._selected_index = 0

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------
    @property
    def outline(self) -> Tuple[SlideDescriptor, ...]:
        return self._outline

    @property
    def selected_index(self) -> int:
        return self._selected_index

    @property
    def selected(self) -> SlideRuntimeState:
        return self.get(self._outline[self._selected_index].slide_id)

    def get(self, slide_id: int) -> SlideRuntimeState:
        """Return a detached copy of the slide's current state."""

        return self._state(slide_id).copy()

    def snapshot(self) -> List[SlideRuntimeState]:
        """Copies of all slide states in outline order."""

        return [self._states[d.slide_id].copy() for d in self._outline]

    def exportable(self) -> List[SlideRuntimeState]:
        return [state for state in self.snapshot() if state.is_exportable]

    def has_exportable(self) -> bool:
        return any(state.is_exportable for state in self._states.values())

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    async def select_slide(self, index: int) -> None:
        if not 0 <= index < len(self._outline):
            raise IndexError(f"Slide index out of range: {index}")
        self._selected_index = index
        await self.reconcile()

    async def reconcile(self) -> None:
        """Start generation for the selected slide if it was never requested.

        Safe to call repeatedly: a pending, ready or failed slide is left
        alone.
        """

        state = self._states[self._outline[self._selected_index].slide_id]
        if state.text_status is Status.UNINITIALIZED:
            await self.generate(state.slide_id)

    # ------------------------------------------------------------------
    # Text intents
    # ------------------------------------------------------------------
    async def generate(self, slide_id: int, *, force: bool = False) -> None:
        """Request content for a slide.

        Without ``force`` the call is ignored for slides that are already
        pending or ready. Failures are recorded as ``FAILED``; previously
        generated content is kept. A cancelled call restores the prior status.
        """

        state = self._state(slide_id)
        if not force and state.text_status in (Status.PENDING, Status.READY):
            LOGGER.debug("Slide %s already %s, skipping generation", slide_id, state.text_status.value)
            return

        descriptor = state.descriptor
        previous = state.text_status
        self._set_text_status(state, Status.PENDING)
        try:
            content = await self.collaborator.generate(
                descriptor.prompt_topic, self.presentation_title, descriptor.kind
            )
        except asyncio.CancelledError:
            self._set_text_status(state, previous)
            raise
        except Exception as exc:
            LOGGER.warning("Text generation failed for slide %s: %s", slide_id, exc)
            self._set_text_status(state, Status.FAILED)
            return

        gallery = state.media_gallery
        if gallery is not None and isinstance(content, MediaGallery):
            # Entries are only changed by add/remove, regeneration keeps them.
            content = replace(content, items=list(gallery.items))
        state.content = content
        self._set_text_status(state, Status.READY)

    async def regenerate(self, slide_id: int) -> None:
        await self.generate(slide_id, force=True)

    async def refine(self, slide_id: int, instruction: str) -> None:
        """Rewrite a content slide according to ``instruction``.

        On failure the slide returns to ``READY`` with its previous content
        and the error is raised to the caller.
        """

        state = self._state(slide_id)
        if state.kind is not SlideKind.CONTENT or state.text_status is not Status.READY:
            raise RefinementError("Cannot refine content for this slide.", slide_id=slide_id)
        current = state.content_body
        if current is None:
            raise RefinementError("Cannot refine content for this slide.", slide_id=slide_id)

        self._set_text_status(state, Status.PENDING)
        try:
            refined = await self.collaborator.refine(
                replace(current, body=list(current.body)), instruction
            )
        except BaseException:
            # Includes cancellation; the slide keeps its previous content.
            LOGGER.warning("Refining content failed for slide %s", slide_id, exc_info=True)
            self._set_text_status(state, Status.READY)
            raise

        state.content = refined
        self._set_text_status(state, Status.READY)

    # ------------------------------------------------------------------
    # Image intents
    # ------------------------------------------------------------------
    async def generate_image(self, slide_id: int) -> None:
        state = self._state(slide_id)
        if state.kind is SlideKind.MEDIA:
            LOGGER.info("Image generation is not available for media slide %s", slide_id)
            return
        if state.image_status is Status.PENDING:
            return
        content = state.content_body
        if content is None:
            LOGGER.warning("Cannot generate an image for slide %s without content", slide_id)
            self._set_image_status(state, Status.FAILED)
            return

        previous_status, previous_ref = state.image_status, state.image_ref
        self._set_image_status(state, Status.PENDING)
        try:
            image_ref = await self.collaborator.generate_image(content)
        except asyncio.CancelledError:
            state.image_ref = previous_ref
            self._set_image_status(state, previous_status)
            raise
        except Exception as exc:
            LOGGER.warning("Image generation failed for slide %s: %s", slide_id, exc)
            self._set_image_status(state, Status.FAILED)
            return

        state.image_ref = image_ref
        self._set_image_status(state, Status.READY)

    # ------------------------------------------------------------------
    # Media gallery intents
    # ------------------------------------------------------------------
    def add_media_item(self, slide_id: int, entry: MediaEntry) -> bool:
        gallery = self._state(slide_id).media_gallery
        if gallery is None:
            LOGGER.debug("Slide %s has no media gallery, ignoring add", slide_id)
            return False
        gallery.items.append(entry)
        return True

    def remove_media_item(self, slide_id: int, index: int) -> bool:
        gallery = self._state(slide_id).media_gallery
        if gallery is None or not 0 <= index < len(gallery.items):
            return False
        del gallery.items[index]
        return True

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _state(self, slide_id: int) -> SlideRuntimeState:
        try:
            return self._states[slide_id]
        except KeyError as exc:
            raise KeyError(f"Unknown slide id: {slide_id}") from exc

    def _set_text_status(self, state: SlideRuntimeState, status: Status) -> None:
        LOGGER.debug("Slide %s text: %s -> %s", state.slide_id, state.text_status.value, status.value)
        state.text_status = status

    def _set_image_status(self, state: SlideRuntimeState, status: Status) -> None:
        LOGGER.debug("Slide %s image: %s -> %s", state.slide_id, state.image_status.value, status.value)
        state.image_status = status
        if status is not Status.READY:
            state.image_ref = None
