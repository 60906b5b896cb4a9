import json
import logging
from pathlib import Path

import pytest

from presentation_lab.config import DEFAULT_EXPORT_FILENAME, AppSettings, configure_logging
from presentation_lab.outline import (
    DEFAULT_PRESENTATION_TITLE,
    PRESENTATION_OUTLINE,
    load_outline,
    resolve_outline,
)
from presentation_lab.session import create_llm_client, create_store
from presentation_lab.slide_models import SlideKind, Status
from presentation_lab.stub_llm import StubSlideLLM

ENV_KEYS = (
    "PRESENTATION_LAB_PROVIDER",
    "PRESENTATION_LAB_TEXT_MODEL",
    "PRESENTATION_LAB_IMAGE_MODEL",
    "PRESENTATION_LAB_TITLE",
    "PRESENTATION_LAB_OUTLINE",
    "PRESENTATION_LAB_EXPORT_FILENAME",
    "PRESENTATION_LAB_LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def _write_manifest(tmp_path: Path, payload) -> Path:
    path = tmp_path / "outline.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_default_outline_shape():
    assert len(PRESENTATION_OUTLINE) == 8
    assert [d.slide_id for d in PRESENTATION_OUTLINE] == list(range(1, 9))
    media = [d for d in PRESENTATION_OUTLINE if d.kind is SlideKind.MEDIA]
    assert [d.slide_id for d in media] == [7]
    assert PRESENTATION_OUTLINE[0].title == "Introduction"


def test_load_outline_from_manifest(tmp_path):
    path = _write_manifest(
        tmp_path,
        {
            "presentation_title": "Orchard Pitch",
            "slides": [
                {"id": 1, "title": "Hello", "prompt_topic": "Greeting", "video_id": "abc"},
                {"id": 2, "title": "Links", "prompt_topic": "Resources", "type": "media"},
            ],
        },
    )

    title, outline = load_outline(path)

    assert title == "Orchard Pitch"
    assert [d.kind for d in outline] == [SlideKind.CONTENT, SlideKind.MEDIA]
    assert outline[0].video_id == "abc"
    assert outline[0].to_dict()["prompt_topic"] == "Greeting"


def test_load_outline_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_outline(tmp_path / "missing.json")

    duplicate = _write_manifest(
        tmp_path,
        {"slides": [{"id": 1, "title": "a", "prompt_topic": "a"}, {"id": 1, "title": "b", "prompt_topic": "b"}]},
    )
    with pytest.raises(ValueError, match="Duplicate"):
        load_outline(duplicate)

    missing_id = _write_manifest(tmp_path, {"slides": [{"title": "a"}]})
    with pytest.raises(ValueError, match="missing field"):
        load_outline(missing_id)

    empty = _write_manifest(tmp_path, {"slides": []})
    with pytest.raises(ValueError):
        load_outline(empty)

    unknown_kind = _write_manifest(
        tmp_path, {"slides": [{"id": 1, "title": "a", "prompt_topic": "a", "type": "video"}]}
    )
    with pytest.raises(ValueError):
        load_outline(unknown_kind)


def test_resolve_outline_defaults():
    title, outline = resolve_outline()
    assert title == DEFAULT_PRESENTATION_TITLE
    assert tuple(outline) == PRESENTATION_OUTLINE


def test_settings_defaults(clean_env):
    settings = AppSettings.from_env(dotenv=False)
    assert settings.provider == "stub"
    assert settings.outline_path is None
    assert settings.export_filename == DEFAULT_EXPORT_FILENAME
    assert settings.pptx_filename == "Bhoomi-Naturals-Presentation.pptx"
    assert settings.log_level == "INFO"


def test_settings_from_environment(clean_env, tmp_path):
    clean_env.setenv("PRESENTATION_LAB_PROVIDER", " Gemini ")
    clean_env.setenv("PRESENTATION_LAB_TEXT_MODEL", "gemini-2.5-pro")
    clean_env.setenv("PRESENTATION_LAB_TITLE", "Custom Deck")
    clean_env.setenv("PRESENTATION_LAB_OUTLINE", str(tmp_path / "outline.json"))
    clean_env.setenv("PRESENTATION_LAB_EXPORT_FILENAME", "custom.pdf")
    clean_env.setenv("PRESENTATION_LAB_LOG_LEVEL", "debug")

    settings = AppSettings.from_env(dotenv=False)

    assert settings.provider == "gemini"
    assert settings.text_model == "gemini-2.5-pro"
    assert settings.image_model is None
    assert settings.presentation_title == "Custom Deck"
    assert settings.outline_path == tmp_path / "outline.json"
    assert settings.pptx_filename == "custom.pptx"
    assert settings.log_level == "DEBUG"


def test_unknown_provider_rejected(clean_env):
    clean_env.setenv("PRESENTATION_LAB_PROVIDER", "mistral")
    with pytest.raises(ValueError, match="Unsupported provider"):
        AppSettings.from_env(dotenv=False)


def test_configure_logging_applies_level(monkeypatch):
    captured = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: captured.update(kwargs))
    configure_logging(AppSettings(log_level="WARNING"))
    assert captured["level"] == logging.WARNING


def test_stub_provider_builds_offline_store(tmp_path):
    path = _write_manifest(
        tmp_path,
        {"presentation_title": "Manifest Title", "slides": [{"id": 3, "title": "Only", "prompt_topic": "Solo"}]},
    )
    settings = AppSettings(outline_path=path)

    assert isinstance(create_llm_client(settings), StubSlideLLM)
    store = create_store(settings)
    assert store.presentation_title == "Manifest Title"
    assert [d.slide_id for d in store.outline] == [3]


def test_title_override_and_run_intent():
    from presentation_lab.session import run_intent

    store = create_store(AppSettings(presentation_title="Override"))
    assert store.presentation_title == "Override"

    run_intent(store.reconcile())
    state = store.get(1)
    assert state.text_status is Status.READY
    assert state.content_body.title == "Introduction of Bhoomi Naturals"


def test_missing_credentials_fall_back_to_stub(monkeypatch):
    pytest.importorskip("google.genai")
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.setattr("LLM_API.providers._base_provider.load_dotenv", lambda *a, **k: False)

    store = create_store(AppSettings(provider="gemini"))

    assert isinstance(store.collaborator.llm_client, StubSlideLLM)
