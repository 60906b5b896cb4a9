import base64
import logging
from types import SimpleNamespace

import pytest

from LLM_API.data_classes import (
    ImageGenerationRequest,
    StructuredOutputRequest,
    create_image_request,
)
from LLM_API.decorators import log_request
from LLM_API.exceptions import LLMAuthenticationError, LLMValidationError

from tests.llm_stubs import png_bytes


class _FakeModels:
    def __init__(self, *, text="", images=None, fail=False):
        self.text = text
        self.images = images or []
        self.fail = fail
        self.calls = []

    def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if self.fail:
            raise RuntimeError("service unavailable")
        return SimpleNamespace(text=self.text, parsed=None)

    def generate_images(self, **kwargs):
        self.calls.append(kwargs)
        generated = [
            SimpleNamespace(image=SimpleNamespace(image_bytes=data, mime_type="image/png"))
            for data in self.images
        ]
        return SimpleNamespace(generated_images=generated)


@pytest.fixture
def gemini(monkeypatch):
    pytest.importorskip("google.genai")
    from LLM_API.providers import gemini as gemini_module

    fake = SimpleNamespace(models=_FakeModels())
    monkeypatch.setattr(gemini_module.genai, "Client", lambda api_key: fake)
    model = gemini_module.GeminiModel(api_key="test-key")
    return model, fake.models


def test_image_request_validation():
    request = create_image_request("a farm", aspect_ratio="1:1")
    assert request.number_of_images == 1
    with pytest.raises(ValueError):
        ImageGenerationRequest(prompt="x", number_of_images=0)


def test_log_request_warns_on_error_response(caplog):
    class Provider:
        @log_request
        def call(self):
            return SimpleNamespace(error="quota exceeded")

    with caplog.at_level(logging.WARNING, logger="LLM_API.decorators"):
        Provider().call()
    assert "quota exceeded" in caplog.text


def test_gemini_missing_key(monkeypatch):
    pytest.importorskip("google.genai")
    from LLM_API.providers import gemini as gemini_module

    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.setattr("LLM_API.providers._base_provider.load_dotenv", lambda *a, **k: False)
    with pytest.raises(LLMAuthenticationError):
        gemini_module.GeminiModel()


def test_gemini_structured_output_strips_code_fence(gemini):
    model, models = gemini
    models.text = '```json\n{"title": "Soil", "body": ["Compost"]}\n```'

    response = model.generate_structured_output(
        StructuredOutputRequest(prompt="Write a slide", schema={"type": "object"}, schema_name="slide_content")
    )

    assert response.error is None
    assert response.parsed_output == {"title": "Soil", "body": ["Compost"]}
    assert models.calls[0]["model"] == "gemini-2.5-flash"


def test_gemini_structured_output_reports_failure(gemini):
    model, models = gemini
    models.fail = True

    response = model.generate_structured_output(
        StructuredOutputRequest(prompt="Write a slide", schema={"type": "object"})
    )

    assert response.parsed_output is None
    assert "service unavailable" in response.error


def test_gemini_generate_image(gemini):
    model, models = gemini
    models.images = [png_bytes()]

    response = model.generate_image(create_image_request("a farm"))

    assert response.success
    assert response.first_image.data.startswith(b"\x89PNG")
    assert models.calls[0]["model"] == "imagen-4.0-generate-001"


def test_gemini_generate_image_empty_result(gemini):
    model, _ = gemini
    response = model.generate_image(create_image_request("a farm"))
    assert response.error == "No images were generated."
    assert response.first_image is None


def test_openai_generate_image_decodes_base64(monkeypatch):
    pytest.importorskip("openai")
    from LLM_API.providers import openai as openai_module

    calls = []

    def _generate(**kwargs):
        calls.append(kwargs)
        return SimpleNamespace(data=[SimpleNamespace(b64_json=base64.b64encode(png_bytes()).decode())])

    fake = SimpleNamespace(images=SimpleNamespace(generate=_generate))
    monkeypatch.setattr(openai_module, "OpenAI", lambda api_key: fake)

    model = openai_module.OpenAIModel(api_key="test-key")
    response = model.generate_image(create_image_request("a farm"))

    assert response.first_image.data.startswith(b"\x89PNG")
    assert calls[0]["size"] == "1536x1024"
    assert model.supports_feature("image_generation")


def test_gemini_rejects_empty_prompt(gemini):
    model, models = gemini

    with pytest.raises(LLMValidationError) as excinfo:
        model._validate_request(StructuredOutputRequest(prompt=""))
    assert excinfo.value.field == "prompt"
    assert str(excinfo.value).startswith("[GeminiModel] empty_prompt")

    response = model.generate_image(create_image_request(""))
    assert "Request must have a prompt" in response.error
    assert models.calls == []
