import asyncio

import pytest

from presentation_lab.errors import GenerationError, ImageError, RefinementError
from presentation_lab.slide_generation import SLIDE_CONTENT_SCHEMA, SlideWriter
from presentation_lab.slide_models import ContentBody, MediaGallery, SlideKind
from presentation_lab.stub_llm import StubSlideLLM

from tests.llm_stubs import ScriptedLLM, png_bytes


def test_generate_builds_content_from_structured_output():
    llm = ScriptedLLM(
        payloads=[
            {
                "title": "Welcome to Bhoomi",
                "subtitle": "Regenerative farming",
                "body": [" Soil first ", "Water wise", ""],
            }
        ]
    )
    writer = SlideWriter(llm)

    content = asyncio.run(writer.generate("Introduction", "Bhoomi Deck", SlideKind.CONTENT))

    assert content == ContentBody(
        title="Welcome to Bhoomi",
        body=["Soil first", "Water wise"],
        subtitle="Regenerative farming",
    )
    request = llm.structured_requests[0]
    assert request.schema == SLIDE_CONTENT_SCHEMA
    assert request.schema_name == "slide_content"
    assert '"Bhoomi Deck"' in request.prompt
    assert '"Introduction"' in request.prompt


def test_generate_media_slide_skips_provider():
    llm = ScriptedLLM()
    writer = SlideWriter(llm)

    gallery = asyncio.run(writer.generate("Resources", "Deck", SlideKind.MEDIA))

    assert gallery == MediaGallery(title="Resources & Media", items=[])
    assert llm.structured_requests == []


def test_generate_wraps_provider_error():
    writer = SlideWriter(ScriptedLLM(error="quota exceeded"))
    with pytest.raises(GenerationError, match="Failed to generate slide content"):
        asyncio.run(writer.generate("Topic", "Deck", SlideKind.CONTENT))


def test_generate_rejects_payload_without_body():
    writer = SlideWriter(ScriptedLLM(payloads=[{"title": "Only a title"}]))
    with pytest.raises(GenerationError):
        asyncio.run(writer.generate("Topic", "Deck", SlideKind.CONTENT))


def test_generate_without_client_fails():
    writer = SlideWriter(None)
    with pytest.raises(GenerationError):
        asyncio.run(writer.generate("Topic", "Deck", SlideKind.CONTENT))


def test_refine_sends_original_content_and_instruction():
    llm = ScriptedLLM(payloads=[{"title": "Formal title", "body": ["Point one"]}])
    writer = SlideWriter(llm)
    original = ContentBody(title="Hello", body=["first", "second"])

    refined = asyncio.run(writer.refine(original, "  Make it formal "))

    assert refined == ContentBody(title="Formal title", body=["Point one"])
    request = llm.structured_requests[0]
    assert request.schema_name == "slide_refinement"
    assert "Title: Hello" in request.prompt
    assert "- first\n- second" in request.prompt
    assert 'User\'s Request: "Make it formal"' in request.prompt


def test_refine_rejects_blank_instruction():
    llm = ScriptedLLM()
    writer = SlideWriter(llm)
    with pytest.raises(RefinementError):
        asyncio.run(writer.refine(ContentBody(title="t", body=["b"]), "   "))
    assert llm.structured_requests == []


def test_refine_wraps_provider_error():
    writer = SlideWriter(ScriptedLLM(error="timeout"))
    with pytest.raises(RefinementError):
        asyncio.run(writer.refine(ContentBody(title="t", body=["b"]), "shorter"))


def test_generate_image_returns_reference():
    llm = ScriptedLLM(images=[png_bytes()])
    writer = SlideWriter(llm)

    image_ref = asyncio.run(writer.generate_image(ContentBody(title="Soil", body=["Compost"])))

    assert image_ref.data.startswith(b"\x89PNG")
    assert image_ref.mime_type == "image/png"
    request = llm.image_requests[0]
    assert request.aspect_ratio == "16:9"
    assert "Soil: Compost" in request.prompt


def test_generate_image_without_result_fails():
    writer = SlideWriter(ScriptedLLM(images=[None]))
    with pytest.raises(ImageError):
        asyncio.run(writer.generate_image(ContentBody(title="Soil", body=["Compost"])))


def test_generate_image_unsupported_provider():
    llm = ScriptedLLM(image_support=False)
    writer = SlideWriter(llm)
    with pytest.raises(ImageError):
        asyncio.run(writer.generate_image(ContentBody(title="Soil", body=["Compost"])))
    assert llm.image_requests == []


def test_stub_llm_round_trip_through_writer():
    writer = SlideWriter(StubSlideLLM())

    content = asyncio.run(writer.generate("Benefits to Farm owners", "Deck", SlideKind.CONTENT))
    assert content.title == "Benefits to Farm owners"
    assert len(content.body) == 3

    refined = asyncio.run(writer.refine(content, "Add a closing line"))
    assert refined.title == content.title
    assert refined.body[:3] == content.body
    assert refined.body[-1] == "Revised: Add a closing line"

    image_ref = asyncio.run(writer.generate_image(content))
    assert image_ref.data.startswith(b"\x89PNG")
