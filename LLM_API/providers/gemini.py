import json
import re
from typing import Optional, List

from google import genai
from google.genai import types

from ..data_classes import (
    BaseRequest, BaseResponse,
    StructuredOutputRequest, StructuredOutputResponse,
    ImageGenerationRequest, ImageGenerationResponse, GeneratedImage,
    ProviderConfig
)
from ..decorators import log_request
from ._base_provider import BaseProvider

_JSON_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")


def _parse_json_text(text: str) -> Optional[dict]:
    """コードフェンス付きのJSONテキストもパースする"""
    cleaned = _JSON_FENCE.sub("", (text or "").strip())
    if not cleaned:
        return None
    return json.loads(cleaned)


class GeminiModel(BaseProvider):
    """Gemini API implementation of CallModel using data classes"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: str = "gemini-2.5-flash",
        image_model_name: str = "imagen-4.0-generate-001",
    ):
        super().__init__(api_key=api_key, model_name=model_name, image_model_name=image_model_name)

    def _get_provider_config(self) -> ProviderConfig:
        """Get Gemini provider configuration"""
        return ProviderConfig(
            provider_name="Gemini",
            model_name=self.model_name or "gemini-2.5-flash",
            image_model_name=self.image_model_name or "imagen-4.0-generate-001",
            supports_structured_output=True,
            supports_image_generation=True,
            max_tokens_limit=8192,
        )

    def setup_client(self):
        """Setup Gemini client"""
        self.client = genai.Client(api_key=self._get_api_key('GEMINI_API_KEY'))

    @log_request
    def generate_content(self, request: BaseRequest) -> BaseResponse:
        """Generate content using data classes"""
        model = self._resolve_model(request)
        try:
            self._validate_request(request)
            response = self.client.models.generate_content(
                model=model,
                contents=request.prompt
            )
            return BaseResponse(
                text=getattr(response, 'text', '') or "",
                model_used=model,
                raw_response=response
            )
        except Exception as e:
            return BaseResponse(text="", model_used=model, error=str(e))

    @log_request
    def generate_structured_output(self, request: StructuredOutputRequest) -> StructuredOutputResponse:
        """Generate structured output using data classes"""
        model = self._resolve_model(request)
        try:
            self._validate_request(request)
            response = self.client.models.generate_content(
                model=model,
                contents=request.prompt,
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=request.schema,
                    system_instruction=request.instructions,
                )
            )
            text = getattr(response, 'text', '') or ""
            parsed = getattr(response, 'parsed', None)
            if not isinstance(parsed, dict):
                parsed = _parse_json_text(text)
            return StructuredOutputResponse(
                text=text,
                parsed_output=parsed,
                model_used=model,
                raw_response=response
            )
        except Exception as e:
            # Fallback to JSON generation and parse
            try:
                json_prompt = f"{request.prompt}\n\nPlease respond in JSON format matching this schema: {json.dumps(request.schema)}"
                fallback_response = self.client.models.generate_content(
                    model=model,
                    contents=json_prompt
                )
                fallback_text = getattr(fallback_response, 'text', '') or ""
                return StructuredOutputResponse(
                    text=fallback_text,
                    parsed_output=_parse_json_text(fallback_text),
                    model_used=model,
                    validation_error=f"Schema validation bypassed due to: {str(e)}",
                    raw_response=fallback_response
                )
            except Exception as fallback_error:
                return StructuredOutputResponse(
                    text="",
                    model_used=model,
                    error=f"Structured output failed: {str(e)}, Fallback failed: {str(fallback_error)}"
                )

    @log_request
    def generate_image(self, request: ImageGenerationRequest) -> ImageGenerationResponse:
        """Generate images with Imagen"""
        model = request.model_name or self.image_model_name
        try:
            self._validate_request(request)
            response = self.client.models.generate_images(
                model=model,
                prompt=request.prompt,
                config=types.GenerateImagesConfig(
                    number_of_images=request.number_of_images,
                    output_mime_type=request.output_mime_type,
                    aspect_ratio=request.aspect_ratio,
                ),
            )
            images: List[GeneratedImage] = []
            for generated in getattr(response, 'generated_images', None) or []:
                image = getattr(generated, 'image', None)
                data = getattr(image, 'image_bytes', None)
                if data:
                    images.append(GeneratedImage(
                        data=data,
                        mime_type=getattr(image, 'mime_type', None) or request.output_mime_type
                    ))
            if not images:
                return ImageGenerationResponse(
                    model_used=model,
                    error="No images were generated.",
                    raw_response=response
                )
            return ImageGenerationResponse(
                model_used=model,
                images=images,
                raw_response=response
            )
        except Exception as e:
            return ImageGenerationResponse(model_used=model, error=str(e))
