import base64
import json
from typing import Optional, Dict, Any, List

from openai import OpenAI

from ..data_classes import (
    BaseRequest, BaseResponse,
    StructuredOutputRequest, StructuredOutputResponse,
    ImageGenerationRequest, ImageGenerationResponse, GeneratedImage,
    ProviderConfig
)
from ..decorators import log_request
from ._base_provider import BaseProvider

# gpt-image-1 only offers fixed sizes; landscape is the closest to 16:9
_SIZE_BY_ASPECT_RATIO = {
    "16:9": "1536x1024",
    "1:1": "1024x1024",
    "9:16": "1024x1536",
}


class OpenAIModel(BaseProvider):
    """OpenAI API implementation of CallModel using data classes"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: str = "gpt-5",
        image_model_name: str = "gpt-image-1",
    ):
        super().__init__(api_key=api_key, model_name=model_name, image_model_name=image_model_name)

    def _get_provider_config(self) -> ProviderConfig:
        return ProviderConfig(
            provider_name="OpenAI",
            model_name=self.model_name,
            image_model_name=self.image_model_name,
            supports_structured_output=True,
            supports_image_generation=True,
            max_tokens_limit=128000,
        )

    def setup_client(self):
        self.client = OpenAI(api_key=self._get_api_key('OPENAI_API_KEY'))

    @log_request
    def generate_content(self, request: BaseRequest) -> BaseResponse:
        model = self._resolve_model(request)
        try:
            self._validate_request(request)
            response = self.client.responses.create(model=model, input=request.prompt)
            return BaseResponse(
                text=getattr(response, 'output_text', ''),
                model_used=model,
                raw_response=response
            )
        except Exception as e:
            return BaseResponse(text="", model_used=model, error=str(e))

    @log_request
    def generate_structured_output(self, request: StructuredOutputRequest) -> StructuredOutputResponse:
        model = self._resolve_model(request)
        request_data: Dict[str, Any] = {
            "model": model,
            "input": request.prompt,
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": request.schema_name,
                    "schema": request.schema,
                    "strict": request.strict
                }
            }
        }
        if request.instructions:
            request_data["instructions"] = request.instructions
        try:
            self._validate_request(request)
            response = self.client.responses.create(**request_data)
            text = getattr(response, 'output_text', '') or ""
            return StructuredOutputResponse(
                text=text,
                parsed_output=json.loads(text) if text else None,
                model_used=model,
                raw_response=response,
            )
        except Exception as e:
            try:
                fallback_prompt = f"{request.prompt}\n\nPlease respond in JSON format matching this schema: {json.dumps(request.schema)}"
                fallback_response = self.client.responses.create(model=model, input=fallback_prompt)
                parsed = None
                try:
                    parsed = json.loads(getattr(fallback_response, 'output_text', '') or '{}')
                except json.JSONDecodeError:
                    parsed = None
                return StructuredOutputResponse(
                    text=getattr(fallback_response, 'output_text', ''),
                    parsed_output=parsed,
                    model_used=model,
                    validation_error=f"Structured output parse failed: {str(e)}",
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
        model = request.model_name or self.image_model_name
        try:
            self._validate_request(request)
            response = self.client.images.generate(
                model=model,
                prompt=request.prompt,
                n=request.number_of_images,
                size=_SIZE_BY_ASPECT_RATIO.get(request.aspect_ratio, "auto"),
            )
            images: List[GeneratedImage] = []
            for item in getattr(response, 'data', None) or []:
                encoded = getattr(item, 'b64_json', None)
                if encoded:
                    images.append(GeneratedImage(data=base64.b64decode(encoded), mime_type="image/png"))
            if not images:
                return ImageGenerationResponse(
                    model_used=model,
                    error="No images were generated.",
                    raw_response=response
                )
            return ImageGenerationResponse(model_used=model, images=images, raw_response=response)
        except Exception as e:
            return ImageGenerationResponse(model_used=model, error=str(e))
