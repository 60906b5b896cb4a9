from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any


# ========== Base Classes ==========

@dataclass
class BaseRequest:
    """全てのリクエストの基底クラス"""
    prompt: str = ""
    model_name: Optional[str] = None
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        """辞書形式に変換（APIリクエスト用）"""
        return {k: v for k, v in self.__dict__.items() if v is not None}


@dataclass
class BaseResponse:
    """全てのレスポンスの基底クラス"""
    text: str = ""
    model_used: Optional[str] = None
    usage: Optional[Dict[str, int]] = None
    error: Optional[str] = None
    raw_response: Optional[Any] = None

    @property
    def success(self) -> bool:
        """リクエストが成功したか"""
        return self.error is None


# ========== Structured Output ==========

@dataclass
class StructuredOutputRequest(BaseRequest):
    """構造化出力リクエスト"""
    schema: Dict[str, Any] = field(default_factory=dict)  # JSON Schema
    schema_name: str = "response"
    schema_description: Optional[str] = None
    strict: bool = True  # OpenAI用
    instructions: Optional[str] = None


@dataclass
class StructuredOutputResponse(BaseResponse):
    """構造化出力レスポンス"""
    parsed_output: Optional[Dict[str, Any]] = None
    validation_error: Optional[str] = None

    @property
    def success(self) -> bool:
        """パースが成功したか"""
        return self.error is None and self.validation_error is None and self.parsed_output is not None


# ========== Image Generation ==========

@dataclass
class GeneratedImage:
    """生成された画像1枚分のデータ"""
    data: bytes = b""
    mime_type: str = "image/png"


@dataclass
class ImageGenerationRequest(BaseRequest):
    """画像生成リクエスト"""
    number_of_images: int = 1
    aspect_ratio: str = "16:9"
    output_mime_type: str = "image/png"

    def __post_init__(self):
        """バリデーション"""
        if self.number_of_images < 1:
            raise ValueError("number_of_imagesは1以上を指定してください")


@dataclass
class ImageGenerationResponse(BaseResponse):
    """画像生成レスポンス"""
    images: List[GeneratedImage] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """画像が1枚以上生成されたか"""
        return self.error is None and len(self.images) > 0

    @property
    def first_image(self) -> Optional[GeneratedImage]:
        return self.images[0] if self.images else None


# ========== Provider Configuration ==========

@dataclass
class ProviderConfig:
    """プロバイダー固有の設定"""
    provider_name: str = ""
    model_name: str = ""
    image_model_name: Optional[str] = None
    supports_structured_output: bool = True
    supports_image_generation: bool = True

    # プロバイダー固有の制限
    max_tokens_limit: Optional[int] = None


# ========== Utility Functions ==========

def create_image_request(
    prompt: str,
    aspect_ratio: str = "16:9",
    **kwargs
) -> ImageGenerationRequest:
    """画像生成リクエストの便利な生成関数"""
    return ImageGenerationRequest(
        prompt=prompt,
        aspect_ratio=aspect_ratio,
        **kwargs
    )
