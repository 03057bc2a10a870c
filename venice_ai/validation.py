"""
Request validation for the Venice API.

Request bodies are checked against pydantic models before anything is sent.
Unknown keys are allowed through so newer API parameters keep working; only
the fields the SDK knows about are constrained.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictStr,
    ValidationError,
    field_validator,
)

from .exceptions import VeniceValidationError

Role = Literal["system", "user", "assistant", "tool"]
AudioFormat = Literal["mp3", "opus", "aac", "flac", "wav", "pcm"]
NonEmptyStr = Annotated[StrictStr, Field(min_length=1)]


class ImageUrl(BaseModel):
    model_config = ConfigDict(extra="allow")

    url: NonEmptyStr


class TextPart(BaseModel):
    """Text item of a multimodal message."""
    model_config = ConfigDict(extra="allow")

    type: Literal["text"]
    text: NonEmptyStr


class ImageUrlPart(BaseModel):
    """Image item of a multimodal message."""
    model_config = ConfigDict(extra="allow")

    type: Literal["image_url"]
    image_url: ImageUrl


ContentPart = Annotated[TextPart | ImageUrlPart, Field(discriminator="type")]


class ChatMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    role: Role
    content: StrictStr | list[ContentPart]

    @field_validator("content")
    @classmethod
    def _content_not_empty(cls, value: str | list[Any]) -> str | list[Any]:
        if not value:
            raise ValueError("content must be a non-empty string or list")
        return value


class ChatCompletionRequest(BaseModel):
    """Body of POST /chat/completions."""
    model_config = ConfigDict(extra="allow")

    model: NonEmptyStr
    messages: list[ChatMessage] = Field(min_length=1)
    temperature: float | None = Field(default=None, ge=0, le=2)
    max_tokens: int | None = Field(default=None, ge=1)
    top_p: float | None = Field(default=None, ge=0, le=1)
    stream: StrictBool | None = None


class ImageGenerateRequest(BaseModel):
    """Body of POST /image/generate."""
    model_config = ConfigDict(extra="allow")

    model: NonEmptyStr
    prompt: NonEmptyStr
    width: int | None = Field(default=None, gt=0)
    height: int | None = Field(default=None, gt=0)
    negative_prompt: StrictStr | None = None
    style_preset: StrictStr | None = None


class ImageUpscaleRequest(BaseModel):
    """Form fields of POST /image/upscale."""
    model_config = ConfigDict(extra="allow")

    image: Annotated[bytes, Field(min_length=1)] | NonEmptyStr
    scale: int = Field(default=2, ge=1, le=4)


class EmbeddingRequest(BaseModel):
    """Body of POST /embeddings."""
    model_config = ConfigDict(extra="allow")

    input: NonEmptyStr | Annotated[list[NonEmptyStr], Field(min_length=1)]
    model: NonEmptyStr | None = None
    encoding_format: Literal["float", "base64"] | None = None
    dimensions: int | None = Field(default=None, ge=1)
    user: StrictStr | None = None


class SpeechRequest(BaseModel):
    """Body of POST /audio/speech."""
    model_config = ConfigDict(extra="allow")

    input: Annotated[StrictStr, Field(min_length=1, max_length=4096)]
    model: NonEmptyStr
    voice: NonEmptyStr
    response_format: AudioFormat | None = None
    speed: float | None = Field(default=None, ge=0.25, le=4.0)


def _format_location(loc: tuple[int | str, ...]) -> str:
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path = f"{path}.{part}" if path else part
    return path or "request"


M = TypeVar("M", bound=BaseModel)


def _validate(model: type[M], body: Any, label: str) -> M:
    if not isinstance(body, dict):
        raise VeniceValidationError(
            f"Invalid {label}: body must be an object",
            details={"request": "must be an object"},
        )
    try:
        return model.model_validate(body)
    except ValidationError as e:
        details = {
            _format_location(error["loc"]): error["msg"] for error in e.errors()
        }
        first_path, first_message = next(iter(details.items()))
        raise VeniceValidationError(
            f"Invalid {label}: {first_path}: {first_message}",
            details=details,
        ) from e


def validate_chat_completion_request(body: Any) -> ChatCompletionRequest:
    """
    Validate a chat completion body.

    Raises:
        VeniceValidationError: With one ``details`` entry per invalid field
    """
    return _validate(ChatCompletionRequest, body, "chat completion request")


def validate_image_generate_request(body: Any) -> ImageGenerateRequest:
    return _validate(ImageGenerateRequest, body, "image generation request")


def validate_image_upscale_request(body: Any) -> ImageUpscaleRequest:
    return _validate(ImageUpscaleRequest, body, "image upscale request")


def validate_embedding_request(body: Any) -> EmbeddingRequest:
    return _validate(EmbeddingRequest, body, "embedding request")


def validate_speech_request(body: Any) -> SpeechRequest:
    return _validate(SpeechRequest, body, "speech request")
