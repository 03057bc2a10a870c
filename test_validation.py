"""
Tests for request body validation.
"""

import pytest

from venice_ai.exceptions import VeniceValidationError
from venice_ai.validation import (
    validate_chat_completion_request,
    validate_image_generate_request,
    validate_image_upscale_request,
)

VALID_CHAT = {
    "model": "llama-3.3-70b",
    "messages": [
        {"role": "system", "content": "Be brief."},
        {"role": "user", "content": "Hi"},
    ],
}


def chat(**overrides):
    return {**VALID_CHAT, **overrides}


class TestChatCompletionRequest:
    """Chat completion bodies."""

    def test_valid_request(self):
        request = validate_chat_completion_request(
            chat(temperature=0.7, max_tokens=100, top_p=0.9, stream=False)
        )

        assert request.model == "llama-3.3-70b"
        assert len(request.messages) == 2
        assert request.temperature == 0.7

    def test_unknown_fields_allowed(self):
        """Newer API parameters pass through untouched."""
        request = validate_chat_completion_request(
            chat(venice_parameters={"include_venice_system_prompt": False})
        )

        assert request.model_extra == {
            "venice_parameters": {"include_venice_system_prompt": False}
        }

    def test_multimodal_content(self):
        """Content may be a list of text and image parts."""
        message = {
            "role": "user",
            "content": [
                {"type": "text", "text": "What is this?"},
                {"type": "image_url", "image_url": {"url": "data:image/png;base64,AA"}},
            ],
        }

        request = validate_chat_completion_request(chat(messages=[message]))

        assert request.messages[0].content[1].image_url.url.startswith("data:")

    @pytest.mark.parametrize(
        ("body", "path"),
        [
            ({"messages": VALID_CHAT["messages"]}, "model"),
            (chat(model=""), "model"),
            (chat(messages=[]), "messages"),
            (chat(messages=[{"role": "robot", "content": "x"}]), "messages[0].role"),
            (chat(messages=[{"role": "user", "content": ""}]), "messages[0].content"),
            (chat(messages=[{"content": "x"}]), "messages[0].role"),
            (chat(temperature=3), "temperature"),
            (chat(temperature=-0.1), "temperature"),
            (chat(max_tokens=0), "max_tokens"),
            (chat(top_p=1.5), "top_p"),
            (chat(stream="yes"), "stream"),
        ],
    )
    def test_invalid_field_named_in_details(self, body, path):
        """Each failure names the offending field path."""
        with pytest.raises(VeniceValidationError) as exc_info:
            validate_chat_completion_request(body)

        assert path in exc_info.value.details
        assert path in exc_info.value.message

    def test_every_invalid_field_reported(self):
        with pytest.raises(VeniceValidationError) as exc_info:
            validate_chat_completion_request({"temperature": 5})

        assert {"model", "messages", "temperature"} <= set(exc_info.value.details)

    def test_body_must_be_an_object(self):
        with pytest.raises(VeniceValidationError) as exc_info:
            validate_chat_completion_request(["not", "a", "dict"])

        assert exc_info.value.details == {"request": "must be an object"}

    def test_cause_is_chained(self):
        """The pydantic error is kept as the cause."""
        with pytest.raises(VeniceValidationError) as exc_info:
            validate_chat_completion_request(chat(model=None))

        assert exc_info.value.__cause__ is not None


class TestImageRequests:
    """Image generation and upscale bodies."""

    def test_valid_generate(self):
        request = validate_image_generate_request(
            {"model": "flux-dev", "prompt": "a lighthouse", "width": 512, "height": 512}
        )

        assert request.prompt == "a lighthouse"

    @pytest.mark.parametrize(
        ("body", "path"),
        [
            ({"model": "flux-dev"}, "prompt"),
            ({"model": "flux-dev", "prompt": ""}, "prompt"),
            ({"model": "flux-dev", "prompt": "p", "width": 0}, "width"),
            ({"prompt": "p"}, "model"),
        ],
    )
    def test_invalid_generate(self, body, path):
        with pytest.raises(VeniceValidationError) as exc_info:
            validate_image_generate_request(body)

        assert path in exc_info.value.details

    def test_valid_upscale(self):
        request = validate_image_upscale_request({"image": b"\x89PNG", "scale": 4})

        assert request.scale == 4

    def test_upscale_scale_out_of_range(self):
        with pytest.raises(VeniceValidationError) as exc_info:
            validate_image_upscale_request({"image": b"\x89PNG", "scale": 8})

        assert "scale" in exc_info.value.details

    def test_upscale_requires_image(self):
        with pytest.raises(VeniceValidationError) as exc_info:
            validate_image_upscale_request({"scale": 2})

        assert "image" in exc_info.value.details
