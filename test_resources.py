"""
Tests for the resource wrappers: paths, methods and payload shaping.
"""

import base64
import json
from unittest.mock import Mock

import httpx
import pytest

from venice_ai import ClientConfig, VeniceClient
from venice_ai.exceptions import VeniceAPIError, VeniceValidationError
from venice_ai.resources.images import image_to_bytes

CHAT_REQUEST = {
    "model": "llama-3.3-70b",
    "messages": [{"role": "user", "content": "Hi"}],
}


class Recorder:
    """Mock transport handler that records requests and answers each the same way."""

    def __init__(self, status=200, **kwargs):
        self.requests = []
        self.status = status
        self.kwargs = kwargs or {"json": {"data": []}}

    def __call__(self, request):
        self.requests.append(request)
        return httpx.Response(self.status, **self.kwargs)

    @property
    def last(self):
        return self.requests[-1]


def make_client(recorder, **config):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
    return VeniceClient(
        ClientConfig(api_key="inference-key", **config), http_client=http_client
    )


def endpoint(request):
    return request.method, request.url.path.removeprefix("/api/v1")


class TestChat:
    """Chat completions."""

    @pytest.mark.asyncio
    async def test_create_completion_forces_non_streaming(self):
        recorder = Recorder(json={"id": "chatcmpl-1"})
        client = make_client(recorder)

        result = await client.chat.create_completion({**CHAT_REQUEST, "stream": True})

        assert result == {"id": "chatcmpl-1"}
        assert endpoint(recorder.last) == ("POST", "/chat/completions")
        assert json.loads(recorder.last.content)["stream"] is False

    @pytest.mark.asyncio
    async def test_invalid_request_never_sent(self):
        recorder = Mock()
        client = make_client(recorder)

        with pytest.raises(VeniceValidationError):
            await client.chat.create_completion({"model": "m", "messages": []})

        recorder.assert_not_called()

    @pytest.mark.asyncio
    async def test_stream_completion(self):
        recorder = Recorder(content=b'data: {"choices": []}\n\ndata: [DONE]\n\n')
        client = make_client(recorder)

        async with client.chat.stream_completion(CHAT_REQUEST) as stream:
            chunks = [chunk async for chunk in stream]

        assert chunks == [{"choices": []}]
        assert endpoint(recorder.last) == ("POST", "/chat/completions")


class TestImages:
    """Image endpoints."""

    @pytest.mark.asyncio
    async def test_generate(self):
        recorder = Recorder(json={"images": ["AAAA"]})
        client = make_client(recorder)

        result = await client.images.generate({"model": "flux-dev", "prompt": "a cat"})

        assert result == {"images": ["AAAA"]}
        assert endpoint(recorder.last) == ("POST", "/image/generate")

    @pytest.mark.asyncio
    async def test_generate_validates_first(self):
        recorder = Mock()

        with pytest.raises(VeniceValidationError):
            await make_client(recorder).images.generate({"model": "flux-dev"})

        recorder.assert_not_called()

    @pytest.mark.asyncio
    async def test_upscale_sends_multipart_and_returns_bytes(self):
        recorder = Recorder(content=b"\x89PNG", headers={"content-type": "image/png"})
        client = make_client(recorder)

        result = await client.images.upscale(b"raw-image", scale=4)

        assert result == b"\x89PNG"
        request = recorder.last
        assert endpoint(request) == ("POST", "/image/upscale")
        assert request.headers["content-type"].startswith("multipart/form-data")
        assert b'name="scale"\r\n\r\n4' in request.content
        assert b"raw-image" in request.content

    @pytest.mark.asyncio
    async def test_upscale_json_response_decoded(self):
        recorder = Recorder(json={"status": "queued"})

        result = await make_client(recorder).images.upscale(b"raw-image")

        assert result == {"status": "queued"}

    @pytest.mark.asyncio
    async def test_upscale_invalid_json_response(self):
        recorder = Recorder(
            content=b"{oops", headers={"content-type": "application/json"}
        )

        with pytest.raises(VeniceAPIError):
            await make_client(recorder).images.upscale(b"raw-image")

    @pytest.mark.asyncio
    async def test_upscale_rejects_bad_scale(self):
        recorder = Mock()

        with pytest.raises(VeniceValidationError):
            await make_client(recorder).images.upscale(b"raw-image", scale=9)

        recorder.assert_not_called()

    @pytest.mark.asyncio
    async def test_styles(self):
        recorder = Recorder()

        await make_client(recorder).images.styles()

        assert endpoint(recorder.last) == ("GET", "/image/styles")


class TestImageToBytes:
    """Normalizing image inputs."""

    def test_raw_bytes(self):
        assert image_to_bytes(b"abc") == (b"abc", "application/octet-stream")

    def test_data_url(self):
        encoded = base64.b64encode(b"png-bytes").decode()

        assert image_to_bytes(f"data:image/png;base64,{encoded}") == (
            b"png-bytes",
            "image/png",
        )

    def test_bare_base64(self):
        encoded = base64.b64encode(b"jpeg-bytes").decode()

        assert image_to_bytes(encoded)[0] == b"jpeg-bytes"

    def test_invalid_data_url(self):
        with pytest.raises(VeniceValidationError):
            image_to_bytes("data:image/png;base64,abc")


class TestModels:
    """Model listing."""

    @pytest.mark.asyncio
    async def test_list_without_filter(self):
        recorder = Recorder()

        await make_client(recorder).models.list()

        assert endpoint(recorder.last) == ("GET", "/models")
        assert recorder.last.url.query == b""

    @pytest.mark.asyncio
    async def test_filters(self):
        recorder = Recorder()
        models = make_client(recorder).models

        await models.list(type="image")
        await models.traits(type="text")
        await models.compatibility_mapping(type="text")

        assert [
            (endpoint(r)[1], dict(r.url.params)) for r in recorder.requests
        ] == [
            ("/models", {"type": "image"}),
            ("/models/traits", {"type": "text"}),
            ("/models/compatibility_mapping", {"type": "text"}),
        ]


class TestAPIKeys:
    """Key management uses the admin key when configured."""

    @pytest.mark.asyncio
    async def test_admin_key_used(self):
        recorder = Recorder()
        client = make_client(recorder, admin_api_key="admin-key")

        await client.api_keys.list()

        assert recorder.last.headers["authorization"] == "Bearer admin-key"
        assert endpoint(recorder.last) == ("GET", "/api_keys")

    @pytest.mark.asyncio
    async def test_inference_key_without_admin_key(self):
        recorder = Recorder()

        await make_client(recorder).api_keys.rate_limits()

        assert recorder.last.headers["authorization"] == "Bearer inference-key"
        assert endpoint(recorder.last) == ("GET", "/api_keys/rate_limits")

    @pytest.mark.asyncio
    async def test_create(self):
        recorder = Recorder()

        await make_client(recorder).api_keys.create(
            "CI key", consumption_limit={"usd": 10}, expires_at="2030-01-01"
        )

        assert endpoint(recorder.last) == ("POST", "/api_keys")
        assert json.loads(recorder.last.content) == {
            "description": "CI key",
            "apiKeyType": "INFERENCE",
            "consumptionLimit": {"usd": 10},
            "expiresAt": "2030-01-01",
        }

    @pytest.mark.asyncio
    async def test_delete(self):
        recorder = Recorder()

        await make_client(recorder).api_keys.delete("key-1")

        assert endpoint(recorder.last) == ("DELETE", "/api_keys")
        assert dict(recorder.last.url.params) == {"id": "key-1"}

    @pytest.mark.asyncio
    async def test_delete_requires_id(self):
        with pytest.raises(VeniceValidationError) as exc_info:
            await make_client(Mock()).api_keys.delete("")

        assert exc_info.value.details == {"id": "is required"}

    @pytest.mark.asyncio
    async def test_rate_limit_logs(self):
        recorder = Recorder()

        await make_client(recorder).api_keys.rate_limit_logs()

        assert endpoint(recorder.last) == ("GET", "/api_keys/rate_limits/log")

    @pytest.mark.asyncio
    async def test_web3_flow(self):
        recorder = Recorder(json={"data": {"token": "t-1"}})
        api_keys = make_client(recorder).api_keys

        token = await api_keys.web3_token()
        await api_keys.generate_web3_key("0xabc", "0xsig", token)

        get_request, post_request = recorder.requests
        assert token == "t-1"
        assert endpoint(get_request) == ("GET", "/api_keys/generate_web3_key")
        assert endpoint(post_request) == ("POST", "/api_keys/generate_web3_key")
        assert json.loads(post_request.content) == {
            "address": "0xabc",
            "signature": "0xsig",
            "token": "t-1",
            "description": "Web3 API Key",
            "apiKeyType": "INFERENCE",
        }

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body", [{"data": {}}, {"token": "t-1"}, {"data": {"token": 7}}, []]
    )
    async def test_web3_token_unexpected_shape(self, body):
        """A malformed token body raises a typed error instead of KeyError."""
        with pytest.raises(VeniceAPIError, match="web3 token") as exc_info:
            await make_client(Recorder(json=body)).api_keys.web3_token()

        assert exc_info.value.status_code == 200


class TestCharactersAndVVV:
    """Characters and VVV token endpoints."""

    @pytest.mark.asyncio
    async def test_characters(self):
        recorder = Recorder()
        characters = make_client(recorder).characters

        await characters.list()
        await characters.get("alan watts")

        assert [endpoint(r) for r in recorder.requests] == [
            ("GET", "/characters"),
            ("GET", "/characters/alan watts"),
        ]
        assert recorder.last.url.raw_path == b"/api/v1/characters/alan%20watts"

    @pytest.mark.asyncio
    async def test_character_slug_required(self):
        with pytest.raises(VeniceValidationError):
            await make_client(Mock()).characters.get(" ")

    @pytest.mark.asyncio
    async def test_vvv(self):
        recorder = Recorder()
        vvv = make_client(recorder).vvv

        await vvv.circulating_supply()
        await vvv.utilization()
        await vvv.staking_yield()

        assert [endpoint(r)[1] for r in recorder.requests] == [
            "/vvv/circulatingsupply",
            "/vvv/utilization",
            "/vvv/staking_yield",
        ]


class TestEmbeddings:
    """Embeddings endpoint."""

    @pytest.mark.asyncio
    async def test_create_defaults_model(self):
        recorder = Recorder(json={"data": [{"embedding": [0.1]}]})

        result = await make_client(recorder).embeddings.create({"input": "hello"})

        assert result == {"data": [{"embedding": [0.1]}]}
        assert endpoint(recorder.last) == ("POST", "/embeddings")
        assert json.loads(recorder.last.content) == {
            "input": "hello",
            "model": "text-embedding-bge-m3",
        }

    @pytest.mark.asyncio
    async def test_explicit_model_kept(self):
        recorder = Recorder()

        await make_client(recorder).embeddings.create(
            {"input": ["a", "b"], "model": "custom-embedder"}
        )

        assert json.loads(recorder.last.content)["model"] == "custom-embedder"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "request_body",
        [{}, {"input": ""}, {"input": []}, {"input": "x", "dimensions": 0}],
    )
    async def test_invalid_request_never_sent(self, request_body):
        recorder = Mock()

        with pytest.raises(VeniceValidationError):
            await make_client(recorder).embeddings.create(request_body)

        recorder.assert_not_called()


class TestAudio:
    """Text-to-speech endpoint."""

    @pytest.mark.asyncio
    async def test_speech_returns_bytes(self):
        recorder = Recorder(content=b"ID3audio", headers={"content-type": "audio/mpeg"})

        result = await make_client(recorder).audio.speech(
            {"input": "Hello", "model": "tts-kokoro", "voice": "af_sky"}
        )

        assert result == b"ID3audio"
        assert endpoint(recorder.last) == ("POST", "/audio/speech")
        assert json.loads(recorder.last.content)["voice"] == "af_sky"

    @pytest.mark.asyncio
    async def test_speech_input_too_long(self):
        recorder = Mock()

        with pytest.raises(VeniceValidationError) as exc_info:
            await make_client(recorder).audio.speech(
                {"input": "x" * 4097, "model": "tts-kokoro", "voice": "af_sky"}
            )

        assert "input" in exc_info.value.details
        recorder.assert_not_called()


class TestBilling:
    """Billing usage reports."""

    @pytest.mark.asyncio
    async def test_usage_sends_wire_names(self):
        recorder = Recorder(json={"data": [], "pagination": {"page": 2}})

        result = await make_client(recorder).billing.usage(
            currency="USD", start_date="2025-01-01", page=2, sort_order="desc"
        )

        assert result["pagination"] == {"page": 2}
        assert endpoint(recorder.last) == ("GET", "/billing/usage")
        assert dict(recorder.last.url.params) == {
            "currency": "USD",
            "startDate": "2025-01-01",
            "page": "2",
            "sortOrder": "desc",
        }

    @pytest.mark.asyncio
    async def test_usage_without_filters(self):
        recorder = Recorder()

        await make_client(recorder).billing.usage()

        assert recorder.last.url.query == b""

    @pytest.mark.asyncio
    async def test_export_csv(self):
        csv = "timestamp,sku,amount\n2025-01-01,llama,0.01\n"
        recorder = Recorder(content=csv.encode(), headers={"content-type": "text/csv"})

        result = await make_client(recorder).billing.export_csv(limit=10)

        assert result == csv
        assert recorder.last.headers["accept"] == "text/csv"
        assert dict(recorder.last.url.params) == {"limit": "10"}
