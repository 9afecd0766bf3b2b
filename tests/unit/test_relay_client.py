"""Unit tests for the relay HTTP client."""

import json

import httpx
import pytest

from promptcraft.ui.relay_client import RelayClient, RelayError

URL = "http://relay.test/api/generate-image"


@pytest.mark.anyio
class TestRelayClient:
    """Tests for RelayClient.generate_image."""

    async def test_posts_prompt_and_options(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"imageUrl": "data:image/png;base64,QUJD"})

        client = RelayClient(URL, transport=httpx.MockTransport(handler))
        result = await client.generate_image("a cat", {"style": "Watercolor"})

        assert result == {"imageUrl": "data:image/png;base64,QUJD"}
        assert json.loads(seen[0].content) == {
            "prompt": "a cat",
            "options": {"style": "Watercolor"},
        }
        assert seen[0].headers["x-client-info"] == "promptcraft"
        assert "authorization" not in seen[0].headers

    async def test_sends_credential_headers(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"imageUrl": "x"})

        client = RelayClient(URL, credential="sk-user", transport=httpx.MockTransport(handler))
        await client.generate_image("a cat", {})

        assert seen[0].headers["authorization"] == "Bearer sk-user"
        assert seen[0].headers["apikey"] == "sk-user"

    async def test_error_body_raises_relay_error(self):
        def handler(request):
            return httpx.Response(
                429,
                json={
                    "error": "Rate limit exceeded. Please try again later.",
                    "code": "RATE_LIMITED",
                    "timestamp": "2025-01-01T00:00:00+00:00",
                },
            )

        client = RelayClient(URL, transport=httpx.MockTransport(handler))
        with pytest.raises(RelayError) as exc_info:
            await client.generate_image("a cat", {})

        assert exc_info.value.status_code == 429
        assert exc_info.value.code == "RATE_LIMITED"
        assert exc_info.value.message == "Rate limit exceeded. Please try again later."

    async def test_non_json_error(self):
        client = RelayClient(
            URL, transport=httpx.MockTransport(lambda r: httpx.Response(502, text="Bad Gateway"))
        )
        with pytest.raises(RelayError) as exc_info:
            await client.generate_image("a cat", {})

        assert exc_info.value.message == "Bad Gateway"
        assert exc_info.value.code is None

    async def test_non_object_success_body(self):
        client = RelayClient(
            URL, transport=httpx.MockTransport(lambda r: httpx.Response(200, json=[1, 2]))
        )
        assert await client.generate_image("a cat", {}) == {}

    async def test_transport_error_propagates(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        client = RelayClient(URL, transport=httpx.MockTransport(handler))
        with pytest.raises(httpx.TransportError):
            await client.generate_image("a cat", {})
