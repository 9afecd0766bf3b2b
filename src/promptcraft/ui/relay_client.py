"""HTTP client for the relay's generate-image route."""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class RelayError(Exception):
    """The relay answered with an error body.

    Attributes:
        status_code: HTTP status of the relay response
        message: ``error`` field of the body (or a fallback)
        code: ``code`` field of the body, if any
    """

    def __init__(self, status_code: int, message: str, code: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.code = code


class RelayClient:
    """Posts generation requests to the relay.

    Args:
        url: Relay generate-image URL
        timeout: Timeout in seconds for one call
        credential: Opaque session credential, sent as bearer token
        transport: Optional custom transport (useful for testing)
    """

    def __init__(
        self,
        url: str,
        timeout: float = 75.0,
        credential: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.credential = credential
        self.transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "x-client-info": "promptcraft"}
        if self.credential:
            headers["Authorization"] = f"Bearer {self.credential}"
            headers["apikey"] = self.credential
        return headers

    async def generate_image(self, prompt: str, options: dict[str, Any]) -> dict[str, Any]:
        """Send one generation request.

        Args:
            prompt: Final composed prompt
            options: Relay options object (reference images already encoded)

        Returns:
            Decoded success body (normally ``{"imageUrl": ...}``)

        Raises:
            RelayError: If the relay answers with a non-2xx status
            httpx.TransportError: If the relay cannot be reached
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.post(
                self.url,
                json={"prompt": prompt, "options": options},
                headers=self._headers(),
            )

        if not response.is_success:
            message, code = _parse_error(response)
            logger.warning(f"Relay returned {response.status_code} ({code}): {message}")
            raise RelayError(response.status_code, message, code)

        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}


def _parse_error(response: httpx.Response) -> tuple[str, str | None]:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"Relay error {response.status_code}", None
    if not isinstance(body, dict):
        return f"Relay error {response.status_code}", None
    return body.get("error") or f"Relay error {response.status_code}", body.get("code")
