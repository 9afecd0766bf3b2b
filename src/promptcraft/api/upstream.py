"""Client for the upstream multimodal image-generation API.

One call per relay request, no retries (retrying is the UI's job).  The
prompt goes out as an ``input_text`` part followed by one ``input_image``
part per reference image, and the ``image_generation`` tool is enabled.

Failures are raised as :class:`UpstreamError` carrying the HTTP status and
taxonomy code the relay should answer with.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from promptcraft.core.errors import (
    INVALID_IMAGE_DATA,
    NO_IMAGE_GENERATED,
    OPENAI_API_KEY_INVALID,
    QUOTA_EXCEEDED,
    RATE_LIMITED,
    TIMEOUT,
    UPSTREAM_BAD_REQUEST,
    UPSTREAM_ERROR,
    UPSTREAM_OVERLOADED,
    UPSTREAM_UNAVAILABLE,
    classify_failure,
)

logger = logging.getLogger(__name__)

IMAGE_GENERATION_CALL = "image_generation_call"

# Upstream status -> (relay status, message, code)
_STATUS_MAP: dict[int, tuple[int, str, str]] = {
    401: (
        401,
        "Invalid API key. Please check your OpenAI API key configuration.",
        OPENAI_API_KEY_INVALID,
    ),
    429: (429, "Rate limit exceeded. Please try again later.", RATE_LIMITED),
    400: (
        400,
        "Invalid request. Please check your prompt and try again.",
        UPSTREAM_BAD_REQUEST,
    ),
    500: (
        500,
        "OpenAI service is temporarily unavailable. Please try again later.",
        UPSTREAM_UNAVAILABLE,
    ),
    503: (
        503,
        "OpenAI service is overloaded. Please try again in a few minutes.",
        UPSTREAM_OVERLOADED,
    ),
}


class UpstreamError(Exception):
    """A classified upstream failure.

    Attributes:
        status_code: Status the relay should answer with
        message: Message for the error body
        code: Taxonomy code for the error body
    """

    def __init__(self, status_code: int, message: str, code: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.code = code


def build_payload(prompt: str, reference_images: list[str], model: str) -> dict[str, Any]:
    """Build the upstream request body.

    Reference images keep their order and are addressed as JPEG data URLs
    built from their base64 payloads.
    """
    content: list[dict[str, str]] = [{"type": "input_text", "text": prompt}]
    for image_base64 in reference_images:
        content.append(
            {
                "type": "input_image",
                "image_url": f"data:image/jpeg;base64,{image_base64}",
            }
        )

    return {
        "model": model,
        "input": [{"role": "user", "content": content}],
        "tools": [{"type": "image_generation"}],
    }


def _error_details(response: httpx.Response) -> tuple[str | None, str | None]:
    """Return (message, code) from an upstream error body, if present."""
    try:
        body = response.json()
    except ValueError:
        return None, None
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return error.get("message"), error.get("code") or error.get("type")
    if isinstance(error, str):
        return error, None
    return None, None


def map_upstream_status(response: httpx.Response) -> UpstreamError:
    """Translate a non-2xx upstream response into an :class:`UpstreamError`."""
    upstream_message, upstream_code = _error_details(response)
    logger.error(
        f"Upstream API error {response.status_code}: "
        f"{upstream_message or response.text[:200]}"
    )

    if response.status_code == 429 and classify_failure(None, upstream_code) == QUOTA_EXCEEDED:
        return UpstreamError(429, "API quota exceeded. Please try again later.", QUOTA_EXCEEDED)

    if response.status_code in _STATUS_MAP:
        status, message, code = _STATUS_MAP[response.status_code]
        return UpstreamError(status, message, code)

    return UpstreamError(
        500,
        f"OpenAI API error: {upstream_message or 'Unknown error'}",
        UPSTREAM_ERROR,
    )


def extract_image(data: dict[str, Any]) -> str:
    """Return the base64 image from the first image_generation_call output.

    Raises:
        UpstreamError: If no such output exists or its result is unusable
    """
    outputs = data.get("output") or []
    calls = [o for o in outputs if isinstance(o, dict) and o.get("type") == IMAGE_GENERATION_CALL]
    if not calls:
        raise UpstreamError(500, "No image was generated in the response", NO_IMAGE_GENERATED)

    image_base64 = calls[0].get("result")
    if not image_base64 or not isinstance(image_base64, str):
        raise UpstreamError(500, "Invalid image data received from OpenAI API", INVALID_IMAGE_DATA)
    return image_base64


class UpstreamClient:
    """Thin async client for the Responses API.

    Args:
        api_key: Upstream credential
        url: Responses API endpoint
        model: Model driving the image_generation tool
        timeout: Hard timeout in seconds for the whole call
        transport: Optional custom transport (useful for testing)
    """

    def __init__(
        self,
        api_key: str,
        url: str,
        model: str,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.url = url
        self.model = model
        self.timeout = timeout
        self.transport = transport

    async def generate(self, prompt: str, reference_images: list[str]) -> str:
        """Generate one image and return its base64 payload.

        Raises:
            UpstreamError: On timeout (408), non-2xx responses, or a
                response without usable image data
        """
        payload = build_payload(prompt, reference_images, self.model)
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

        logger.info(
            f"Requesting image from upstream ({len(prompt)} chars, "
            f"{len(reference_images)} reference image(s))"
        )
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout), transport=self.transport
            ) as client:
                # wait_for bounds the whole exchange, not just each socket operation.
                response = await asyncio.wait_for(
                    client.post(self.url, json=payload, headers=headers),
                    timeout=self.timeout,
                )
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            logger.error(f"Upstream call timed out after {self.timeout}s: {e}")
            raise UpstreamError(408, "Request timed out. Please try again.", TIMEOUT) from e

        if not response.is_success:
            raise map_upstream_status(response)

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(
                500, "Invalid image data received from OpenAI API", INVALID_IMAGE_DATA
            ) from e

        image_base64 = extract_image(data if isinstance(data, dict) else {})
        logger.info("Image generated successfully")
        return image_base64
