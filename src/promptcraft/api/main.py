"""Promptcraft relay - FastAPI Application.

This module defines the stateless relay that sits between the prompt
builder UI and the upstream image-generation API.  It holds the upstream
credential (from the environment only), enforces input limits, forwards the
request, and normalises every outcome into one of two body shapes.

Endpoints
---------
========  ==========================  ====================================
Method    Path                        Purpose
========  ==========================  ====================================
OPTIONS   ``/api/generate-image``     CORS preflight
POST      ``/api/generate-image``     Generate one image from a prompt
========  ==========================  ====================================

Response bodies
---------------
Success (200)::

    {"imageUrl": "data:image/png;base64,..."}

Error (400/401/408/429/500/503)::

    {"error": "...", "code": "...", "timestamp": "2025-01-01T00:00:00+00:00"}

Usage
-----
CLI (installed entry point)::

    promptcraft-relay

Direct invocation::

    python -m promptcraft.api.main
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError

from promptcraft import __version__
from promptcraft.api.models import ErrorResponse, GenerateImageResponse, RelayOptions
from promptcraft.api.upstream import UpstreamClient, UpstreamError
from promptcraft.core.config import MAX_PROMPT_LENGTH, config
from promptcraft.core.errors import (
    INVALID_REQUEST_FORMAT,
    OPENAI_API_KEY_INVALID,
    OPENAI_API_KEY_MISSING,
    QUOTA_EXCEEDED,
    RATE_LIMITED,
    TIMEOUT,
    UNKNOWN_ERROR,
    VALIDATION_ERROR,
    classify_failure,
)

logger = logging.getLogger(__name__)

CORS_ALLOW_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": ", ".join(CORS_ALLOW_HEADERS),
}

# Classified failure code -> (status, message, code) for exceptions that were
# not already turned into an UpstreamError.
_CLASSIFIED_RESPONSES = {
    QUOTA_EXCEEDED: (429, "API quota exceeded. Please try again later.", QUOTA_EXCEEDED),
    RATE_LIMITED: (429, "Rate limit exceeded. Please try again later.", RATE_LIMITED),
    OPENAI_API_KEY_INVALID: (
        401,
        "API key issue. Please check your configuration.",
        OPENAI_API_KEY_INVALID,
    ),
    OPENAI_API_KEY_MISSING: (
        500,
        "OpenAI API key not configured",
        OPENAI_API_KEY_MISSING,
    ),
    TIMEOUT: (408, "Request timed out. Please try again.", TIMEOUT),
}


app = FastAPI(
    title="Promptcraft Relay",
    description="Stateless relay between the prompt builder and the image-generation API.",
    version=__version__,
)

# Preflight requests carrying Access-Control-Request-Method are answered by
# the middleware; the explicit OPTIONS route below covers bare OPTIONS calls.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["POST", "OPTIONS"],
    allow_headers=CORS_ALLOW_HEADERS,
)


# ---------------------------------------------------------------------------
# Response helpers.
# ---------------------------------------------------------------------------


def error_response(message: str, status_code: int = 500, code: str | None = None) -> JSONResponse:
    """Build the relay's error body and log it.

    Args:
        message: Human-readable message for the ``error`` field.
        status_code: HTTP status of the response.
        code: Taxonomy code for the ``code`` field.

    Returns:
        JSON response with ``error``, ``code`` and ``timestamp`` and the
        CORS headers.
    """
    logger.error(f"Error ({status_code}): {message}")
    body = ErrorResponse(error=message, code=code)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(),
        headers=CORS_HEADERS,
    )


def classify_exception(exc: Exception) -> JSONResponse:
    """Turn an unexpected exception into a classified error response."""
    classified = classify_failure(str(exc))
    if classified in _CLASSIFIED_RESPONSES:
        status_code, message, code = _CLASSIFIED_RESPONSES[classified]
        return error_response(message, status_code, code)
    return error_response(str(exc) or "An unexpected error occurred", 500, UNKNOWN_ERROR)


def validate_prompt_field(prompt) -> str | None:
    """Return the violation message for ``prompt``, or None if it is valid."""
    if not prompt or not isinstance(prompt, str):
        return "Prompt is required and must be a string"
    if len(prompt) > MAX_PROMPT_LENGTH:
        return f"Prompt is too long. Maximum length is {MAX_PROMPT_LENGTH} characters"
    if not prompt.strip():
        return "Prompt cannot be empty"
    return None


def _describe_options_error(exc: ValidationError) -> str:
    """Return a one-line message for the first options violation."""
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    if location:
        return f"Invalid options: {location}: {first.get('msg')}"
    return f"Invalid options: {first.get('msg')}"


def get_upstream_client() -> UpstreamClient | None:
    """Create the upstream client, or None if no credential is configured."""
    if not config.openai_api_key:
        return None
    return UpstreamClient(
        api_key=config.openai_api_key,
        url=config.upstream_url,
        model=config.upstream_model,
        timeout=config.upstream_timeout_seconds,
    )


# ---------------------------------------------------------------------------
# Routes.
# ---------------------------------------------------------------------------


@app.options("/api/generate-image")
async def generate_image_preflight() -> Response:
    """Answer a CORS preflight with an empty body and the CORS headers."""
    return Response(status_code=200, headers=CORS_HEADERS)


@app.post("/api/generate-image")
async def generate_image(request: Request) -> Response:
    """Generate one image from a prompt and optional reference images.

    This endpoint:

    1. Checks that the upstream credential is configured.
    2. Parses the JSON body.
    3. Validates the prompt and the options record.
    4. Forwards the request upstream with a hard timeout.
    5. Returns the image as a ``data:image/png;base64`` URI.

    Every failure is returned as an error body; nothing escapes unclassified.

    Args:
        request: Incoming request with ``{"prompt": ..., "options": {...}}``.

    Returns:
        ``{"imageUrl": ...}`` on success, otherwise an error body.
    """
    try:
        upstream = get_upstream_client()
        if upstream is None:
            return error_response("OpenAI API key not configured", 500, OPENAI_API_KEY_MISSING)

        # --- Parse body ----------------------------------------------------
        try:
            body = await request.json()
        except ValueError:
            return error_response("Invalid JSON in request body", 400, INVALID_REQUEST_FORMAT)
        if not isinstance(body, dict):
            return error_response("Invalid JSON in request body", 400, INVALID_REQUEST_FORMAT)

        # --- Validate inputs -----------------------------------------------
        prompt = body.get("prompt")
        violation = validate_prompt_field(prompt)
        if violation:
            return error_response(violation, 400, VALIDATION_ERROR)

        try:
            options = RelayOptions.model_validate(body.get("options") or {})
        except ValidationError as e:
            return error_response(_describe_options_error(e), 400, VALIDATION_ERROR)

        # --- Forward upstream ----------------------------------------------
        image_base64 = await upstream.generate(prompt, options.reference_images)
        result = GenerateImageResponse(image_url=f"data:image/png;base64,{image_base64}")
        return JSONResponse(content=result.model_dump(by_alias=True), headers=CORS_HEADERS)

    except UpstreamError as e:
        return error_response(e.message, e.status_code, e.code)
    except Exception as e:
        logger.error(f"Image generation error: {e}", exc_info=True)
        return classify_exception(e)


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the relay with uvicorn.

    Host and port come from :data:`~promptcraft.core.config.config`
    (``PROMPTCRAFT_SERVER_HOST`` / ``PROMPTCRAFT_SERVER_PORT``), defaulting
    to ``0.0.0.0:8000``.
    """
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    if not config.openai_api_key:
        logger.warning("OPENAI_API_KEY is not set; every request will fail")

    uvicorn.run(
        "promptcraft.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
