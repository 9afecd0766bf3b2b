"""Generation orchestrator: one in-flight generation per session.

The orchestrator owns the generation lifecycle::

    idle -> generating -> succeeded
                       -> failed

and composes the pieces of one attempt: prompt composition and validation,
the connectivity precondition, sequential reference-image encoding, the
relay call wrapped in exponential-backoff retries, and error classification.

A generation token guards against stale results: every attempt takes a new
token, and an outcome is only applied if its token is still current.
:meth:`GenerationOrchestrator.abandon` bumps the token, so a call that is
still running when the user logs out cannot overwrite the state afterwards.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

import httpx

from promptcraft.core.encoding import encode_file_base64
from promptcraft.core.errors import (
    INVALID_REQUEST_FORMAT,
    NETWORK_TIMEOUT,
    OPENAI_API_KEY_INVALID,
    OPENAI_API_KEY_MISSING,
    QUOTA_EXCEEDED,
    RATE_LIMITED,
    TIMEOUT,
    VALIDATION_ERROR,
    AppError,
    ErrorKind,
    classify_failure,
    create_error,
    get_user_friendly_message,
)
from promptcraft.core.models import GenerationOptions, ReferenceImage
from promptcraft.core.prompt_builder import build_final_prompt
from promptcraft.core.retry import retry_with_backoff
from promptcraft.core.validation import validate_prompt

from .models import GenerationSnapshot, GenerationStatus, LastAttempt
from .relay_client import RelayError

logger = logging.getLogger(__name__)

OFFLINE_MESSAGE = "No internet connection. Please check your connection and try again."
FALLBACK_MESSAGE = "Failed to generate image. Please try again."

# Notification levels passed to the notify callback
INFO = "info"
ERROR = "error"

Notifier = Callable[[str, str, str], None]


def classify_relay_error(message: str | None, code: str | None = None) -> AppError:
    """Convert a relay failure into an :class:`AppError`.

    Requests the relay rejected as invalid become validation errors, which
    are never retried.  Everything else is api-kind.  Structured codes from
    the relay are used first; message substrings are only consulted when
    the code is missing or unrecognised.
    """
    if code in (VALIDATION_ERROR, INVALID_REQUEST_FORMAT):
        return create_error(ErrorKind.VALIDATION, message or "Invalid request", message, code)
    classified = classify_failure(message, code)
    if classified == QUOTA_EXCEEDED:
        return create_error(ErrorKind.API, "API quota exceeded", message, QUOTA_EXCEEDED)
    if classified == RATE_LIMITED:
        return create_error(ErrorKind.API, "Rate limit exceeded", message, RATE_LIMITED)
    if classified in (OPENAI_API_KEY_INVALID, OPENAI_API_KEY_MISSING):
        return create_error(ErrorKind.API, "API key issue", message, OPENAI_API_KEY_MISSING)
    if classified == TIMEOUT:
        return create_error(ErrorKind.API, "Request timed out", message, NETWORK_TIMEOUT)
    return create_error(ErrorKind.API, message or "API error", message, code)


def _is_retryable(error: Exception) -> bool:
    """Only retryable AppErrors are attempted again."""
    return isinstance(error, AppError) and error.retryable


class GenerationOrchestrator:
    """Runs generations against the relay for one UI session.

    Args:
        relay: Object with an async ``generate_image(prompt, options)``
            method (normally a :class:`~promptcraft.ui.relay_client.RelayClient`)
        connectivity: Zero-argument coroutine returning True when online
        notify: Optional callback ``(title, message, level)`` for toasts
        encoder: Callable reading a file path into headerless base64
        max_attempts: Attempts for the relay call
        initial_delay_ms: First backoff delay
        sleep: Awaitable sleep used between attempts (injectable for tests)
    """

    def __init__(
        self,
        relay: Any,
        connectivity: Callable[[], Awaitable[bool]],
        notify: Notifier | None = None,
        encoder: Callable[[str | Path], str] = encode_file_base64,
        max_attempts: int = 3,
        initial_delay_ms: int = 1000,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.relay = relay
        self.connectivity = connectivity
        self.notify = notify or (lambda title, message, level: None)
        self.encoder = encoder
        self.max_attempts = max_attempts
        self.initial_delay_ms = initial_delay_ms
        self.sleep = sleep

        self.state = GenerationSnapshot()
        self.last_attempt: LastAttempt | None = None
        self._token = 0
        self._active: int | None = None

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def generate(self, prompt_raw: str, options: GenerationOptions) -> GenerationSnapshot:
        """Run one generation and return the resulting snapshot.

        The raw prompt is composed with the option suffixes first and the
        composed prompt is validated, so an empty raw prompt proceeds with
        the default filler prompt.

        A call made while another generation is in flight is refused and
        leaves the state untouched.

        Args:
            prompt_raw: Base prompt as typed by the user
            options: Selected options, including reference images

        Returns:
            The snapshot after the attempt (also kept in ``self.state``)
        """
        if self._active is not None:
            logger.warning("Generation already in progress; ignoring new request")
            return self.state

        # Claimed before the first await.
        self._token += 1
        token = self._token
        self._active = token
        try:
            return await self._run(token, prompt_raw, options)
        finally:
            if self._active == token:
                self._active = None

    @property
    def is_busy(self) -> bool:
        """True while a generation holds the slot, including its precondition checks."""
        return self._active is not None

    async def retry_last(self) -> GenerationSnapshot:
        """Re-run the last attempt; no-op when nothing has been attempted."""
        if self.last_attempt is None:
            logger.debug("Nothing to retry")
            return self.state
        return await self.generate(self.last_attempt.prompt, self.last_attempt.options)

    def abandon(self) -> None:
        """Stop tracking any in-flight generation and return to idle."""
        self._token += 1
        self._active = None
        if self.state.is_generating:
            logger.info("Abandoning in-flight generation")
        self.state = GenerationSnapshot()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _run(
        self, token: int, prompt_raw: str, options: GenerationOptions
    ) -> GenerationSnapshot:
        final_prompt = build_final_prompt(prompt_raw, options)

        # --- Validation (no network activity) ---------------------------
        prompt_error = validate_prompt(final_prompt)
        if prompt_error:
            message = get_user_friendly_message(prompt_error)
            logger.warning(f"Validation error: {message}")
            self._set_failed(message, retryable=False)
            self.notify("Validation Error", message, ERROR)
            return self.state

        # --- Connectivity precondition ---------------------------------
        online = await self.connectivity()
        if token != self._token:
            logger.info(f"Generation {token} abandoned during connectivity check")
            return self.state
        if not online:
            logger.warning("Offline; generation not attempted")
            self._set_failed(OFFLINE_MESSAGE, retryable=True)
            self.notify("Network Error", OFFLINE_MESSAGE, ERROR)
            return self.state

        # --- Start -----------------------------------------------------
        self.state = GenerationSnapshot(status=GenerationStatus.GENERATING)
        self.last_attempt = LastAttempt(prompt=prompt_raw, options=options)
        logger.info(
            f"Generation {token} started ({len(final_prompt)} chars, "
            f"{len(options.reference_images)} reference image(s))"
        )

        try:
            encoded = await self._encode_references(options.reference_images)
            payload = options.to_payload(encoded)

            result = await retry_with_backoff(
                lambda: self._call_relay(final_prompt, payload),
                self.max_attempts,
                self.initial_delay_ms,
                sleep=self.sleep,
                retry_if=_is_retryable,
            )

            image_url = result.get("imageUrl") if result else None
            if not image_url:
                raise create_error(
                    ErrorKind.GENERATION,
                    "No image was generated",
                    "The API returned an empty response",
                )
        except AppError as e:
            logger.error(f"Image generation error: {e!r}")
            return self._finish_failed(token, get_user_friendly_message(e), e.retryable)
        except Exception as e:
            logger.error(f"Image generation error: {e}", exc_info=True)
            return self._finish_failed(token, str(e) or FALLBACK_MESSAGE, False)

        if token != self._token:
            logger.info(f"Discarding stale result of generation {token}")
            return self.state

        self.state = GenerationSnapshot(status=GenerationStatus.SUCCEEDED, image_url=image_url)
        logger.info(f"Generation {token} succeeded")
        self.notify("Image Generated!", "Your AI-generated image is ready.", INFO)
        return self.state

    async def _encode_references(self, images: list[ReferenceImage]) -> list[str]:
        """Encode reference images one at a time, preserving order."""
        encoded: list[str] = []
        for image in images:
            try:
                encoded.append(await asyncio.to_thread(self.encoder, image.path))
            except Exception as e:
                logger.error(f"Error converting {image.name} to base64: {e}")
                raise create_error(
                    ErrorKind.FILE, "Failed to process reference image", str(e)
                ) from e
        return encoded

    async def _call_relay(self, prompt: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            return await self.relay.generate_image(prompt, payload)
        except RelayError as e:
            raise classify_relay_error(e.message, e.code) from e
        except httpx.TimeoutException as e:
            raise create_error(
                ErrorKind.NETWORK, "Request timed out", str(e), NETWORK_TIMEOUT
            ) from e
        except httpx.TransportError as e:
            raise create_error(ErrorKind.NETWORK, "Could not reach the relay", str(e)) from e

    def _set_failed(self, message: str, retryable: bool) -> None:
        self.state = GenerationSnapshot(
            status=GenerationStatus.FAILED,
            error_message=message,
            retryable=retryable,
        )

    def _finish_failed(self, token: int, message: str, retryable: bool) -> GenerationSnapshot:
        if token != self._token:
            logger.info(f"Discarding stale failure of generation {token}")
            return self.state
        self._set_failed(message, retryable)
        self.notify("Generation Failed", message, ERROR)
        return self.state
