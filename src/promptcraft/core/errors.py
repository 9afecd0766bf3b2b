"""Error taxonomy shared by the relay and the Gradio client.

Every failure that reaches a user is expressed as an :class:`AppError` with
one of six kinds.  Kinds decide retryability and the generic fallback
message; the optional machine-readable ``code`` selects a more precise
message when one is known.

Classification of upstream failures lives here too (:func:`classify_failure`)
so that the relay and the client agree on what "quota", "rate limit" and
"bad key" mean.  Structured codes always win over message heuristics.
"""

from __future__ import annotations

import logging
import re
from enum import Enum

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    """Kinds of failure surfaced to the user."""

    NETWORK = "network"
    VALIDATION = "validation"
    API = "api"
    FILE = "file"
    GENERATION = "generation"
    UNKNOWN = "unknown"


RETRYABLE_KINDS = frozenset({ErrorKind.NETWORK, ErrorKind.API})

# Taxonomy codes
FILE_TOO_LARGE = "FILE_TOO_LARGE"
INVALID_FILE_TYPE = "INVALID_FILE_TYPE"
NETWORK_TIMEOUT = "NETWORK_TIMEOUT"
RATE_LIMITED = "RATE_LIMITED"
OPENAI_API_KEY_MISSING = "OPENAI_API_KEY_MISSING"
OPENAI_API_KEY_INVALID = "OPENAI_API_KEY_INVALID"
QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
TIMEOUT = "TIMEOUT"
VALIDATION_ERROR = "VALIDATION_ERROR"
INVALID_REQUEST_FORMAT = "INVALID_REQUEST_FORMAT"
UNKNOWN_ERROR = "UNKNOWN_ERROR"

# Relay codes for upstream failures outside the shared failure classes
NO_IMAGE_GENERATED = "NO_IMAGE_GENERATED"
INVALID_IMAGE_DATA = "INVALID_IMAGE_DATA"
UPSTREAM_BAD_REQUEST = "UPSTREAM_BAD_REQUEST"
UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"
UPSTREAM_OVERLOADED = "UPSTREAM_OVERLOADED"
UPSTREAM_ERROR = "UPSTREAM_ERROR"

_KIND_MESSAGES = {
    ErrorKind.NETWORK: (
        "Network connection issue. Please check your internet connection and try again."
    ),
    ErrorKind.UNKNOWN: "An unexpected error occurred. Please try again.",
}

_CODE_MESSAGES = {
    FILE_TOO_LARGE: "File size is too large. Please use files under 5MB.",
    INVALID_FILE_TYPE: "Invalid file type. Please use PNG, JPG, or WebP images.",
    NETWORK_TIMEOUT: "Request timed out. Please try again.",
    RATE_LIMITED: "Too many requests. Please wait a moment and try again.",
    OPENAI_API_KEY_MISSING: "OpenAI API key is not configured. Please contact support.",
    QUOTA_EXCEEDED: "API quota exceeded. Please try again later.",
}


class AppError(Exception):
    """A classified, user-facing failure.

    Instances are built once at the failure site (normally through
    :func:`create_error`) and are raised and caught like any other exception.

    Attributes:
        kind: Failure kind
        message: Short description of what went wrong
        details: Optional extra context (sizes, upstream text, ...)
        code: Optional taxonomy code
        retryable: True for network and api failures
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        details: str | None = None,
        code: str | None = None,
    ):
        super().__init__(message)
        self.kind = ErrorKind(kind)
        self.message = message
        self.details = details
        self.code = code
        self.retryable = self.kind in RETRYABLE_KINDS

    def __repr__(self) -> str:
        return (
            f"AppError(kind={self.kind.value!r}, message={self.message!r}, "
            f"code={self.code!r}, retryable={self.retryable})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AppError):
            return NotImplemented
        return (self.kind, self.message, self.details, self.code) == (
            other.kind,
            other.message,
            other.details,
            other.code,
        )

    __hash__ = Exception.__hash__


def create_error(
    kind: ErrorKind | str,
    message: str,
    details: str | None = None,
    code: str | None = None,
) -> AppError:
    """Build an :class:`AppError`; ``retryable`` follows from ``kind``."""
    return AppError(ErrorKind(kind), message, details=details, code=code)


def get_error_message(error: AppError) -> str:
    """Return the generic, kind-keyed message for ``error``."""
    if error.kind == ErrorKind.VALIDATION:
        return error.message
    if error.kind == ErrorKind.API:
        return f"API Error: {error.message}"
    if error.kind == ErrorKind.FILE:
        return f"File Error: {error.message}"
    if error.kind == ErrorKind.GENERATION:
        return f"Generation Error: {error.message}"
    return _KIND_MESSAGES.get(error.kind, _KIND_MESSAGES[ErrorKind.UNKNOWN])


def get_user_friendly_message(error: AppError) -> str:
    """Return the most precise message available for ``error``.

    The code-keyed table takes precedence; unknown or missing codes fall
    back to :func:`get_error_message`.
    """
    if error.code and error.code in _CODE_MESSAGES:
        return _CODE_MESSAGES[error.code]
    return get_error_message(error)


# Structured codes that already identify a failure class, as sent by the
# relay or found in an upstream error body.
_STRUCTURED_CODES = {
    QUOTA_EXCEEDED: QUOTA_EXCEEDED,
    "insufficient_quota": QUOTA_EXCEEDED,
    RATE_LIMITED: RATE_LIMITED,
    "rate_limit_exceeded": RATE_LIMITED,
    OPENAI_API_KEY_MISSING: OPENAI_API_KEY_MISSING,
    OPENAI_API_KEY_INVALID: OPENAI_API_KEY_INVALID,
    "invalid_api_key": OPENAI_API_KEY_INVALID,
    TIMEOUT: TIMEOUT,
    NETWORK_TIMEOUT: TIMEOUT,
}

# Codes the relay emits that carry no shared failure class.  They are
# recognised, so the message heuristics never run for them.
_UNCLASSIFIED_CODES = frozenset(
    {
        VALIDATION_ERROR,
        INVALID_REQUEST_FORMAT,
        UNKNOWN_ERROR,
        NO_IMAGE_GENERATED,
        INVALID_IMAGE_DATA,
        UPSTREAM_BAD_REQUEST,
        UPSTREAM_UNAVAILABLE,
        UPSTREAM_OVERLOADED,
        UPSTREAM_ERROR,
    }
)

# Whole-word markers; underscores count as separators so upstream codes such
# as "insufficient_quota" still match.  Order matters: "quota" messages often
# also mention rates.
_MESSAGE_MARKERS = (
    (re.compile(r"(?<![a-z])quota(?![a-z])"), QUOTA_EXCEEDED),
    (re.compile(r"(?<![a-z])rate(?![a-z])"), RATE_LIMITED),
    (re.compile(r"(?<![a-z])key(?![a-z])"), OPENAI_API_KEY_INVALID),
    (re.compile(r"(?<![a-z])(?:timeout|timed out)(?![a-z])"), TIMEOUT),
)


def is_recognised_code(code: str | None) -> bool:
    """True when ``code`` is one the relay or upstream is known to send."""
    return bool(code) and (code in _STRUCTURED_CODES or code in _UNCLASSIFIED_CODES)


def classify_failure(message: str | None, code: str | None = None) -> str | None:
    """Map a failure to one of the shared failure codes.

    Args:
        message: Human-readable failure text, used only when ``code`` is
            missing or unrecognised
        code: Structured code from the relay or upstream, if any

    Returns:
        One of ``QUOTA_EXCEEDED``, ``RATE_LIMITED``, ``OPENAI_API_KEY_MISSING``,
        ``OPENAI_API_KEY_INVALID`` or ``TIMEOUT``, or None when the failure is
        not in any of those classes.
    """
    if is_recognised_code(code):
        return _STRUCTURED_CODES.get(code)

    text = (message or "").lower()
    for marker, classified in _MESSAGE_MARKERS:
        if marker.search(text):
            logger.debug(f"Classified failure by message marker '{marker.pattern}': {classified}")
            return classified
    return None
