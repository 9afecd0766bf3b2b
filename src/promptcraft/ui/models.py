"""Data models for Promptcraft UI state and session."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from promptcraft.core.errors import ErrorKind, create_error
from promptcraft.core.models import GenerationOptions, ReferenceImage

logger = logging.getLogger(__name__)


class GenerationStatus(str, Enum):
    """Lifecycle of one generation attempt."""

    IDLE = "idle"
    GENERATING = "generating"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class Session:
    """Per-user session holding the opaque API credential.

    The credential is set by :meth:`login`, read-only afterwards, and
    dropped by :meth:`logout`.  Nothing is persisted.
    """

    _credential: str | None = None

    @property
    def credential(self) -> str | None:
        """The captured credential, or None when logged out."""
        return self._credential

    @property
    def is_authenticated(self) -> bool:
        return self._credential is not None

    def login(self, credential: str) -> None:
        """Capture the credential for this session.

        Raises:
            AppError: (validation) if the credential is blank
        """
        if not credential or not credential.strip():
            raise create_error(ErrorKind.VALIDATION, "Please enter your OpenAI API key to continue.")
        self._credential = credential.strip()
        logger.info("Session credential captured")

    def logout(self) -> None:
        """Discard the credential."""
        self._credential = None
        logger.info("Session credential cleared")

    def __repr__(self) -> str:
        # Never leak the credential into logs.
        return f"Session(authenticated={self.is_authenticated})"


@dataclass
class LastAttempt:
    """Arguments of the most recent generation, kept for retry."""

    prompt: str
    options: GenerationOptions


@dataclass
class GenerationSnapshot:
    """Orchestrator state as seen by the UI.

    Attributes
    ----------
    status : GenerationStatus
        Current lifecycle state
    image_url : str | None
        Result of the last successful generation
    error_message : str | None
        User-facing message of the last failure
    retryable : bool
        Whether the last failure offers a manual retry
    """

    status: GenerationStatus = GenerationStatus.IDLE
    image_url: str | None = None
    error_message: str | None = None
    retryable: bool = False

    @property
    def is_generating(self) -> bool:
        return self.status == GenerationStatus.GENERATING


@dataclass
class UIState:
    """Session state for the Gradio UI.

    Each browser session gets its own copy through ``gr.State``.

    Attributes
    ----------
    session : Session
        Credential holder for this user
    orchestrator : Any | None
        GenerationOrchestrator instance, created lazily
    reference_images : list[ReferenceImage]
        Accepted reference images, in upload order (at most 5)
    image_path : str | None
        Local PNG of the last generated image (display and download)
    """

    session: Session = field(default_factory=Session)
    orchestrator: Any | None = None  # GenerationOrchestrator instance
    reference_images: list[ReferenceImage] = field(default_factory=list)
    image_path: str | None = None

    def is_initialized(self) -> bool:
        return self.orchestrator is not None

    def __repr__(self) -> str:
        return (
            f"UIState(initialized={self.is_initialized()}, "
            f"authenticated={self.session.is_authenticated}, "
            f"references={len(self.reference_images)})"
        )
