"""State management utilities for the Promptcraft UI.

This module handles the initialization and teardown of per-session UI state:
the session credential and the generation orchestrator bound to it.
"""

import logging
from functools import partial

import gradio as gr

from promptcraft.core.config import config

from .models import UIState
from .network import is_online
from .orchestrator import INFO, GenerationOrchestrator
from .relay_client import RelayClient

logger = logging.getLogger(__name__)


def notify(title: str, message: str, level: str) -> None:
    """Show an orchestrator notification as a Gradio toast."""
    text = f"{title}: {message}"
    if level == INFO:
        gr.Info(text)
    else:
        gr.Warning(text)


def create_orchestrator(credential: str | None) -> GenerationOrchestrator:
    """Build an orchestrator talking to the configured relay.

    Args:
        credential: Session credential forwarded to the relay

    Returns:
        New GenerationOrchestrator in the idle state
    """
    relay = RelayClient(
        config.relay_url,
        timeout=config.relay_timeout_seconds,
        credential=credential,
    )
    connectivity = partial(
        is_online, config.relay_url, timeout=config.connectivity_timeout_seconds
    )
    return GenerationOrchestrator(
        relay,
        connectivity,
        notify=notify,
        max_attempts=config.retry_max_attempts,
        initial_delay_ms=config.retry_initial_delay_ms,
    )


def initialize_ui_state(state: UIState | None = None) -> UIState:
    """Initialize or ensure UI state is ready.

    The orchestrator is created lazily, and only once the session holds a
    credential.

    Args:
        state: Existing UIState or None

    Returns:
        UIState instance (initialized when the session is authenticated)
    """
    if state is None:
        logger.info("Creating new UIState")
        state = UIState()

    if state.is_initialized():
        logger.debug("UIState already initialized")
        return state

    if not state.session.is_authenticated:
        logger.debug("Session not authenticated; orchestrator not created")
        return state

    logger.info("Initializing GenerationOrchestrator")
    state.orchestrator = create_orchestrator(state.session.credential)
    logger.info(f"UIState initialization complete: {state}")
    return state


def reset_ui_state(state: UIState) -> UIState:
    """Log out and drop everything tied to the session.

    Any in-flight generation is abandoned so its late result is discarded.
    """
    if state.orchestrator is not None:
        state.orchestrator.abandon()
        state.orchestrator = None

    state.session.logout()
    state.reference_images = []
    state.image_path = None
    logger.info(f"UIState reset: {state}")
    return state
