"""Login and logout handlers."""

import logging
from typing import Any

import gradio as gr

from promptcraft.core.errors import AppError, get_user_friendly_message

from ..models import UIState
from ..state import initialize_ui_state, reset_ui_state

logger = logging.getLogger(__name__)


def login(api_key: str, state: UIState) -> tuple[str, dict[str, Any], dict[str, Any], str, UIState]:
    """Capture the credential and reveal the generator.

    Args:
        api_key: Value of the password field
        state: UI state

    Returns:
        Tuple of (login_status, login_panel_update, main_panel_update,
        cleared_key_field, updated_state)
    """
    try:
        state.session.login(api_key)
    except AppError as e:
        return (
            f"❌ {get_user_friendly_message(e)}",
            gr.update(visible=True),
            gr.update(visible=False),
            "",
            state,
        )

    state = initialize_ui_state(state)
    return "", gr.update(visible=False), gr.update(visible=True), "", state


def logout(state: UIState) -> tuple[str, dict[str, Any], dict[str, Any], Any, str, dict[str, Any], UIState]:
    """Forget the credential and any in-flight generation.

    Returns:
        Tuple of (login_status, login_panel_update, main_panel_update,
        image_update, generation_status, download_update, updated_state)
    """
    state = reset_ui_state(state)
    return (
        "Logged out.",
        gr.update(visible=True),
        gr.update(visible=False),
        None,
        "",
        gr.update(value=None, visible=False),
        state,
    )
