"""Reference image upload handlers."""

import logging
from typing import Any

import gradio as gr

from promptcraft.core.config import MAX_REFERENCE_IMAGES
from promptcraft.core.encoding import load_reference_image
from promptcraft.core.validation import validate_reference_images

from ..models import UIState

logger = logging.getLogger(__name__)


def _format_errors(errors: list[str]) -> str:
    if not errors:
        return ""
    lines = "\n".join(f"- {error}" for error in errors)
    return f"❌ **Some files were rejected**\n\n{lines}"


def _gallery_value(state: UIState) -> list[str]:
    return [image.path for image in state.reference_images]


def add_reference_images(
    files: list[str] | None, state: UIState
) -> tuple[dict[str, Any], str, None, UIState]:
    """Validate uploaded files and attach the accepted ones.

    Each file is checked on its own; a rejected file does not block the
    others. Accepted files are appended in upload order until the limit of
    MAX_REFERENCE_IMAGES is reached.

    Args:
        files: Paths of the uploaded files
        state: UI state

    Returns:
        Tuple of (gallery_update, errors_markdown, cleared_upload, updated_state)
    """
    if not files:
        return gr.update(value=_gallery_value(state)), "", None, state

    candidates = []
    errors = []
    for path in files:
        try:
            candidates.append(load_reference_image(path))
        except OSError as e:
            logger.error(f"Could not read uploaded file {path}: {e}")
            errors.append(f"{path}: File Error: Could not read file")

    accepted, rejected = validate_reference_images(candidates, len(state.reference_images))
    errors.extend(rejected)

    dropped = len(candidates) - len(rejected) - len(accepted)
    if dropped:
        errors.append(
            f"{dropped} file(s) ignored: at most {MAX_REFERENCE_IMAGES} reference images"
        )

    state.reference_images = state.reference_images + accepted
    logger.info(f"Reference images attached: {len(state.reference_images)}")

    return gr.update(value=_gallery_value(state)), _format_errors(errors), None, state


def clear_reference_images(state: UIState) -> tuple[dict[str, Any], str, UIState]:
    """Remove all attached reference images.

    Returns:
        Tuple of (gallery_update, errors_markdown, updated_state)
    """
    state.reference_images = []
    logger.info("Reference images cleared")
    return gr.update(value=[]), "", state
