"""Image generation and retry handlers.

Both handlers are async generators: the first yield disables the Generate
button and shows a progress message, the second renders the outcome.
"""

import logging
from collections.abc import AsyncIterator
from typing import Any

import gradio as gr
import httpx

from promptcraft.core.config import config
from promptcraft.core.encoding import save_image
from promptcraft.core.models import GenerationOptions

from ..models import GenerationSnapshot, GenerationStatus, UIState
from ..state import initialize_ui_state

logger = logging.getLogger(__name__)

# (image, status, generate_button, retry_button, download_button, state)
GenerationOutputs = tuple[Any, str, dict[str, Any], dict[str, Any], dict[str, Any], UIState]

LOGIN_REQUIRED = "🔑 Please log in with your OpenAI API key to generate images."
GENERATING = "⏳ **Generating image...** This can take up to a minute."


def _busy(state: UIState) -> GenerationOutputs:
    return (
        gr.update(),
        GENERATING,
        gr.update(interactive=False, value="Generating..."),
        gr.update(visible=False),
        gr.update(),
        state,
    )


def _unchanged(state: UIState) -> GenerationOutputs:
    return (gr.update(), gr.update(), gr.update(), gr.update(), gr.update(), state)


def _idle(
    state: UIState, image: Any, status: str, retryable: bool = False
) -> GenerationOutputs:
    download = (
        gr.update(value=state.image_path, visible=True)
        if state.image_path
        else gr.update(visible=False)
    )
    return (
        image,
        status,
        gr.update(interactive=True, value="Generate Image"),
        gr.update(visible=retryable),
        download,
        state,
    )


def render_snapshot(snapshot: GenerationSnapshot, state: UIState) -> GenerationOutputs:
    """Turn an orchestrator snapshot into UI updates.

    A successful result is written to the outputs directory so that it can
    be displayed and downloaded.
    """
    if snapshot.status == GenerationStatus.SUCCEEDED and snapshot.image_url:
        try:
            path = save_image(snapshot.image_url, config.outputs_dir)
        except (ValueError, OSError, httpx.HTTPError) as e:
            logger.error(f"Failed to save generated image: {e}", exc_info=True)
            state.image_path = None
            return _idle(state, None, f"❌ **Could not save image:** {e}", retryable=True)
        state.image_path = str(path)
        return _idle(state, state.image_path, f"✅ **Image generated!** Saved to `{path}`")

    if snapshot.status == GenerationStatus.FAILED:
        message = snapshot.error_message or "Failed to generate image. Please try again."
        return _idle(state, gr.update(), f"❌ {message}", retryable=snapshot.retryable)

    # Another generation owns the display until it finishes
    if snapshot.status == GenerationStatus.GENERATING:
        return _unchanged(state)

    # Abandoned
    return _idle(state, gr.update(), "")


async def generate_image(
    prompt: str,
    style: str,
    composition: str,
    lighting: str,
    aspect_ratio: str,
    state: UIState,
) -> AsyncIterator[GenerationOutputs]:
    """Generate an image from the prompt builder inputs.

    Args:
        prompt: Base prompt text
        style: Style preset
        composition: Composition preset
        lighting: Lighting preset
        aspect_ratio: Aspect ratio key
        state: UI state

    Yields:
        Tuples of (image, status, generate_button, retry_button,
        download_button, updated_state)
    """
    state = initialize_ui_state(state)
    if state.orchestrator is None:
        yield _idle(state, gr.update(), LOGIN_REQUIRED)
        return

    try:
        options = GenerationOptions(
            style=style,
            composition=composition,
            lighting=lighting,
            aspect_ratio=aspect_ratio,
            reference_images=list(state.reference_images),
        )
    except ValueError as e:
        logger.warning(f"Invalid generation options: {e}")
        yield _idle(state, gr.update(), f"❌ **Invalid options:** {e}")
        return

    if state.orchestrator.is_busy:
        logger.info("Generation already in progress; leaving the display as is")
        yield _unchanged(state)
        return

    state.image_path = None
    yield _busy(state)
    if state.orchestrator.is_busy:
        yield _unchanged(state)
        return

    snapshot = await state.orchestrator.generate(prompt, options)
    yield render_snapshot(snapshot, state)


async def retry_generation(state: UIState) -> AsyncIterator[GenerationOutputs]:
    """Re-run the last generation attempt.

    Yields:
        Same tuples as :func:`generate_image`
    """
    state = initialize_ui_state(state)
    if state.orchestrator is None:
        yield _idle(state, gr.update(), LOGIN_REQUIRED)
        return

    if state.orchestrator.is_busy:
        logger.info("Generation already in progress; leaving the display as is")
        yield _unchanged(state)
        return

    if state.orchestrator.last_attempt is None:
        yield _idle(state, gr.update(), "Nothing to retry yet.")
        return

    state.image_path = None
    yield _busy(state)
    if state.orchestrator.is_busy:
        yield _unchanged(state)
        return

    snapshot = await state.orchestrator.retry_last()
    yield render_snapshot(snapshot, state)
