"""Prompt preview handler."""

import logging

from promptcraft.core.models import GenerationOptions
from promptcraft.core.prompt_builder import build_final_prompt

logger = logging.getLogger(__name__)


def update_prompt_preview(prompt: str, style: str, composition: str, lighting: str) -> str:
    """Return the final prompt exactly as it will be sent.

    Args:
        prompt: Base prompt text
        style: Selected style preset
        composition: Selected composition preset
        lighting: Selected lighting preset

    Returns:
        Composed prompt for the "Final Prompt Preview" box
    """
    try:
        options = GenerationOptions(style=style, composition=composition, lighting=lighting)
    except ValueError as e:
        logger.warning(f"Preview with invalid options: {e}")
        return prompt or ""
    return build_final_prompt(prompt, options)
