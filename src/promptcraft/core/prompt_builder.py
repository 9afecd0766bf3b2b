"""Final prompt composition for the prompt builder.

The final prompt is the user's base prompt followed by one suffix per
selected option::

    <base prompt>, <Style> style, <Composition> composition, <Lighting> lighting

Options left at "None" add nothing.  When both the base prompt and every
option are empty the default filler prompt is used instead, so the composed
prompt is never blank.

Usage
-----
::

    compiled = build_final_prompt(
        "a cat",
        GenerationOptions(style="Photorealistic"),
    )
    # "a cat, Photorealistic style"
"""

from __future__ import annotations

from .config import DEFAULT_PROMPT
from .models import NO_OPTION, GenerationOptions


def build_final_prompt(prompt: str, options: GenerationOptions) -> str:
    """Compose the prompt sent to the relay.

    Args:
        prompt: Base prompt as typed by the user (may be empty).
        options: Selected generation options.

    Returns:
        The composed prompt, or DEFAULT_PROMPT when nothing was supplied.
    """
    final_prompt = (prompt or "").strip()

    # Each suffix is appended even if the base prompt is empty, matching what
    # the live preview shows.
    if options.style != NO_OPTION:
        final_prompt += f", {options.style} style"
    if options.composition != NO_OPTION:
        final_prompt += f", {options.composition} composition"
    if options.lighting != NO_OPTION:
        final_prompt += f", {options.lighting} lighting"

    return final_prompt or DEFAULT_PROMPT
