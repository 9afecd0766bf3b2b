"""UI event handlers organized by feature area.

- generation: Generate and retry (async generators)
- prompt: Live final-prompt preview
- references: Reference image upload and clearing
- session: Login and logout
"""

from .generation import generate_image, render_snapshot, retry_generation
from .prompt import update_prompt_preview
from .references import add_reference_images, clear_reference_images
from .session import login, logout

__all__ = [
    # Generation handlers
    "generate_image",
    "render_snapshot",
    "retry_generation",
    # Prompt handlers
    "update_prompt_preview",
    # Reference handlers
    "add_reference_images",
    "clear_reference_images",
    # Session handlers
    "login",
    "logout",
]
