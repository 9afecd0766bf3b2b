"""Core functionality shared by the relay and the UI.

- **config**: Pydantic Settings configuration and input limits
- **errors**: Error taxonomy, user-facing messages and failure classification
- **validation**: Prompt and reference-image validators
- **retry**: Exponential backoff helper
- **prompt_builder**: Final prompt composition from builder options
- **encoding**: Base64 and image file helpers
- **models**: Generation options and reference image records

Usage Example
-------------
    from promptcraft.core import build_final_prompt, validate_prompt
    from promptcraft.core.models import GenerationOptions

    prompt = build_final_prompt("a cat", GenerationOptions(style="Watercolor"))
    error = validate_prompt(prompt)
"""

from promptcraft.core.config import PromptcraftConfig, config
from promptcraft.core.errors import (
    AppError,
    ErrorKind,
    classify_failure,
    create_error,
    get_error_message,
    get_user_friendly_message,
)
from promptcraft.core.prompt_builder import build_final_prompt
from promptcraft.core.retry import retry_with_backoff
from promptcraft.core.validation import validate_file, validate_prompt

__all__ = [
    "AppError",
    "ErrorKind",
    "PromptcraftConfig",
    "build_final_prompt",
    "classify_failure",
    "config",
    "create_error",
    "get_error_message",
    "get_user_friendly_message",
    "retry_with_backoff",
    "validate_file",
    "validate_prompt",
]
