"""Input validators for prompts and reference images.

All validators are pure: they return an :class:`~promptcraft.core.errors.AppError`
describing the first violation, or None when the input is acceptable.
"""

import logging

from .config import ALLOWED_IMAGE_TYPES, MAX_FILE_SIZE_BYTES, MAX_PROMPT_LENGTH, MAX_REFERENCE_IMAGES
from .errors import (
    FILE_TOO_LARGE,
    INVALID_FILE_TYPE,
    AppError,
    ErrorKind,
    create_error,
    get_user_friendly_message,
)
from .models import ReferenceImage

logger = logging.getLogger(__name__)


def validate_prompt(text: str) -> AppError | None:
    """Validate prompt text.

    Args:
        text: Prompt to check

    Returns:
        A validation error when the prompt is blank or longer than
        MAX_PROMPT_LENGTH characters, otherwise None
    """
    if not text or not text.strip():
        return create_error(ErrorKind.VALIDATION, "Prompt cannot be empty")

    if len(text) > MAX_PROMPT_LENGTH:
        return create_error(
            ErrorKind.VALIDATION,
            f"Prompt is too long ({len(text)} characters). "
            f"Maximum is {MAX_PROMPT_LENGTH} characters.",
            details=f"Length: {len(text)}/{MAX_PROMPT_LENGTH} characters",
        )

    return None


def validate_file(file: ReferenceImage) -> AppError | None:
    """Validate a reference image's size and type.

    Size is checked first, so a file that is both too large and of the wrong
    type always reports FILE_TOO_LARGE.

    Args:
        file: Reference image to check

    Returns:
        A file error with code FILE_TOO_LARGE or INVALID_FILE_TYPE, or None
    """
    if file.size > MAX_FILE_SIZE_BYTES:
        return create_error(
            ErrorKind.FILE,
            "File too large",
            details=f"File size: {file.size / 1024 / 1024:.2f}MB",
            code=FILE_TOO_LARGE,
        )

    if file.mime_type not in ALLOWED_IMAGE_TYPES:
        return create_error(
            ErrorKind.FILE,
            "Invalid file type",
            details=f"File type: {file.mime_type}",
            code=INVALID_FILE_TYPE,
        )

    return None


def validate_reference_images(
    files: list[ReferenceImage], existing: int = 0
) -> tuple[list[ReferenceImage], list[str]]:
    """Validate a batch of uploads independently of each other.

    Args:
        files: Newly uploaded files, in upload order
        existing: Number of reference images already attached

    Returns:
        Tuple of (accepted files, per-file error messages). Accepted files
        keep upload order and are capped so that ``existing + len(accepted)``
        never exceeds MAX_REFERENCE_IMAGES.
    """
    accepted: list[ReferenceImage] = []
    errors: list[str] = []

    for file in files:
        error = validate_file(file)
        if error:
            logger.info(f"Rejected reference image {file.name}: {error.code}")
            errors.append(f"{file.name}: {get_user_friendly_message(error)}")
        else:
            accepted.append(file)

    room = max(MAX_REFERENCE_IMAGES - existing, 0)
    if len(accepted) > room:
        logger.info(f"Dropping {len(accepted) - room} reference image(s) over the limit")
        accepted = accepted[:room]

    return accepted, errors
