"""Pydantic request and response models for the relay.

The prompt itself is validated by hand in the route so that violations can
be reported with the relay's own error body and a 400 status; these models
cover the option record and the response shapes.

Models
------
RelayOptions
    The closed ``options`` object of ``POST /api/generate-image``.
GenerateImageResponse
    Success body: ``{"imageUrl": ...}``.
ErrorResponse
    Error body: ``{"error": ..., "code": ..., "timestamp": ...}``.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator

from promptcraft.core.config import MAX_REFERENCE_IMAGES
from promptcraft.core.encoding import strip_data_url_header
from promptcraft.core.models import (
    ASPECT_RATIOS,
    COMPOSITIONS,
    DEFAULT_ASPECT_RATIO,
    LIGHTINGS,
    NO_OPTION,
    STYLES,
)


def _check_choice(value: str, choices, label: str) -> str:
    if value not in choices:
        raise ValueError(f"{label} must be one of: {', '.join(choices)}")
    return value


class RelayOptions(BaseModel):
    """Options accepted by the relay.

    Unknown keys are rejected.  Every enumerated field defaults to its
    neutral value, so ``{}`` is a valid options object.

    Attributes:
        reference_images: Base64 payloads (data-URL headers are stripped),
            at most MAX_REFERENCE_IMAGES, in upload order.
        style: Style preset or "None".
        composition: Composition preset or "None".
        lighting: Lighting preset or "None".
        aspect_ratio: Aspect ratio preset.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    reference_images: list[str] = Field(
        default_factory=list,
        alias="referenceImages",
        max_length=MAX_REFERENCE_IMAGES,
        description="Base64-encoded reference images without data-URL header.",
    )
    style: str = Field(default=NO_OPTION, description="Style preset.")
    composition: str = Field(default=NO_OPTION, description="Composition preset.")
    lighting: str = Field(default=NO_OPTION, description="Lighting preset.")
    aspect_ratio: str = Field(
        default=DEFAULT_ASPECT_RATIO,
        alias="aspectRatio",
        description="Aspect ratio preset.",
    )

    @field_validator("reference_images")
    @classmethod
    def _strip_headers(cls, value: list[str]) -> list[str]:
        cleaned = [strip_data_url_header(item) for item in value]
        if any(not item for item in cleaned):
            raise ValueError("referenceImages entries must be non-empty base64 strings")
        return cleaned

    @field_validator("style")
    @classmethod
    def _check_style(cls, value: str) -> str:
        return _check_choice(value, STYLES, "style")

    @field_validator("composition")
    @classmethod
    def _check_composition(cls, value: str) -> str:
        return _check_choice(value, COMPOSITIONS, "composition")

    @field_validator("lighting")
    @classmethod
    def _check_lighting(cls, value: str) -> str:
        return _check_choice(value, LIGHTINGS, "lighting")

    @field_validator("aspect_ratio")
    @classmethod
    def _check_aspect_ratio(cls, value: str) -> str:
        return _check_choice(value, tuple(ASPECT_RATIOS), "aspectRatio")


class GenerateImageResponse(BaseModel):
    """Success body of ``POST /api/generate-image``."""

    model_config = ConfigDict(populate_by_name=True)

    image_url: str = Field(
        ...,
        alias="imageUrl",
        description="data:image/png;base64 URI of the generated image.",
    )


class ErrorResponse(BaseModel):
    """Error body returned for every failed relay request.

    Attributes:
        error: Human-readable message.
        code: Taxonomy code, when known.
        timestamp: ISO-8601 time at which the error was produced.
    """

    error: str
    code: str | None = None
    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
    )
