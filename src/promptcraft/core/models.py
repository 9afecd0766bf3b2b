"""Data models shared by the relay and the UI."""

from dataclasses import dataclass, field

# Option presets offered by the prompt builder. "None" means "do not add a
# suffix for this option".
NO_OPTION = "None"

STYLES = (
    NO_OPTION,
    "Photorealistic",
    "Flat Illustration",
    "Whimsical 3D",
    "Watercolor",
    "Low Poly",
)

COMPOSITIONS = (
    NO_OPTION,
    "Rule of Thirds",
    "Center Composition",
    "Dynamic Angle",
    "Close-up",
    "Wide Shot",
    "Birds Eye View",
    "Low Angle",
)

LIGHTINGS = (
    NO_OPTION,
    "Golden Hour",
    "Cinematic",
    "Soft",
    "Natural",
    "Backlit",
)

ASPECT_RATIOS = {
    "1:1": "Square",
    "3:4": "Portrait",
    "4:3": "Landscape",
}

DEFAULT_ASPECT_RATIO = "1:1"


@dataclass(frozen=True)
class ReferenceImage:
    """An uploaded reference image.

    ``mime_type`` is None when the file could not be identified as an image.
    """

    path: str
    name: str
    mime_type: str | None
    size: int


@dataclass
class GenerationOptions:
    """Closed set of generation options selected in the prompt builder.

    Each enumerated field is validated against its preset list on
    construction, so an unknown value never reaches the relay.
    """

    style: str = NO_OPTION
    composition: str = NO_OPTION
    lighting: str = NO_OPTION
    aspect_ratio: str = DEFAULT_ASPECT_RATIO
    reference_images: list[ReferenceImage] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.style not in STYLES:
            raise ValueError(f"Unknown style: {self.style}")
        if self.composition not in COMPOSITIONS:
            raise ValueError(f"Unknown composition: {self.composition}")
        if self.lighting not in LIGHTINGS:
            raise ValueError(f"Unknown lighting: {self.lighting}")
        if self.aspect_ratio not in ASPECT_RATIOS:
            raise ValueError(f"Unknown aspect ratio: {self.aspect_ratio}")

    def to_payload(self, encoded_images: list[str]) -> dict:
        """Return the relay ``options`` object with already-encoded images."""
        return {
            "style": self.style,
            "composition": self.composition,
            "lighting": self.lighting,
            "aspectRatio": self.aspect_ratio,
            "referenceImages": encoded_images,
        }
