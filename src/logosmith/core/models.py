"""
Request, artifact and metadata types shared by the tiers and the orchestrator.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from logosmith.utils.exceptions import ValidationError

# Request kinds
KIND_ENHANCE = "enhance"
KIND_GENERATE_TEXT = "generate_text"
KIND_GENERATE_REFERENCE = "generate_reference"
REQUEST_KINDS = (KIND_ENHANCE, KIND_GENERATE_TEXT, KIND_GENERATE_REFERENCE)

# Tiers
TIER_REMOTE = "remote"
TIER_RASTER = "raster"
TIER_SYNTHETIC = "synthetic"

ENHANCEMENT_TYPES = ("quality", "style", "resolution")
DEFAULT_STYLE = "modern"
REFERENCE_STYLE_SIMILAR = "similar"


@dataclass
class EnhancementOptions:
    """Options for enhancing an existing image."""

    type: str = "quality"
    style: str = DEFAULT_STYLE
    custom_prompt: str = ""

    def validate(self) -> None:
        if self.type not in ENHANCEMENT_TYPES:
            raise ValidationError(
                f"Unknown enhancement type: {self.type!r}. "
                f"Must be one of: {', '.join(ENHANCEMENT_TYPES)}.",
                field="type",
            )


@dataclass
class TextOptions:
    """Options for generating an image from a text description."""

    style: str = DEFAULT_STYLE
    colors: list[str] = field(default_factory=list)
    business_type: str | None = None


@dataclass
class ReferenceOptions:
    """Options for generating an image from a reference image."""

    business_name: str | None = None
    style: str = REFERENCE_STYLE_SIMILAR
    modifications: list[str] = field(default_factory=list)


_OPTIONS_FOR_KIND: dict[str, type] = {
    KIND_ENHANCE: EnhancementOptions,
    KIND_GENERATE_TEXT: TextOptions,
    KIND_GENERATE_REFERENCE: ReferenceOptions,
}


@dataclass
class BusinessProfile:
    """Business details used for instruction building and analysis. Never persisted."""

    name: str
    type: str
    description: str = ""
    target_audience: str = ""


@dataclass
class GenerationRequest:
    """A single orchestrator request; built per call and discarded afterwards."""

    kind: str
    description: str = ""
    image: bytes | None = field(default=None, repr=False)
    options: EnhancementOptions | TextOptions | ReferenceOptions | None = None
    # Description after refinement; the remote tier builds its instruction from it
    refined: str | None = None

    def __post_init__(self) -> None:
        if self.kind not in REQUEST_KINDS:
            raise ValidationError(f"Unknown request kind: {self.kind!r}", field="kind")
        options_type = _OPTIONS_FOR_KIND[self.kind]
        if self.options is None:
            self.options = options_type()
        elif not isinstance(self.options, options_type):
            raise ValidationError(
                f"{self.kind} requests take {options_type.__name__}, "
                f"got {type(self.options).__name__}",
                field="options",
            )


@dataclass
class Artifact:
    """A persisted image payload identified by a unique filename."""

    filename: str
    content: bytes = field(repr=False)
    created_at: datetime
    path: Path

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class Metadata:
    """Provenance for one artifact. ``tier`` always names the tier that produced it."""

    tier: str
    model: str | None = None
    prompt: str | None = None
    style: str | None = None
    colors: list[str] = field(default_factory=list)
    business_type: str | None = None
    business_name: str | None = None
    modifications: list[str] = field(default_factory=list)
    enhancement_type: str | None = None
    description: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialise for API responses; unset fields are omitted."""
        data: dict[str, Any] = {"tier": self.tier, "api_used": self.tier}
        for key in (
            "model",
            "prompt",
            "style",
            "business_type",
            "business_name",
            "enhancement_type",
            "description",
        ):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        if self.colors:
            data["colors"] = list(self.colors)
        if self.modifications:
            data["modifications"] = list(self.modifications)
        data.update(self.extra)
        return data


@dataclass
class OperationResult:
    """What the orchestrator returns to its callers."""

    artifact: Artifact
    metadata: Metadata
    url: str
    prompt: str | None = None
    analysis: dict[str, Any] | None = None

    @property
    def filename(self) -> str:
        return self.artifact.filename

    @property
    def tier(self) -> str:
        return self.metadata.tier

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"filename": self.artifact.filename, "url": self.url}
        if self.prompt is not None:
            data["prompt"] = self.prompt
        if self.analysis is not None:
            data["analysis"] = self.analysis
        data["metadata"] = self.metadata.to_dict()
        return data
