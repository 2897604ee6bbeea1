"""
Generation tiers.

Every tier exposes the same attempt(request) interface and returns the stored
artifact with its metadata, or raises a LogosmithError. The orchestrator
decides which tiers to try and in which order.
"""

from typing import Protocol

from logosmith.core.models import (
    KIND_ENHANCE,
    KIND_GENERATE_REFERENCE,
    KIND_GENERATE_TEXT,
    TIER_RASTER,
    TIER_REMOTE,
    TIER_SYNTHETIC,
    Artifact,
    EnhancementOptions,
    GenerationRequest,
    Metadata,
    ReferenceOptions,
    TextOptions,
)
from logosmith.core.prompt import PromptEnhancer
from logosmith.core.raster import RasterEngine
from logosmith.core.remote import RemoteGenerationAdapter
from logosmith.core.synthetic import SyntheticGenerator
from logosmith.utils.exceptions import ValidationError


class Tier(Protocol):
    name: str
    kinds: frozenset[str]

    def attempt(self, request: GenerationRequest) -> tuple[Artifact, Metadata]: ...


def _require_image(request: GenerationRequest) -> bytes:
    if not request.image:
        raise ValidationError(f"{request.kind} requires an image", field="image")
    return request.image


def _unsupported(tier: str, request: GenerationRequest) -> ValidationError:
    return ValidationError(
        f"{tier} tier cannot handle {type(request.options).__name__} for {request.kind}",
        field="options",
    )


class RemoteTier:
    """Remote model; handles every request kind."""

    name = TIER_REMOTE
    kinds = frozenset({KIND_ENHANCE, KIND_GENERATE_TEXT, KIND_GENERATE_REFERENCE})

    def __init__(self, adapter: RemoteGenerationAdapter, enhancer: PromptEnhancer) -> None:
        self.adapter = adapter
        self.enhancer = enhancer

    def attempt(self, request: GenerationRequest) -> tuple[Artifact, Metadata]:
        options = request.options
        if isinstance(options, EnhancementOptions):
            instruction = self.enhancer.build_enhancement_instruction(options)
            return self.adapter.enhance(instruction, _require_image(request), options)
        if isinstance(options, TextOptions):
            instruction = self.enhancer.build_generation_instruction(
                request.refined or request.description, options
            )
            return self.adapter.generate_from_text(instruction, options, request.description)
        if isinstance(options, ReferenceOptions):
            base = self.enhancer.reference_description(options)
            instruction = self.enhancer.build_editing_instruction(base, options)
            return self.adapter.generate_from_reference(
                instruction, _require_image(request), options
            )
        raise _unsupported(self.name, request)


class RasterTier:
    """Local Pillow transforms for enhance and reference requests."""

    name = TIER_RASTER
    kinds = frozenset({KIND_ENHANCE, KIND_GENERATE_REFERENCE})

    def __init__(self, engine: RasterEngine) -> None:
        self.engine = engine

    def attempt(self, request: GenerationRequest) -> tuple[Artifact, Metadata]:
        options = request.options
        if isinstance(options, EnhancementOptions):
            return self.engine.enhance(_require_image(request), options)
        if isinstance(options, ReferenceOptions):
            return self.engine.similar(_require_image(request), options)
        raise _unsupported(self.name, request)


class SyntheticTier:
    """Always-available text generation from the original description."""

    name = TIER_SYNTHETIC
    kinds = frozenset({KIND_GENERATE_TEXT})

    def __init__(self, generator: SyntheticGenerator) -> None:
        self.generator = generator

    def attempt(self, request: GenerationRequest) -> tuple[Artifact, Metadata]:
        if not isinstance(request.options, TextOptions):
            raise _unsupported(self.name, request)
        return self.generator.generate(request.description, request.options)
