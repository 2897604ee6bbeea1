"""
Orchestrator for logosmith.

Exposes the public operations (enhance, generate from text, generate from a
reference image) and sequences tier attempts under a fixed fallback policy:
the remote tier first when it is configured, then the deterministic local
tier. There is one fallback hop and no retries. A failure in a non-final tier
is logged and suppressed; a failure in the final tier is raised as
OperationError.
"""

import time
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from logosmith.core.analysis import analyze_business, analyze_reference
from logosmith.core.config import Config
from logosmith.core.models import (
    KIND_ENHANCE,
    KIND_GENERATE_REFERENCE,
    KIND_GENERATE_TEXT,
    TIER_RASTER,
    TIER_REMOTE,
    TIER_SYNTHETIC,
    Artifact,
    BusinessProfile,
    EnhancementOptions,
    GenerationRequest,
    Metadata,
    OperationResult,
    ReferenceOptions,
    TextOptions,
)
from logosmith.core.prompt import PromptEnhancer, validate_description
from logosmith.core.providers.base import ImageBackend, ReasoningBackend
from logosmith.core.providers.gemini import GeminiImageClient
from logosmith.core.providers.groq import GroqReasoningClient
from logosmith.core.raster import RasterEngine
from logosmith.core.remote import RemoteGenerationAdapter
from logosmith.core.storage import ArtifactStore, staged_input
from logosmith.core.synthetic import SyntheticGenerator
from logosmith.core.tiers import RasterTier, RemoteTier, SyntheticTier, Tier
from logosmith.logging_config import (
    get_logger,
    log_tier_failed,
    log_tier_fallback,
    log_tier_served,
)
from logosmith.utils.exceptions import (
    ConfigurationError,
    LogosmithError,
    OperationError,
    ValidationError,
)

logger = get_logger(__name__)

ImageInput = bytes | str | Path

OPERATION_NAMES = {
    KIND_ENHANCE: "enhance",
    KIND_GENERATE_TEXT: "generate_from_text",
    KIND_GENERATE_REFERENCE: "generate_from_reference",
}


class Orchestrator:
    """Coordinates the generation tiers; build once with from_config() and reuse."""

    def __init__(
        self,
        store: ArtifactStore,
        enhancer: PromptEnhancer | None = None,
        remote: ImageBackend | None = None,
        reasoning: ReasoningBackend | None = None,
        max_upload_bytes: int | None = None,
    ) -> None:
        self.store = store
        self.remote = remote
        self.reasoning = reasoning
        self.enhancer = enhancer or PromptEnhancer(reasoning)
        self.max_upload_bytes = max_upload_bytes

        self._remote_tier = (
            RemoteTier(RemoteGenerationAdapter(remote, store), self.enhancer)
            if remote is not None
            else None
        )
        self._raster_tier = RasterTier(RasterEngine(store))
        self._synthetic_tier = SyntheticTier(SyntheticGenerator(store))

    @classmethod
    def from_config(cls, config: Config) -> "Orchestrator":
        """
        Build the store and backend clients from configuration.

        A backend whose client cannot be constructed (missing credential) is
        disabled with a warning; the local tiers are always present.

        Raises:
            ConfigurationError: If the configuration itself is invalid
        """
        config.validate()
        store = ArtifactStore(config.output_dir, config.url_prefix)

        remote: ImageBackend | None = None
        try:
            remote = GeminiImageClient(
                api_key=config.gemini_api_key,
                model=config.image_model,
                base_url=config.gemini_base_url,
                timeout=config.generation_timeout,
                debug_api=config.debug_api,
            )
        except ConfigurationError as e:
            logger.warning("Remote tier disabled: %s", e)

        reasoning: ReasoningBackend | None = None
        if config.reasoning_enabled:
            try:
                reasoning = GroqReasoningClient(
                    api_key=config.groq_api_key,
                    model=config.reasoning_model,
                    base_url=config.groq_base_url,
                    timeout=config.reasoning_timeout,
                )
            except ConfigurationError as e:
                logger.warning("Instruction refinement disabled: %s", e)

        return cls(
            store=store,
            remote=remote,
            reasoning=reasoning,
            max_upload_bytes=config.max_upload_bytes,
        )

    def tiers_for(self, kind: str) -> list[Tier]:
        """Tiers that handle a request kind, in the order they are tried."""
        candidates = [self._remote_tier, self._raster_tier, self._synthetic_tier]
        return [tier for tier in candidates if tier is not None and kind in tier.kinds]

    def _attempt(self, request: GenerationRequest) -> tuple[Artifact, Metadata]:
        operation = OPERATION_NAMES[request.kind]
        tiers = self.tiers_for(request.kind)
        for index, tier in enumerate(tiers):
            start = time.time()
            try:
                artifact, metadata = tier.attempt(request)
            except (LogosmithError, OSError) as e:
                if index == len(tiers) - 1:
                    log_tier_failed(logger, operation, tier.name, e)
                    raise OperationError(
                        f"{operation} failed: {e}",
                        operation=operation,
                        tier=tier.name,
                        original_error=e,
                    ) from e
                log_tier_fallback(logger, operation, tier.name, time.time() - start, e)
                continue
            log_tier_served(logger, operation, tier.name, artifact.filename, time.time() - start)
            return artifact, metadata
        raise OperationError(f"No tier available for {operation}", operation=operation)

    def _result(self, request: GenerationRequest, **extra: Any) -> OperationResult:
        artifact, metadata = self._attempt(request)
        return OperationResult(
            artifact=artifact,
            metadata=metadata,
            url=self.store.url_for(artifact.filename),
            **extra,
        )

    def enhance(
        self, image: ImageInput, options: EnhancementOptions | None = None
    ) -> OperationResult:
        """
        Enhance an existing image.

        A path input is deleted when the call returns or raises.

        Raises:
            ValidationError: If the image is missing, empty or too large, or the type is unknown
            OperationError: If the final tier fails (e.g. the image cannot be decoded)
        """
        options = options or EnhancementOptions()
        with staged_input(image, self.max_upload_bytes) as data:
            options.validate()
            request = GenerationRequest(kind=KIND_ENHANCE, image=data, options=options)
            return self._result(request)

    def generate_from_text(
        self, description: str, options: TextOptions | None = None
    ) -> OperationResult:
        """
        Generate a logo from a text description.

        Always succeeds for a non-empty description: the synthetic tier is the
        final fallback and needs no network.

        Raises:
            ValidationError: If description is empty
        """
        validate_description(description)
        options = options or TextOptions()
        if self._remote_tier is not None:
            refined = self.enhancer.refine(description, options)
        else:
            # only the remote tier consumes refined text; skip the reasoning call
            refined = self.enhancer.fallback_refinement(description.strip(), options)
        request = GenerationRequest(
            kind=KIND_GENERATE_TEXT,
            description=description.strip(),
            options=options,
            refined=refined,
        )
        return self._result(request, prompt=refined)

    def generate_from_reference(
        self, image: ImageInput, options: ReferenceOptions | None = None
    ) -> OperationResult:
        """
        Generate a logo from a reference image plus optional modifications.

        A path input is deleted when the call returns or raises.

        Raises:
            ValidationError: If the image is missing, empty or too large
            OperationError: If the final tier fails (e.g. the image cannot be decoded)
        """
        options = options or ReferenceOptions()
        with staged_input(image, self.max_upload_bytes) as data:
            analysis = analyze_reference(data)
            request = GenerationRequest(
                kind=KIND_GENERATE_REFERENCE, image=data, options=options
            )
            return self._result(request, analysis=analysis)

    def run(self, request: GenerationRequest) -> OperationResult:
        """Dispatch a GenerationRequest to the matching operation."""
        options = request.options
        if isinstance(options, EnhancementOptions):
            return self.enhance(request.image or b"", options)
        if isinstance(options, TextOptions):
            return self.generate_from_text(request.description, options)
        if isinstance(options, ReferenceOptions):
            return self.generate_from_reference(request.image or b"", options)
        raise ValidationError(f"No options for request kind {request.kind!r}", field="options")

    def download(self, filename: str) -> bytes:
        """
        Return the exact bytes of a stored artifact.

        Raises:
            NotFoundError: If no artifact has that name
        """
        return self.store.read(filename)

    def open_artifact(self, filename: str, chunk_size: int = 64 * 1024) -> Iterator[bytes]:
        """Stream a stored artifact in chunks; NotFoundError is raised before iteration."""
        return self.store.stream(filename, chunk_size)

    def analyze_business(self, profile: BusinessProfile) -> dict[str, Any]:
        return analyze_business(profile, self.reasoning)

    def describe_business(
        self,
        profile: BusinessProfile,
        styles: list[str] | None = None,
        keywords: list[str] | None = None,
    ) -> str:
        """Creative logo description suitable as input to generate_from_text()."""
        return self.enhancer.describe(profile.name, profile.type, styles or [], keywords or [])

    def status(self) -> dict[str, Any]:
        """Availability of each tier and backend."""
        remote_model = self.remote.model if self.remote is not None else None
        reasoning_model = self.reasoning.model if self.reasoning is not None else None
        return {
            "tiers": {
                TIER_REMOTE: {"available": self.remote is not None, "model": remote_model},
                TIER_RASTER: {"available": True},
                TIER_SYNTHETIC: {"available": True},
            },
            "reasoning": {"available": self.reasoning is not None, "model": reasoning_model},
            "output_dir": str(self.store.root),
        }
