"""
Remote generation adapter.

Turns instructions into persisted artifacts through the remote image model:
text-to-image, reference editing and enhance-as-edit. Errors from the client
propagate unchanged so the orchestrator can fall back.
"""

import time

from logosmith.core.models import (
    TIER_REMOTE,
    Artifact,
    EnhancementOptions,
    Metadata,
    ReferenceOptions,
    TextOptions,
)
from logosmith.core.providers.base import ImageBackend
from logosmith.core.raster import mime_type_for
from logosmith.core.storage import ArtifactStore
from logosmith.logging_config import get_logger, log_instruction

logger = get_logger(__name__)

PREFIX_TEXT = "gemini-logo"
PREFIX_REFERENCE = "gemini-edited-logo"
PREFIX_ENHANCE = "gemini-enhanced"


class RemoteGenerationAdapter:
    def __init__(self, client: ImageBackend, store: ArtifactStore) -> None:
        self.client = client
        self.store = store

    @property
    def model(self) -> str:
        return self.client.model

    def generate_from_text(
        self, instruction: str, options: TextOptions, description: str = ""
    ) -> tuple[Artifact, Metadata]:
        """
        Generate from instruction text alone.

        Raises:
            RemoteServiceError: (or NetworkError, RequestTimeoutError) when the model fails
        """
        log_instruction(logger, "Generation instruction", instruction)
        start = time.time()
        image = self.client.text_to_image(instruction)
        artifact = self.store.save(image, prefix=PREFIX_TEXT)
        logger.info(
            "Remote text generation in %.1fs filename=%s", time.time() - start, artifact.filename
        )
        metadata = Metadata(
            tier=TIER_REMOTE,
            model=self.model,
            prompt=instruction,
            style=options.style,
            colors=list(options.colors),
            business_type=options.business_type,
            description=description or None,
        )
        return artifact, metadata

    def generate_from_reference(
        self, instruction: str, image: bytes, options: ReferenceOptions
    ) -> tuple[Artifact, Metadata]:
        """
        Generate from a reference image plus instruction text.

        Raises:
            RemoteServiceError: (or NetworkError, RequestTimeoutError) when the model fails
        """
        log_instruction(logger, "Editing instruction", instruction)
        start = time.time()
        result = self.client.edit_image(instruction, image, mime_type_for(image))
        artifact = self.store.save(result, prefix=PREFIX_REFERENCE)
        logger.info(
            "Remote reference generation in %.1fs filename=%s",
            time.time() - start,
            artifact.filename,
        )
        metadata = Metadata(
            tier=TIER_REMOTE,
            model=self.model,
            prompt=instruction,
            style=options.style,
            business_name=options.business_name,
            modifications=list(options.modifications),
        )
        return artifact, metadata

    def enhance(
        self, instruction: str, image: bytes, options: EnhancementOptions
    ) -> tuple[Artifact, Metadata]:
        """
        Enhance an image by asking the model to edit it.

        Raises:
            RemoteServiceError: (or NetworkError, RequestTimeoutError) when the model fails
        """
        log_instruction(logger, "Enhancement instruction", instruction)
        start = time.time()
        result = self.client.edit_image(instruction, image, mime_type_for(image))
        artifact = self.store.save(result, prefix=PREFIX_ENHANCE)
        logger.info(
            "Remote enhancement type=%s in %.1fs filename=%s",
            options.type,
            time.time() - start,
            artifact.filename,
        )
        metadata = Metadata(
            tier=TIER_REMOTE,
            model=self.model,
            prompt=instruction,
            style=options.style,
            enhancement_type=options.type,
        )
        return artifact, metadata
