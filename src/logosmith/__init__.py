"""
logosmith - logo generation and enhancement with tiered fallback

Every request produces an image artifact: the remote Gemini model is tried
first when configured, then local Pillow transforms (enhance, reference) or
the synthetic logo generator (text), which needs no network at all.

Library usage:
- Build one Orchestrator per process with Orchestrator.from_config(Config.from_env())
  and call enhance(), generate_from_text() or generate_from_reference().
- Artifacts are written to Config.output_dir and read back with download().
- Logging: control verbosity with set_verbosity(0|1|2) or configure_logging(verbose_level, quiet);
  LOGOSMITH_VERBOSITY env (0/1/2) is read when the CLI runs.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("logosmith")
except PackageNotFoundError:
    # Package is not installed (e.g., running from source in development)
    __version__ = "0.0.0.dev"

from logosmith.core.config import (
    DEFAULT_IMAGE_MODEL,
    DEFAULT_REASONING_MODEL,
    Config,
)
from logosmith.core.models import (
    Artifact,
    BusinessProfile,
    EnhancementOptions,
    GenerationRequest,
    Metadata,
    OperationResult,
    ReferenceOptions,
    TextOptions,
)
from logosmith.core.orchestrator import Orchestrator
from logosmith.core.storage import ArtifactStore
from logosmith.logging_config import configure_logging, set_verbosity
from logosmith.utils.exceptions import (
    ConfigurationError,
    LogosmithError,
    NetworkError,
    NotFoundError,
    OperationError,
    ProcessingError,
    RemoteServiceError,
    RequestTimeoutError,
    ValidationError,
)

__all__ = [
    "Artifact",
    "ArtifactStore",
    "BusinessProfile",
    "Config",
    "ConfigurationError",
    "DEFAULT_IMAGE_MODEL",
    "DEFAULT_REASONING_MODEL",
    "EnhancementOptions",
    "GenerationRequest",
    "LogosmithError",
    "Metadata",
    "NetworkError",
    "NotFoundError",
    "OperationError",
    "OperationResult",
    "Orchestrator",
    "ProcessingError",
    "ReferenceOptions",
    "RemoteServiceError",
    "RequestTimeoutError",
    "TextOptions",
    "ValidationError",
    "configure_logging",
    "set_verbosity",
]
