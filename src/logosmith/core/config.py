"""
Configuration management for logosmith.

This module handles API keys, model selection, storage location and limits.
A missing API key is a valid configuration: it only disables the tier that
needs it.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from logosmith.logging_config import get_logger
from logosmith.utils.exceptions import ConfigurationError

logger = get_logger(__name__)

# Load environment variables from .env file
load_dotenv()

# Default configuration constants
DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image-preview"
DEFAULT_GROQ_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_REASONING_MODEL = "llama-3.3-70b-versatile"
DEFAULT_OUTPUT_DIR = "uploads"
DEFAULT_URL_PREFIX = "/api/logo/download/"
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024


def _truthy(value: str | None) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes")


@dataclass
class Config:
    """Configuration for the logosmith orchestrator."""

    # Remote image generation (API key excluded from repr to avoid leaking secrets)
    gemini_api_key: str = field(default="", repr=False)
    gemini_base_url: str = DEFAULT_GEMINI_BASE_URL
    image_model: str = DEFAULT_IMAGE_MODEL

    # Reasoning backend used by the prompt enhancer and business analysis
    groq_api_key: str = field(default="", repr=False)
    groq_base_url: str = DEFAULT_GROQ_BASE_URL
    reasoning_model: str = DEFAULT_REASONING_MODEL
    reasoning_enabled: bool = True

    # Artifact store
    output_dir: Path = Path(DEFAULT_OUTPUT_DIR)
    url_prefix: str = DEFAULT_URL_PREFIX

    # Input limits
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES

    # Timeout Configuration (seconds)
    generation_timeout: int = 180  # 3 minutes
    reasoning_timeout: int = 60

    # Debug: log raw API payload/response with image data truncated
    debug_api: bool = False

    _validated: bool = field(default=False, repr=False)

    @classmethod
    def from_env(cls) -> "Config":
        """
        Create a Config instance from environment variables.

        Environment variables:
            GEMINI_API_KEY: Enables the remote image generation tier
            GEMINI_BASE_URL: Optional Gemini API base URL
            LOGOSMITH_IMAGE_MODEL: Optional image generation model
            GROQ_API_KEY: Enables the reasoning backend for instruction refinement
            GROQ_BASE_URL: Optional Groq API base URL
            LOGOSMITH_REASONING_MODEL: Optional reasoning model
            LOGOSMITH_OUTPUT_DIR: Directory for generated artifacts (default uploads)
            LOGOSMITH_URL_PREFIX: Prefix for artifact download URLs
            LOGOSMITH_MAX_UPLOAD_BYTES: Largest accepted input image in bytes
            LOGOSMITH_DEBUG_API: Log truncated request/response payloads

        Returns:
            Config instance populated from environment
        """

        def _int_env(name: str, default: int) -> int:
            val = os.getenv(name)
            if val is None or val == "":
                return default
            try:
                return int(val)
            except ValueError as e:
                raise ConfigurationError(f"{name} must be an integer, got {val!r}.") from e

        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY", "").strip(),
            gemini_base_url=os.getenv("GEMINI_BASE_URL") or DEFAULT_GEMINI_BASE_URL,
            image_model=os.getenv("LOGOSMITH_IMAGE_MODEL") or DEFAULT_IMAGE_MODEL,
            groq_api_key=os.getenv("GROQ_API_KEY", "").strip(),
            groq_base_url=os.getenv("GROQ_BASE_URL") or DEFAULT_GROQ_BASE_URL,
            reasoning_model=os.getenv("LOGOSMITH_REASONING_MODEL") or DEFAULT_REASONING_MODEL,
            output_dir=Path(os.getenv("LOGOSMITH_OUTPUT_DIR") or DEFAULT_OUTPUT_DIR),
            url_prefix=os.getenv("LOGOSMITH_URL_PREFIX") or DEFAULT_URL_PREFIX,
            max_upload_bytes=_int_env("LOGOSMITH_MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES),
            generation_timeout=_int_env("LOGOSMITH_GENERATION_TIMEOUT", 180),
            reasoning_timeout=_int_env("LOGOSMITH_REASONING_TIMEOUT", 60),
            debug_api=_truthy(os.getenv("LOGOSMITH_DEBUG_API")),
        )

    @property
    def remote_configured(self) -> bool:
        """True when the remote image generation tier has a credential."""
        return bool(self.gemini_api_key)

    @property
    def reasoning_configured(self) -> bool:
        """True when instruction refinement through the reasoning backend is possible."""
        return self.reasoning_enabled and bool(self.groq_api_key)

    def validate(self) -> None:
        """
        Validate the configuration.

        Absent API keys are not errors; they disable the affected tier only.

        Raises:
            ConfigurationError: If a setting is invalid
        """
        logger.debug("Validating config")

        if self.max_upload_bytes <= 0:
            raise ConfigurationError(
                f"max_upload_bytes must be positive, got {self.max_upload_bytes}."
            )
        if self.generation_timeout <= 0 or self.reasoning_timeout <= 0:
            raise ConfigurationError("Timeouts must be positive numbers of seconds.")
        if not self.image_model:
            raise ConfigurationError("Image model cannot be empty")
        if not self.reasoning_model:
            raise ConfigurationError("Reasoning model cannot be empty")
        if not str(self.output_dir).strip():
            raise ConfigurationError("Output directory cannot be empty")
        if not self.url_prefix.endswith("/"):
            raise ConfigurationError(
                f"url_prefix must end with '/', got {self.url_prefix!r}."
            )

        self._validated = True

    def is_valid(self) -> bool:
        """
        Check if configuration has been validated.

        Returns:
            True if validate() has been called successfully
        """
        return self._validated
