"""
Load instruction templates from the bundled prompts.yaml file.

Templates are defined in src/logosmith/prompts.yaml, validated against
PromptsSchema and loaded once per process. Access them through
get_templates() or get_prompt().
"""

import importlib.resources
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from logosmith.utils.exceptions import ConfigurationError

# Module-level cache for parsed templates
_prompts: "PromptsSchema | None" = None


class GenerationTemplates(BaseModel):
    subject: str = Field(..., min_length=1)
    style: str = Field(..., min_length=1)
    colors: str = Field(..., min_length=1)
    business: str = Field(..., min_length=1)
    requirements: str = Field(..., min_length=1)
    usage: str = ""

    @field_validator("subject")
    @classmethod
    def _needs_description(cls, value: str) -> str:
        if "{description}" not in value:
            raise ValueError("must contain {description} placeholder")
        return value


class EditingTemplates(BaseModel):
    subject: str = Field(..., min_length=1)
    business_name: str = Field(..., min_length=1)
    keep_similar: str = Field(..., min_length=1)
    style: str = Field(..., min_length=1)
    modifications: str = Field(..., min_length=1)
    requirements: str = Field(..., min_length=1)
    reference_base: str = Field(..., min_length=1)
    default_business_name: str = "the business"


class EnhancementTemplates(BaseModel):
    lead: str = Field(..., min_length=1)
    types: dict[str, str]
    custom: str = Field(..., min_length=1)
    requirements: str = Field(..., min_length=1)

    @field_validator("types")
    @classmethod
    def _all_types_present(cls, value: dict[str, str]) -> dict[str, str]:
        missing = [name for name in ("quality", "style", "resolution") if not value.get(name)]
        if missing:
            raise ValueError(f"missing enhancement types: {', '.join(missing)}")
        return value


class RefinementTemplates(BaseModel):
    template: str = Field(..., min_length=1)
    fallback: str = Field(..., min_length=1)

    @field_validator("template", "fallback")
    @classmethod
    def _needs_instruction(cls, value: str) -> str:
        if "{instruction}" not in value:
            raise ValueError("must contain {instruction} placeholder")
        return value


class AnalysisTemplates(BaseModel):
    business: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    description_fallback: str = Field(..., min_length=1)


class PromptsSchema(BaseModel):
    """Schema for prompts.yaml."""

    model_config = {"extra": "allow"}

    generation: GenerationTemplates
    editing: EditingTemplates
    enhancement: EnhancementTemplates
    refinement: RefinementTemplates
    analysis: AnalysisTemplates


def parse_prompts(raw: str) -> PromptsSchema:
    """
    Parse and validate prompts YAML text.

    Raises:
        ConfigurationError: If the YAML is malformed, empty, or fails validation
    """
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Failed to parse prompts.yaml: {e}. Check YAML syntax and formatting."
        ) from e

    if not isinstance(data, dict):
        raise ConfigurationError(
            "prompts.yaml is empty or not a mapping. Expected generation, editing, "
            "enhancement, refinement and analysis sections."
        )

    try:
        return PromptsSchema(**data)
    except ValidationError as e:
        errors = "\n".join(
            f"  - {'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(f"Invalid prompts.yaml structure:\n{errors}") from e


def get_templates() -> PromptsSchema:
    """Load the bundled templates. Cached after the first call.

    Raises:
        ConfigurationError: If prompts.yaml is missing or invalid.
    """
    global _prompts
    if _prompts is not None:
        return _prompts

    try:
        with (
            importlib.resources.files("logosmith")
            .joinpath("prompts.yaml")
            .open(encoding="utf-8") as f
        ):
            raw = f.read()
    except FileNotFoundError as e:
        raise ConfigurationError(
            "prompts.yaml not found. This file is required and should be bundled with the package."
        ) from e

    _prompts = parse_prompts(raw)
    return _prompts


def get_prompt(key: str, subkey: str | None = None) -> str | None:
    """
    Get a template string by section and key.

    Args:
        key: Section name (e.g. "generation")
        subkey: Key within the section (e.g. "subject")

    Returns:
        The template string, or None if not found
    """
    data: Any = get_templates().model_dump()
    value = data.get(key)
    if subkey is not None:
        value = value.get(subkey) if isinstance(value, dict) else None
    return value if isinstance(value, str) else None


def reset_cache() -> None:
    """Forget the loaded templates so the next call re-reads prompts.yaml."""
    global _prompts
    _prompts = None
