"""
Instruction building and refinement for logosmith.

Builds the instruction text sent to the remote image model from ordered
template clauses, and optionally refines free-text descriptions through the
reasoning backend. Refinement never fails: an unconfigured or failing backend
yields the deterministic template instead.
"""

from logosmith.core.models import (
    REFERENCE_STYLE_SIMILAR,
    EnhancementOptions,
    ReferenceOptions,
    TextOptions,
)
from logosmith.core.prompts_loader import PromptsSchema, get_templates
from logosmith.core.providers.base import ReasoningBackend
from logosmith.logging_config import get_logger, log_instruction
from logosmith.utils.cache import InstructionCache
from logosmith.utils.exceptions import LogosmithError, ValidationError

logger = get_logger(__name__)

DEFAULT_COLOR_PHRASE = "professional blue and white"
DEFAULT_BUSINESS_PHRASE = "general business"


def validate_description(description: str) -> None:
    """
    Validate a text description.

    Raises:
        ValidationError: If the description is empty or whitespace
    """
    if not description or not description.strip():
        raise ValidationError("Description cannot be empty", field="description")


def _join(clauses: list[str]) -> str:
    return " ".join(clause.strip() for clause in clauses if clause and clause.strip())


class PromptEnhancer:
    """Builds enriched instructions and refines them through an optional reasoning backend."""

    def __init__(
        self,
        reasoning: ReasoningBackend | None = None,
        cache: InstructionCache | None = None,
        templates: PromptsSchema | None = None,
    ) -> None:
        self.reasoning = reasoning
        self.cache = cache if cache is not None else InstructionCache()
        self.templates = templates or get_templates()

    @property
    def reasoning_available(self) -> bool:
        return self.reasoning is not None

    def build_generation_instruction(self, description: str, options: TextOptions) -> str:
        """Subject, style, colors (if any), business (if any), then fixed requirements."""
        t = self.templates.generation
        clauses = [
            t.subject.format(description=description.strip().rstrip(".")),
            t.style.format(style=options.style),
        ]
        if options.colors:
            clauses.append(t.colors.format(colors=", ".join(options.colors)))
        if options.business_type:
            clauses.append(t.business.format(business_type=options.business_type))
        clauses.extend([t.requirements, t.usage])
        return _join(clauses)

    def reference_description(self, options: ReferenceOptions) -> str:
        """Base description for reference-driven generation."""
        t = self.templates.editing
        return t.reference_base.format(
            business_name=options.business_name or t.default_business_name
        )

    def build_editing_instruction(self, description: str, options: ReferenceOptions) -> str:
        """Instruction for editing a reference image into a new logo."""
        t = self.templates.editing
        clauses = [t.subject.format(description=description.strip().rstrip("."))]
        if options.business_name:
            clauses.append(t.business_name.format(business_name=options.business_name))
        if options.style == REFERENCE_STYLE_SIMILAR:
            clauses.append(t.keep_similar)
        else:
            clauses.append(t.style.format(style=options.style))
        if options.modifications:
            clauses.append(t.modifications.format(modifications=", ".join(options.modifications)))
        clauses.append(t.requirements)
        return _join(clauses)

    def build_enhancement_instruction(self, options: EnhancementOptions) -> str:
        """
        Instruction for enhancing an image.

        Raises:
            ValidationError: If options.type is not a known enhancement type
        """
        options.validate()
        t = self.templates.enhancement
        clauses = [t.lead, t.types[options.type].format(style=options.style)]
        if options.custom_prompt and options.custom_prompt.strip():
            clauses.append(t.custom.format(custom_prompt=options.custom_prompt.strip().rstrip(".")))
        clauses.append(t.requirements)
        return _join(clauses)

    def fallback_refinement(self, instruction: str, options: TextOptions) -> str:
        colors = " and ".join(options.colors) if options.colors else DEFAULT_COLOR_PHRASE
        return " ".join(
            self.templates.refinement.fallback.format(
                instruction=instruction.strip(), style=options.style, colors=colors
            ).split()
        )

    def refine(self, description: str, options: TextOptions, force_refresh: bool = False) -> str:
        """
        Refine a free-text description for image generation.

        Uses the reasoning backend when configured; results are cached per
        (description, model). Any backend failure is logged and the static
        fallback template is returned instead.

        Raises:
            ValidationError: If description is empty
        """
        validate_description(description)
        if self.reasoning is None:
            logger.debug("Reasoning backend not configured; using template refinement")
            return self.fallback_refinement(description, options)

        model = self.reasoning.model
        cache_key = self._cache_text(description, options)
        if not force_refresh:
            cached = self.cache.get(cache_key, model)
            if cached is not None:
                logger.debug("Refinement cache hit model=%s", model)
                return cached

        prompt = self.templates.refinement.template.format(
            instruction=description.strip(),
            style=options.style,
            colors=", ".join(options.colors) if options.colors else DEFAULT_COLOR_PHRASE,
            business_type=options.business_type or DEFAULT_BUSINESS_PHRASE,
        )
        try:
            refined = self.reasoning.complete(prompt)
        except LogosmithError as e:
            logger.warning("Instruction refinement failed, using template: %s", e)
            return self.fallback_refinement(description, options)

        log_instruction(logger, "Refined instruction", refined)
        self.cache.set(cache_key, model, refined)
        return refined

    def describe(
        self, name: str, business_type: str, styles: list[str], keywords: list[str]
    ) -> str:
        """Creative logo description for a business; template text when reasoning is unavailable."""
        t = self.templates.analysis
        fallback = " ".join(t.description_fallback.format(name=name, type=business_type).split())
        if self.reasoning is None:
            return fallback
        prompt = t.description.format(
            name=name,
            type=business_type,
            styles=", ".join(styles) or "Modern, Professional",
            keywords=", ".join(keywords) or "Innovation, Trust, Quality",
        )
        try:
            return self.reasoning.complete(prompt)
        except LogosmithError as e:
            logger.warning("Creative description failed, using template: %s", e)
            return fallback

    @staticmethod
    def _cache_text(description: str, options: TextOptions) -> str:
        return "\n".join(
            [
                description.strip(),
                options.style,
                ",".join(options.colors),
                options.business_type or "",
            ]
        )
