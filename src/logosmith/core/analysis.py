"""
Pre-generation analysis: business profiles and reference images.

Both analyses always return a result. Business analysis asks the reasoning
backend for structured insights and falls back to a fixed table keyed by
business type; reference analysis is computed locally with Pillow and falls
back to an "unknown" record for unreadable images.
"""

import copy
from typing import Any

from PIL import Image, ImageChops

from logosmith.core.models import BusinessProfile
from logosmith.core.providers.base import ReasoningBackend
from logosmith.core.prompts_loader import get_templates
from logosmith.core.raster import decode_image, detect_image_format, flatten
from logosmith.logging_config import get_logger
from logosmith.utils.exceptions import LogosmithError

logger = get_logger(__name__)

CONFIDENCE_SCORE = 0.85
PALETTE_SIZE = 8
DOMINANT_COLORS = 3
# Palette entries covering less than this share of pixels are ignored
MIN_COLOR_SHARE = 0.02
SAMPLE_EDGE = 128
CENTER_TOLERANCE = 0.1

BUSINESS_FALLBACKS: dict[str, dict[str, Any]] = {
    "tech": {
        "brand_personality": ["innovative", "modern", "reliable", "cutting-edge"],
        "color_schemes": [["#2563eb", "#ffffff", "#1f2937"], ["#7c3aed", "#ffffff", "#374151"]],
        "style_suggestions": ["modern", "minimalist", "geometric"],
        "symbol_recommendations": ["abstract shapes", "circuit patterns", "arrows"],
        "typography": {"style": "sans-serif", "weight": "medium"},
    },
    "default": {
        "brand_personality": ["professional", "trustworthy", "reliable", "approachable"],
        "color_schemes": [["#1f2937", "#ffffff", "#3b82f6"], ["#059669", "#ffffff", "#1f2937"]],
        "style_suggestions": ["professional", "clean", "balanced"],
        "symbol_recommendations": ["geometric shapes", "abstract symbols", "typography-based"],
        "typography": {"style": "sans-serif", "weight": "regular"},
    },
}

UNKNOWN_ANALYSIS: dict[str, Any] = {
    "dominant_colors": ["#000000", "#ffffff"],
    "style_detected": "unknown",
    "elements": ["unknown"],
    "composition": "unknown",
    "complexity": "medium",
}

_RECOMMENDATIONS = {
    "minimalist": [
        "Keep the restrained palette",
        "Favor negative space and simple geometry",
        "Pair with a light sans-serif wordmark",
    ],
    "modern": [
        "Clean, modern design approach",
        "Use of geometric elements",
        "Professional color palette",
    ],
    "detailed": [
        "Simplify fine detail so the mark survives small sizes",
        "Reduce the palette to two or three brand colors",
        "Provide an icon-only variant",
    ],
}


def fallback_business_analysis(business_type: str) -> dict[str, Any]:
    """Fixed insights for a business type; unknown types get the default entry."""
    key = (business_type or "").strip().lower()
    return copy.deepcopy(BUSINESS_FALLBACKS.get(key, BUSINESS_FALLBACKS["default"]))


def analyze_business(
    profile: BusinessProfile, reasoning: ReasoningBackend | None = None
) -> dict[str, Any]:
    """
    Brand insights for logo design.

    Returns brand_personality, color_schemes, style_suggestions,
    symbol_recommendations and typography. Results from the reasoning backend
    also carry confidence_score.
    """
    if reasoning is None:
        logger.debug("Reasoning backend not configured; using fallback business analysis")
        return fallback_business_analysis(profile.type)

    prompt = get_templates().analysis.business.format(
        name=profile.name,
        type=profile.type,
        description=profile.description or "Not provided",
        target_audience=profile.target_audience or "General",
    )
    try:
        response = reasoning.complete_json(prompt)
    except LogosmithError as e:
        logger.warning("Business analysis failed, using fallback: %s", e)
        return fallback_business_analysis(profile.type)

    typography = response.get("typography")
    return {
        "brand_personality": list(response.get("brand_personality") or []),
        "color_schemes": list(response.get("color_schemes") or []),
        "style_suggestions": list(response.get("style_suggestions") or []),
        "symbol_recommendations": list(response.get("symbol_recommendations") or []),
        "typography": typography if isinstance(typography, dict) else {},
        "confidence_score": CONFIDENCE_SCORE,
    }


def dominant_colors(image: Image.Image, count: int = DOMINANT_COLORS) -> tuple[list[str], int]:
    """
    Most frequent palette colors as hex strings, plus the number of palette
    entries that cover a meaningful share of the image.
    """
    sample = flatten(image).copy()
    sample.thumbnail((SAMPLE_EDGE, SAMPLE_EDGE))
    quantized = sample.quantize(colors=PALETTE_SIZE, method=Image.Quantize.MEDIANCUT)
    palette = quantized.getpalette() or []
    total = sample.width * sample.height
    counts = sorted(quantized.getcolors() or [], reverse=True)
    colors = []
    for _, index in counts[:count]:
        r, g, b = palette[index * 3 : index * 3 + 3]
        colors.append(f"#{r:02x}{g:02x}{b:02x}")
    significant = sum(1 for n, _ in counts if n / total >= MIN_COLOR_SHARE)
    return colors, significant


def _composition(image: Image.Image) -> str:
    rgb = flatten(image)
    background = Image.new("RGB", rgb.size, rgb.getpixel((0, 0)))
    bbox = ImageChops.difference(rgb, background).getbbox()
    if bbox is None:
        return "empty"
    left, top, right, bottom = bbox
    dx = abs((left + right) / 2 - rgb.width / 2) / rgb.width
    dy = abs((top + bottom) / 2 - rgb.height / 2) / rgb.height
    return "centered" if dx <= CENTER_TOLERANCE and dy <= CENTER_TOLERANCE else "offset"


def analyze_reference(data: bytes) -> dict[str, Any]:
    """Describe a reference image. Never raises; unreadable input gives UNKNOWN_ANALYSIS."""
    try:
        image = decode_image(data)
        colors, significant = dominant_colors(image)
        composition = _composition(image)
    except (LogosmithError, OSError, ValueError) as e:
        logger.warning("Reference analysis failed: %s", e)
        result = copy.deepcopy(UNKNOWN_ANALYSIS)
        result["file_size"] = len(data)
        return result

    if significant <= 3:
        complexity, style = "low", "minimalist"
    elif significant <= 6:
        complexity, style = "medium", "modern"
    else:
        complexity, style = "high", "detailed"
    elements = ["geometric shapes"] if complexity == "low" else ["text", "geometric shapes"]
    width, height = image.size
    return {
        "dominant_colors": colors,
        "style_detected": style,
        "elements": elements,
        "composition": composition,
        "complexity": complexity,
        "file_size": len(data),
        "format": detect_image_format(data),
        "width": width,
        "height": height,
        "has_transparency": image.mode == "RGBA",
        "recommendations": list(_RECOMMENDATIONS[style]),
    }
