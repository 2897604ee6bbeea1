"""
Raster processing engine.

Deterministic Pillow transforms backing the enhance and reference operations
when no remote tier is available. Every transform takes and returns a PIL
image; RasterEngine decodes input bytes, applies the transform, encodes PNG
and persists the result through the artifact store.
"""

import io
import time
from collections.abc import Callable
from typing import Any

from PIL import Image, ImageEnhance, ImageFilter, ImageOps, UnidentifiedImageError

from logosmith.core.models import (
    TIER_RASTER,
    Artifact,
    EnhancementOptions,
    Metadata,
    ReferenceOptions,
)
from logosmith.core.storage import ArtifactStore
from logosmith.logging_config import get_logger
from logosmith.utils.exceptions import ProcessingError

logger = get_logger(__name__)

QUALITY_MIN_EDGE = 1024
RESOLUTION_SMALL_EDGE = 512
SIMILAR_CANVAS = (1024, 1024)
WHITE = (255, 255, 255)
WARM_TINT = (255, 240, 200)

SHARPEN_DEFAULT = ImageFilter.UnsharpMask(radius=1, percent=100, threshold=2)
SHARPEN_MODERATE = ImageFilter.UnsharpMask(radius=1, percent=130, threshold=1)
SHARPEN_STRONG = ImageFilter.UnsharpMask(radius=2, percent=160, threshold=0)

# style name -> (brightness, saturation, finishing step)
STYLE_PRESETS: dict[str, tuple[float, float, str]] = {
    "modern": (1.1, 1.2, "sharpen_moderate"),
    "vintage": (0.9, 0.8, "warm_tint"),
    "bold": (1.2, 1.5, "sharpen_strong"),
}


def detect_image_format(data: bytes) -> str | None:
    """Infer image format from magic bytes. Returns PNG, JPEG, WEBP, GIF or None."""
    if len(data) < 12:
        return None
    if data[:8] == b"\x89PNG\r\n\x1a\n":
        return "PNG"
    if data[:2] == b"\xff\xd8":
        return "JPEG"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "WEBP"
    if data[:6] in (b"GIF87a", b"GIF89a"):
        return "GIF"
    return None


def mime_type_for(data: bytes) -> str:
    """MIME type for inline image payloads; PNG when the format is unknown."""
    fmt = detect_image_format(data)
    return f"image/{fmt.lower()}" if fmt else "image/png"


def decode_image(data: bytes, filename: str = "") -> Image.Image:
    """
    Decode image bytes to an RGB or RGBA image.

    Raises:
        ProcessingError: If the bytes are not a readable image
    """
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
        raise ProcessingError(f"Failed to decode image: {e}", filename=filename) from e

    has_alpha = image.mode in ("RGBA", "LA", "PA") or (
        image.mode == "P" and "transparency" in image.info
    )
    target = "RGBA" if has_alpha else "RGB"
    return image if image.mode == target else image.convert(target)


def encode_png(image: Image.Image) -> bytes:
    """Encode losslessly as PNG."""
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def _on_color(image: Image.Image, fn: Callable[[Image.Image], Image.Image]) -> Image.Image:
    """Apply fn to the color channels only, carrying alpha through untouched."""
    if image.mode != "RGBA":
        return fn(image)
    alpha = image.getchannel("A")
    result = fn(image.convert("RGB")).convert("RGBA")
    result.putalpha(alpha)
    return result


def sharpen(image: Image.Image, kernel: ImageFilter.Filter = SHARPEN_DEFAULT) -> Image.Image:
    return _on_color(image, lambda rgb: rgb.filter(kernel))


def normalize(image: Image.Image) -> Image.Image:
    """Stretch luminance so the darkest/brightest 1% reach the full range."""
    return _on_color(
        image, lambda rgb: ImageOps.autocontrast(rgb, cutoff=1, preserve_tone=True)
    )


def modulate(image: Image.Image, brightness: float = 1.0, saturation: float = 1.0) -> Image.Image:
    def _apply(rgb: Image.Image) -> Image.Image:
        out = ImageEnhance.Brightness(rgb).enhance(brightness)
        return ImageEnhance.Color(out).enhance(saturation)

    return _on_color(image, _apply)


def tint(image: Image.Image, color: tuple[int, int, int] = WARM_TINT) -> Image.Image:
    """Keep luminance, replace chroma with the given color."""
    return _on_color(
        image, lambda rgb: ImageOps.colorize(rgb.convert("L"), black=(0, 0, 0), white=color)
    )


def flatten(image: Image.Image, background: tuple[int, int, int] = WHITE) -> Image.Image:
    """Composite transparency onto an opaque background."""
    if image.mode != "RGBA":
        return image.convert("RGB")
    canvas = Image.new("RGB", image.size, background)
    canvas.paste(image, mask=image.getchannel("A"))
    return canvas


def enhance_quality(image: Image.Image) -> Image.Image:
    """
    Upscale into a box of (max(2w, 1024), max(2h, 1024)) keeping aspect ratio,
    then sharpen and normalize.

    Both output edges are at least double the input and the larger one reaches
    at least 1024px.
    """
    width, height = image.size
    box = (max(width * 2, QUALITY_MIN_EDGE), max(height * 2, QUALITY_MIN_EDGE))
    resized = ImageOps.contain(image, box, method=Image.Resampling.LANCZOS)
    logger.debug("Quality upscale %dx%d -> %dx%d", width, height, *resized.size)
    return normalize(sharpen(resized))


def enhance_style(image: Image.Image, style: str) -> Image.Image:
    """Apply a named style preset; unknown names only normalize."""
    preset = STYLE_PRESETS.get(style)
    if preset is None:
        logger.debug("No preset for style=%s; normalizing only", style)
        return normalize(image)
    brightness, saturation, finish = preset
    out = modulate(image, brightness=brightness, saturation=saturation)
    if finish == "sharpen_moderate":
        return sharpen(out, SHARPEN_MODERATE)
    if finish == "sharpen_strong":
        return sharpen(out, SHARPEN_STRONG)
    return tint(out, WARM_TINT)


def enhance_resolution(image: Image.Image) -> Image.Image:
    """Scale 4x when the narrower edge is under 512px, else 2x, then sharpen."""
    width, height = image.size
    factor = 4 if min(width, height) < RESOLUTION_SMALL_EDGE else 2
    resized = image.resize((width * factor, height * factor), Image.Resampling.LANCZOS)
    return sharpen(resized)


def create_similar(image: Image.Image) -> Image.Image:
    """Fit into a white 1024x1024 square, lift brightness/saturation and sharpen."""
    squared = ImageOps.pad(
        flatten(image), SIMILAR_CANVAS, method=Image.Resampling.LANCZOS, color=WHITE
    )
    return sharpen(modulate(squared, brightness=1.1, saturation=1.1))


class RasterEngine:
    """Raster tier: decode, transform, encode and store."""

    def __init__(self, store: ArtifactStore) -> None:
        self.store = store

    def _dimensions(self, image: Image.Image) -> dict[str, Any]:
        width, height = image.size
        return {"width": width, "height": height}

    def enhance(self, data: bytes, options: EnhancementOptions) -> tuple[Artifact, Metadata]:
        """
        Enhance an image without any network dependency.

        Raises:
            ProcessingError: If the input cannot be decoded
        """
        start = time.time()
        source = decode_image(data)
        if options.type == "style":
            result = enhance_style(source, options.style)
        elif options.type == "resolution":
            result = enhance_resolution(source)
        else:
            result = enhance_quality(source)

        artifact = self.store.save(encode_png(result), prefix="enhanced")
        logger.info(
            "Raster enhancement type=%s in %.2fs filename=%s",
            options.type,
            time.time() - start,
            artifact.filename,
        )
        metadata = Metadata(
            tier=TIER_RASTER,
            style=options.style,
            enhancement_type=options.type,
            extra={
                "original": {**self._dimensions(source), "format": detect_image_format(data)},
                "enhanced": self._dimensions(result),
            },
        )
        return artifact, metadata

    def similar(self, data: bytes, options: ReferenceOptions) -> tuple[Artifact, Metadata]:
        """
        Derive a logo from a reference image with local transforms only.

        Raises:
            ProcessingError: If the reference cannot be decoded
        """
        source = decode_image(data)
        result = create_similar(source)
        artifact = self.store.save(encode_png(result), prefix="reference-based")
        logger.info("Raster reference transform filename=%s", artifact.filename)
        metadata = Metadata(
            tier=TIER_RASTER,
            style=options.style,
            business_name=options.business_name,
            modifications=list(options.modifications),
            extra={"reference": {**self._dimensions(source), "format": detect_image_format(data)}},
        )
        return artifact, metadata
