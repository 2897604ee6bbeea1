"""
Synthetic logo generator.

The last-resort tier for text generation. It extracts a business name from the
description, derives initials and a two-stop color gradient, describes the
logo as vector markup (LogoMarkup, serialisable to SVG) and rasterizes that
markup with Pillow. Nothing here touches the network, and any non-empty
description produces an artifact.
"""

import re
from dataclasses import dataclass
from typing import NamedTuple
from xml.sax.saxutils import escape

from PIL import Image, ImageColor, ImageDraw, ImageFont

from logosmith.core.models import TIER_SYNTHETIC, Artifact, Metadata, TextOptions
from logosmith.core.raster import encode_png
from logosmith.core.storage import ArtifactStore
from logosmith.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_NAME = "Logo"
DEFAULT_PRIMARY = "#2563eb"
DEFAULT_TEXT_COLOR = "#ffffff"
DARKEN_PERCENT = 20
MAX_INITIALS = 2

CANVAS_SIZE = 400
CIRCLE_RADIUS = 180
INITIALS_FONT_SIZE = 120
INITIALS_BASELINE = 230
CAPTION_FONT_SIZE = 24
CAPTION_BASELINE = 350
CAPTION_MAX_WIDTH = 380
SUPERSAMPLE = 2

_NAME = r"([A-Z][a-zA-Z]*(?:[ \t]+[A-Z][a-zA-Z]*)*)"
NAME_PATTERNS = (
    re.compile(r"(?i:\bfor)\s+" + _NAME),
    re.compile(_NAME + r"\s+(?i:logo)\b"),
    re.compile(r"(?i:\blogo\s+for)\s+" + _NAME),
)

_BOLD_FONT_CANDIDATES = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
    "/usr/share/fonts/truetype/freefont/FreeSansBold.ttf",
    "/System/Library/Fonts/Supplemental/Arial Bold.ttf",
    "DejaVuSans-Bold.ttf",
    "Arial Bold.ttf",
]
_REGULAR_FONT_CANDIDATES = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
    "/usr/share/fonts/truetype/freefont/FreeSans.ttf",
    "/System/Library/Fonts/Supplemental/Arial.ttf",
    "DejaVuSans.ttf",
    "Arial.ttf",
]


def extract_business_name(description: str) -> str:
    """
    Pull a business name out of a free-text description.

    Tries "for <Name>", "<Name> logo" and "logo for <Name>" in order, where
    <Name> is a run of capitalised words. Falls back to the first two words,
    then to "Logo" for an empty description.
    """
    for pattern in NAME_PATTERNS:
        match = pattern.search(description)
        if match:
            return match.group(1).strip()
    words = description.split()
    return " ".join(words[:2]) or DEFAULT_NAME


def derive_initials(name: str) -> str:
    """First letter of each word, uppercased, at most two characters."""
    return "".join(word[0].upper() for word in name.split())[:MAX_INITIALS]


def parse_color(value: str | None, default: str) -> tuple[int, int, int]:
    """Parse a CSS color string (hex or name); unparseable values give the default."""
    if value:
        try:
            return ImageColor.getrgb(value.strip())[:3]
        except ValueError:
            logger.debug("Ignoring unparseable color %r", value)
    return ImageColor.getrgb(default)[:3]


def _clamp(channel: int) -> int:
    return min(255, max(0, channel))


def to_hex(rgb: tuple[int, int, int]) -> str:
    return "#{:02x}{:02x}{:02x}".format(*rgb)


def adjust_color(color: str, percent: float) -> str:
    """
    Shift every channel by round(2.55 * percent), clamped to [0, 255].

    Negative percent darkens: adjust_color("#2563EB", -20) == "#0030b8".
    """
    amount = round(2.55 * percent)
    r, g, b = parse_color(color, DEFAULT_PRIMARY)
    return to_hex((_clamp(r + amount), _clamp(g + amount), _clamp(b + amount)))


def darken(color: str, percent: float = DARKEN_PERCENT) -> str:
    return adjust_color(color, -percent)


class TextRow(NamedTuple):
    text: str
    baseline: int
    font_size: int
    bold: bool
    fill: str


@dataclass(frozen=True)
class LogoMarkup:
    """Vector description of the synthetic logo: gradient disc, initials and caption."""

    name: str
    initials: str
    primary: str
    gradient_end: str
    text_color: str
    size: int = CANVAS_SIZE

    @property
    def center(self) -> int:
        return self.size // 2

    def circle_box(self, scale: int = 1) -> tuple[int, int, int, int]:
        """Bounding box of the gradient disc at the given scale."""
        low = (self.center - CIRCLE_RADIUS) * scale
        high = (self.center + CIRCLE_RADIUS) * scale
        return low, low, high, high

    def text_rows(self) -> list[TextRow]:
        """Centered text lines, top to bottom. Both renderers draw exactly these."""
        return [
            TextRow(self.initials, INITIALS_BASELINE, INITIALS_FONT_SIZE, True, self.text_color),
            TextRow(self.name, CAPTION_BASELINE, CAPTION_FONT_SIZE, False, self.primary),
        ]

    def to_svg(self) -> str:
        center = self.center
        texts = "".join(
            f'<text x="{center}" y="{row.baseline}" font-family="Arial, sans-serif" '
            f'font-size="{row.font_size}" font-weight="{"bold" if row.bold else "normal"}" '
            f'text-anchor="middle" fill="{row.fill}">{escape(row.text)}</text>'
            for row in self.text_rows()
        )
        return (
            f'<svg width="{self.size}" height="{self.size}" xmlns="http://www.w3.org/2000/svg">'
            "<defs>"
            '<linearGradient id="grad1" x1="0%" y1="0%" x2="100%" y2="100%">'
            f'<stop offset="0%" style="stop-color:{self.primary};stop-opacity:1" />'
            f'<stop offset="100%" style="stop-color:{self.gradient_end};stop-opacity:1" />'
            "</linearGradient>"
            "</defs>"
            f'<circle cx="{center}" cy="{center}" r="{CIRCLE_RADIUS}" fill="url(#grad1)" />'
            f"{texts}"
            "</svg>"
        )


def build_markup(description: str, colors: list[str] | None = None) -> LogoMarkup:
    """Derive the full logo markup from a description and optional colors."""
    colors = colors or []
    name = extract_business_name(description)
    primary = to_hex(parse_color(colors[0] if colors else None, DEFAULT_PRIMARY))
    text_color = to_hex(parse_color(colors[1] if len(colors) > 1 else None, DEFAULT_TEXT_COLOR))
    return LogoMarkup(
        name=name,
        initials=derive_initials(name),
        primary=primary,
        gradient_end=darken(primary),
        text_color=text_color,
    )


def _load_font(size: int, bold: bool = False) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    candidates = _BOLD_FONT_CANDIDATES if bold else _REGULAR_FONT_CANDIDATES
    for path in candidates:
        try:
            return ImageFont.truetype(path, size)
        except OSError:
            continue
    return ImageFont.load_default(size=size)


def _diagonal_gradient(size: int, start: str, end: str) -> Image.Image:
    """Top-left to bottom-right linear gradient, one color per anti-diagonal."""
    start_rgb = ImageColor.getrgb(start)[:3]
    end_rgb = ImageColor.getrgb(end)[:3]
    gradient = Image.new("RGB", (size, size), start_rgb)
    draw = ImageDraw.Draw(gradient)
    steps = 2 * size - 2
    for k in range(steps + 1):
        t = k / steps if steps else 0.0
        color = tuple(round(s + (e - s) * t) for s, e in zip(start_rgb, end_rgb))
        draw.line([(k, 0), (0, k)], fill=color)
    return gradient


def _draw_centered(
    draw: ImageDraw.ImageDraw,
    text: str,
    center_x: float,
    baseline: float,
    font: ImageFont.FreeTypeFont | ImageFont.ImageFont,
    fill: str,
) -> None:
    if not text:
        return
    try:
        draw.text((center_x, baseline), text, font=font, fill=fill, anchor="ms")
    except (ValueError, TypeError):
        # bitmap fonts have no anchor support; center on the bounding box
        left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
        draw.text(
            (center_x - (right - left) / 2, baseline - (bottom - top)),
            text,
            font=font,
            fill=fill,
        )


def rasterize(markup: LogoMarkup) -> Image.Image:
    """Render LogoMarkup to an RGBA image of markup.size pixels."""
    scale = SUPERSAMPLE
    size = markup.size * scale
    canvas = Image.new("RGBA", (size, size), (0, 0, 0, 0))

    box = markup.circle_box(scale)
    disc = _diagonal_gradient(box[2] - box[0], markup.primary, markup.gradient_end)
    mask = Image.new("L", disc.size, 0)
    ImageDraw.Draw(mask).ellipse((0, 0, disc.size[0] - 1, disc.size[1] - 1), fill=255)
    canvas.paste(disc, box[:2], mask)

    draw = ImageDraw.Draw(canvas)
    max_width = CAPTION_MAX_WIDTH * scale
    for row in markup.text_rows():
        font_size = row.font_size * scale
        font = _load_font(font_size, bold=row.bold)
        # shrink lines that would overflow the canvas
        while font_size > 8 * scale and draw.textlength(row.text, font=font) > max_width:
            font_size -= scale
            font = _load_font(font_size, bold=row.bold)
        _draw_centered(draw, row.text, markup.center * scale, row.baseline * scale, font, row.fill)

    return canvas.resize((markup.size, markup.size), Image.Resampling.LANCZOS)


class SyntheticGenerator:
    """Synthetic tier: description in, rendered logo artifact out."""

    def __init__(self, store: ArtifactStore) -> None:
        self.store = store

    def generate(self, description: str, options: TextOptions) -> tuple[Artifact, Metadata]:
        markup = build_markup(description, options.colors)
        image = rasterize(markup)
        artifact = self.store.save(encode_png(image), prefix="fallback")
        logger.info(
            "Synthetic logo name=%r initials=%s filename=%s",
            markup.name,
            markup.initials,
            artifact.filename,
        )
        metadata = Metadata(
            tier=TIER_SYNTHETIC,
            style=options.style,
            colors=list(options.colors) or [markup.primary, markup.text_color],
            business_type=options.business_type,
            business_name=markup.name,
            description=description,
            extra={"initials": markup.initials, "svg": markup.to_svg()},
        )
        return artifact, metadata
