# design_tokens/blocks.py
"""
Block classification of structural samples.

Samples are walked in document order:
- nav / hero / footer / contact always form their own block
- grid-like class hints, 3+ aligned columns or 3+ children form a gridSection
- a non-neutral background forms a strip
- everything else accumulates into the open content block,
  which any of the blocks above closes
"""

import re
from dataclasses import replace
from typing import List, Optional, Sequence

from .clustering import color_distance
from .colors import parse_color
from .config import EngineConfig, LayoutConfig, get_default_config
from .logging_config import get_logger
from .models import LayoutBlock, PaletteEntry, StructuralSample

logger = get_logger(__name__)

BOUNDARY_ROLES = ("nav", "hero", "footer", "contact")
NEUTRAL = "bgNeutral"

ROLE_CLASS_WORDS = {
    "footer": ("footer",),
    "nav": ("nav", "navbar", "navigation", "menu", "topbar"),
    "hero": ("hero", "banner", "jumbotron", "masthead"),
    "contact": ("contact", "contacts"),
}

PALETTE_BACKGROUNDS = {
    "background": NEUTRAL,
    "surface": NEUTRAL,
    "text": "bgDark",
    "primary": "bgPrimary",
    "accent": "bgAccent",
    "secondary": "bgSecondary",
}


# ---------- Hints ----------
def _class_names(hint: str) -> List[str]:
    return [c for c in (hint or "").lower().split() if c]


def _class_words(hint: str) -> List[str]:
    return [w for w in re.split(r"[^a-z0-9]+", (hint or "").lower()) if w]


def has_grid_hint(hint: str, config: LayoutConfig) -> bool:
    names = _class_names(hint)
    words = _class_words(hint)
    for marker in config.grid_class_hints:
        if marker.endswith("-"):
            if any(name.startswith(marker) for name in names):
                return True
        elif marker in words or marker + "s" in words:
            return True
    return False


def infer_role(sample: StructuralSample) -> Optional[str]:
    """Explicit role hint first, then the tag, then class-name words."""
    if sample.role:
        return sample.role
    tag = (sample.tag or "").lower()
    if tag == "footer":
        return "footer"
    if tag in ("nav", "header"):
        return "nav"
    words = _class_words(sample.class_hint)
    for role, markers in ROLE_CLASS_WORDS.items():
        if any(m in words for m in markers):
            return role
    return None


# ---------- Background ----------
def classify_background(value: Optional[str], palette: Sequence[PaletteEntry],
                        config: EngineConfig = None) -> str:
    """Map a raw background color to a background role label via the nearest palette entry."""
    config = config or get_default_config()
    parsed = parse_color(value) if value else None
    if parsed is None or not parsed.ok or parsed.color.a < config.colors.min_alpha:
        return NEUTRAL
    color = parsed.color

    nearest, nearest_distance = None, None
    for entry in palette:
        target = parse_color(entry.hex).color
        distance = color_distance(color.key, target.key)
        if nearest is None or distance < nearest_distance:
            nearest, nearest_distance = entry, distance
    if nearest is not None and nearest_distance <= config.layout.palette_match_distance:
        return PALETTE_BACKGROUNDS.get(nearest.role, "bgAlt")

    t = config.roles
    if color.brightness > t.background_min_brightness and color.saturation < t.background_max_saturation:
        return NEUTRAL
    if color.brightness < t.text_max_brightness:
        return "bgDark"
    return "bgAlt"


# ---------- Blocks ----------
def _block(kind: str, sample: StructuralSample, background: str, columns: int) -> LayoutBlock:
    return LayoutBlock(
        type=kind,
        background_role=background,
        columns=columns,
        padding_y=sample.padding_y,
        max_width_px=sample.max_width_px,
        members=[sample],
    )


def classify_blocks(samples: Sequence[StructuralSample], config: EngineConfig = None,
                    palette: Sequence[PaletteEntry] = ()) -> List[LayoutBlock]:
    config = config or get_default_config()
    lc = config.layout
    blocks: List[LayoutBlock] = []
    content: Optional[LayoutBlock] = None

    def close_content():
        nonlocal content
        if content is not None and content.members:
            blocks.append(content)
        content = None

    for sample in sorted(samples, key=lambda s: s.order):
        background = sample.background_role
        if not background:
            background = classify_background(sample.background_color, palette, config)
            sample = replace(sample, background_role=background)
        columns = sample.columns if isinstance(sample.columns, int) and sample.columns > 0 else 1
        role = infer_role(sample)

        if role in BOUNDARY_ROLES:
            close_content()
            blocks.append(_block(role, sample, background, columns))
            continue

        aligned = max(columns, sample.children_count or 0)
        if role == "gridSection" or has_grid_hint(sample.class_hint, lc) or aligned >= lc.grid_min_columns:
            close_content()
            grid_columns = columns if columns > 1 else lc.default_columns
            blocks.append(_block("gridSection", sample, background, grid_columns))
            continue

        if background not in lc.neutral_background_roles:
            close_content()
            blocks.append(_block("strip", sample, background, columns))
            continue

        if content is None:
            content = _block("content", sample, NEUTRAL, columns)
        else:
            content.members.append(sample)

    close_content()
    logger.debug(f"classified {len(samples)} samples into {len(blocks)} blocks")
    return blocks
