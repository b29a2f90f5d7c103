# design_tokens/semantics.py
"""
Contrast and theme classification for a labeled palette.

contrast = |brightness(background) - brightness(text)| on the 0-255
perceptual brightness scale; good contrast means it exceeds the configured
cutoff (125). This is a brightness proxy, not a WCAG ratio.
"""

import colorsys
from collections import Counter
from typing import Optional, Sequence

import numpy as np

from .config import EngineConfig, get_default_config
from .models import PaletteEntry, PaletteSemantics


def _find(palette: Sequence[PaletteEntry], role: str) -> Optional[PaletteEntry]:
    for entry in palette:
        if entry.role == role:
            return entry
    return None


# ---------- Tone classifier ----------
def tone_from_palette(hex_colors: Sequence[str]) -> str:
    if not hex_colors:
        return "neutral"
    rgbs = [(int(h[1:3], 16) / 255.0, int(h[3:5], 16) / 255.0, int(h[5:7], 16) / 255.0)
            for h in hex_colors]
    hsv = np.array([colorsys.rgb_to_hsv(r, g, b) for r, g, b in rgbs])
    avg_h, avg_s, avg_v = hsv.mean(axis=0)

    if avg_s > 0.7 and avg_v > 0.7:
        return "neon"
    if avg_v < 0.5 and avg_s < 0.5:
        return "muted"
    if avg_s < 0.1:
        return "neutral"
    if avg_s < 0.35 and avg_v > 0.8:
        return "pastel"
    if avg_h < 0.17 or avg_h > 0.88:
        return "warm"
    if 0.17 <= avg_h <= 0.6:
        return "cool"
    return "neutral"


# ---------- Contrast / theme ----------
def contrast_between(background: PaletteEntry, text: PaletteEntry) -> float:
    return float(abs(background.brightness - text.brightness))


def classify_palette(palette: Sequence[PaletteEntry], config: EngineConfig = None) -> PaletteSemantics:
    config = config or get_default_config()
    t = config.roles
    if not palette:
        return PaletteSemantics()

    background = _find(palette, "background")
    text = _find(palette, "text")
    primary = _find(palette, "primary")
    accent = _find(palette, "accent")

    contrast = None
    has_good_contrast = False
    if background is not None and text is not None:
        contrast = contrast_between(background, text)
        has_good_contrast = contrast > t.contrast_threshold

    average = float(np.mean([p.brightness for p in palette]))
    distribution = Counter(p.role for p in palette)

    return PaletteSemantics(
        is_dark_theme=average < t.dark_theme_brightness,
        has_good_contrast=has_good_contrast,
        primary_hex=primary.hex if primary else None,
        accent_hex=accent.hex if accent else None,
        contrast=contrast,
        average_brightness=round(average, 2),
        color_count=len(palette),
        color_distribution=dict(distribution),
        tone=tone_from_palette([p.hex for p in palette]),
    )
