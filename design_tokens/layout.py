# design_tokens/layout.py
"""
Layout token derivation from structural measurements.

Every numeric aggregate is a median (wrapper elements skew the raw
measurements heavily to the right), snapped once to the 8px design grid.
Invalid measurements (negative, NaN, infinite, zero) are ignored.
"""

import math
from collections import Counter
from typing import Any, Dict, Iterable, List, Optional

import numpy as np

from .config import EngineConfig, LayoutConfig, get_default_config
from .logging_config import get_logger
from .models import LayoutInput

logger = get_logger(__name__)


# ---------- Helpers ----------
def is_valid_measure(value) -> bool:
    return (isinstance(value, (int, float)) and not isinstance(value, bool)
            and math.isfinite(value) and value > 0)


def median(values: Iterable[float]) -> Optional[float]:
    clean = [float(v) for v in values if is_valid_measure(v)]
    if not clean:
        return None
    return float(np.median(clean))


def snap(value: float, step: int = 8) -> int:
    """Round to the nearest multiple of `step`, halves rounding up."""
    return int(math.floor(value / step + 0.5)) * step


def px(value) -> str:
    if isinstance(value, str):
        return value
    return f"{int(math.floor(value + 0.5))}px"


def default_layout_tokens(config: EngineConfig = None) -> Dict[str, Any]:
    lc = (config or get_default_config()).layout
    return {
        "container": {"maxWidth": px(lc.default_container_width)},
        "spacing": {
            "sectionY": px(lc.default_section_padding),
            "sectionGap": px(lc.default_section_gap),
            "cardPadding": px(lc.default_card_padding),
        },
        "radius": {"card": px(lc.default_card_radius), "button": px(lc.default_button_radius)},
        "grid": {
            "columnsDesktop": lc.default_columns,
            "columnsTablet": min(lc.tablet_columns, lc.default_columns),
            "columnsMobile": 1,
            "gap": px(lc.default_grid_gap),
        },
        "shadow": {"card": lc.default_card_shadow, "soft": lc.default_soft_shadow},
    }


# ---------- Container ----------
def detect_container_width(layout: LayoutInput, config: LayoutConfig) -> float:
    """
    (a) explicit common width, else (b) median max-width of centered elements
    narrower than the viewport, else (c) the default width.
    When no element is marked centered, all max-widths are used for (b).
    """
    if is_valid_measure(layout.common_container_width_px):
        return float(layout.common_container_width_px)

    viewport = layout.viewport_width_px if is_valid_measure(layout.viewport_width_px) else None
    def fits(s):
        return is_valid_measure(s.max_width_px) and (viewport is None or s.max_width_px < viewport)

    candidates = [s for s in layout.sections if fits(s)]
    centered = [s for s in candidates if s.is_centered]
    widths = [s.max_width_px for s in (centered or candidates)]
    value = median(widths)
    if value is None:
        return float(config.default_container_width)
    return float(snap(value, config.grid_step))


def _snapped_median(values: Iterable[float], default: int, step: int) -> int:
    value = median(values)
    if value is None:
        return default
    return snap(value, step)


# ---------- Public ----------
def derive_layout_tokens(layout: Optional[LayoutInput], config: EngineConfig = None) -> Dict[str, Any]:
    config = config or get_default_config()
    lc = config.layout
    if layout is None or (not layout.sections and not is_valid_measure(layout.common_container_width_px)):
        return default_layout_tokens(config)

    sections = layout.sections
    step = lc.grid_step
    tokens = default_layout_tokens(config)

    tokens["container"]["maxWidth"] = px(detect_container_width(layout, lc))
    tokens["spacing"] = {
        "sectionY": px(_snapped_median((s.padding_y for s in sections), lc.default_section_padding, step)),
        "sectionGap": px(_snapped_median((s.margin_y for s in sections), lc.default_section_gap, step)),
        "cardPadding": px(_snapped_median((s.card_padding for s in sections), lc.default_card_padding, step)),
    }

    radii: List[float] = [r for s in sections for r in s.card_radii]
    card_radius = median(radii)
    if card_radius is not None:
        tokens["radius"] = {"card": px(snap(card_radius, step)), "button": px(snap(card_radius, step))}

    columns = median(s.columns for s in sections if is_valid_measure(s.columns) and s.columns >= 2)
    if columns is not None:
        desktop = max(1, min(lc.max_columns, int(math.floor(columns + 0.5))))
        tokens["grid"]["columnsDesktop"] = desktop
        tokens["grid"]["columnsTablet"] = min(lc.tablet_columns, desktop)
    tokens["grid"]["gap"] = px(_snapped_median((s.gap_px for s in sections), lc.default_grid_gap, step))

    shadows = Counter(
        s.box_shadow.strip() for s in sections
        if isinstance(s.box_shadow, str) and s.box_shadow.strip() and s.box_shadow.strip() != "none"
    )
    if shadows:
        tokens["shadow"]["card"] = shadows.most_common(1)[0][0]

    logger.debug(f"layout tokens from {len(sections)} sections: {tokens['container']}, {tokens['spacing']}")
    return tokens
