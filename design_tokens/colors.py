# design_tokens/colors.py
"""
Color sample normalizer.

Features:
- Ordered grammar dispatch: hex (8/6/4/3 digit), rgb()/rgba(), hsl()/hsla(), CSS names
- Tagged ParsedColor result; bad input is reported, never raised
- Alpha filtering (alpha < min_alpha dropped, partial alpha scales weight)
- Context weighting from source tags (element, CSS property, covered area)
- Format-insensitive dedup on canonical (r, g, b)
"""

import colorsys
import math
import re
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from PIL import ImageColor

from .config import ColorConfig, EngineConfig, get_default_config
from .logging_config import get_logger
from .models import CanonicalColor, ColorSample, ParsedColor, SourceTag, WeightedColor

logger = get_logger(__name__)

# ---------- Grammar ----------
_NUM = r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:e[+-]?\d+)?"
_SEP = r"\s*[,\s]\s*"

REJECTED_KEYWORDS = frozenset({"transparent", "currentcolor", "inherit", "none", "initial", "unset"})

HEX_LONG_RE = re.compile(r"#([0-9a-f]{8}|[0-9a-f]{6})")
HEX_SHORT_RE = re.compile(r"#([0-9a-f]{4}|[0-9a-f]{3})")
RGB_RE = re.compile(
    rf"rgba?\(\s*({_NUM}%?){_SEP}({_NUM}%?){_SEP}({_NUM}%?)\s*(?:[,/]\s*({_NUM}%?)\s*)?\)"
)
HSL_RE = re.compile(
    rf"hsla?\(\s*({_NUM})(?:deg)?{_SEP}({_NUM})%{_SEP}({_NUM})%\s*(?:[,/]\s*({_NUM}%?)\s*)?\)"
)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _channel(token: str) -> Optional[int]:
    """0-255 channel, or None when the number overflows to infinity."""
    if token.endswith("%"):
        value = float(token[:-1]) * 255.0 / 100.0
    else:
        value = float(token)
    if not math.isfinite(value):
        return None
    return int(_clamp(_round_half_up(value), 0, 255))


def _alpha(token: Optional[str]) -> Optional[float]:
    if token is None:
        return 1.0
    if token.endswith("%"):
        value = float(token[:-1]) / 100.0
    else:
        value = float(token)
    if not math.isfinite(value):
        return None
    return _clamp(value, 0.0, 1.0)


def _parse_hex_long(digits: str) -> CanonicalColor:
    r, g, b = int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)
    a = int(digits[6:8], 16) / 255.0 if len(digits) == 8 else 1.0
    return CanonicalColor(r, g, b, a)


def _parse_hex_short(digits: str) -> CanonicalColor:
    r, g, b = (int(d * 2, 16) for d in digits[:3])
    a = int(digits[3] * 2, 16) / 255.0 if len(digits) == 4 else 1.0
    return CanonicalColor(r, g, b, a)


def hsl_to_rgb(h: float, s: float, l: float) -> Tuple[int, int, int]:
    """h in degrees, s and l in percent."""
    s = _clamp(s, 0.0, 100.0) / 100.0
    l = _clamp(l, 0.0, 100.0) / 100.0
    r, g, b = colorsys.hls_to_rgb((h % 360.0) / 360.0, l, s)
    return _round_half_up(r * 255), _round_half_up(g * 255), _round_half_up(b * 255)


def parse_color(value: str) -> ParsedColor:
    """
    Parse one CSS color string into a ParsedColor.
    Order: rejected keywords, long hex, short hex, rgb(a), hsl(a), named colors.
    """
    if not isinstance(value, str):
        return ParsedColor.invalid("not a string")
    text = value.strip().lower()
    if not text:
        return ParsedColor.invalid("empty")
    if text in REJECTED_KEYWORDS:
        return ParsedColor.invalid(f"keyword {text}")
    if "url(" in text:
        return ParsedColor.invalid("image reference")

    m = HEX_LONG_RE.fullmatch(text)
    if m:
        return ParsedColor.valid(_parse_hex_long(m.group(1)))
    m = HEX_SHORT_RE.fullmatch(text)
    if m:
        return ParsedColor.valid(_parse_hex_short(m.group(1)))
    m = RGB_RE.fullmatch(text)
    if m:
        channels = [_channel(t) for t in m.group(1, 2, 3)]
        alpha = _alpha(m.group(4))
        if None in channels or alpha is None:
            return ParsedColor.invalid("non-finite number")
        return ParsedColor.valid(CanonicalColor(*channels, alpha))
    m = HSL_RE.fullmatch(text)
    if m:
        h, s, l = (float(t) for t in m.group(1, 2, 3))
        alpha = _alpha(m.group(4))
        if not all(math.isfinite(v) for v in (h, s, l)) or alpha is None:
            return ParsedColor.invalid("non-finite number")
        r, g, b = hsl_to_rgb(h, s, l)
        return ParsedColor.valid(CanonicalColor(r, g, b, alpha))
    if text in ImageColor.colormap:
        r, g, b = ImageColor.getrgb(text)[:3]
        return ParsedColor.valid(CanonicalColor(r, g, b, 1.0))
    return ParsedColor.invalid("unrecognized format")


# ---------- Weighting ----------
def context_weight(tags: Iterable[SourceTag], config: ColorConfig) -> float:
    """Sum of element weight x property weight x area factor over the source tags."""
    total = 0.0
    for tag in tags:
        element = config.element_weights.get((tag.element_tag or "").lower(), 1.0)
        prop = config.property_weights.get((tag.css_property or "").lower(), 1.0)
        area = tag.area_px2 if _is_finite(tag.area_px2) and tag.area_px2 > 0 else 0.0
        total += element * prop * (1.0 + math.log10(1.0 + area / config.area_scale_px2))
    return total


def _is_finite(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _base_weight(sample: ColorSample, config: ColorConfig) -> Optional[float]:
    if not _is_finite(sample.weight) or sample.weight < 0:
        return None
    if not isinstance(sample.count, int) or isinstance(sample.count, bool) or sample.count < 1:
        return None
    if sample.weight > 0:
        return float(sample.weight)
    if sample.source_tags:
        weight = context_weight(sample.source_tags, config)
        if weight > 0:
            return weight
    return float(sample.count)


# ---------- Normalize + dedup ----------
def normalize_samples(samples: Sequence[ColorSample], config: EngineConfig = None) -> List[WeightedColor]:
    """
    Parse, filter, weight and merge raw samples.
    Returns WeightedColors sorted by descending weight (ties keep first appearance),
    which is the ordering cluster_colors() requires.
    """
    config = config or get_default_config()
    color_config = config.colors
    merged: Dict[Tuple[int, int, int], WeightedColor] = {}
    dropped = 0

    for sample in samples:
        parsed = parse_color(sample.value)
        if not parsed.ok:
            dropped += 1
            logger.debug(f"dropping color {sample.value!r}: {parsed.reason}")
            continue
        color = parsed.color
        if color.a < color_config.min_alpha:
            dropped += 1
            logger.debug(f"dropping color {sample.value!r}: alpha {color.a:.3f}")
            continue
        weight = _base_weight(sample, color_config)
        if weight is None:
            dropped += 1
            logger.debug(f"dropping color {sample.value!r}: bad weight/count")
            continue
        if color.a < 1.0:
            weight *= color.a

        entry = merged.get(color.key)
        if entry is None:
            merged[color.key] = WeightedColor(
                color=color,
                weight=weight,
                count=sample.count,
                source_tags=list(sample.source_tags[:color_config.max_source_tags]),
            )
            continue
        entry.weight += weight
        entry.count += sample.count
        if color.a > entry.color.a:
            entry.color = replace(entry.color, a=color.a)
        room = color_config.max_source_tags - len(entry.source_tags)
        if room > 0:
            entry.source_tags.extend(sample.source_tags[:room])

    result = sorted(merged.values(), key=lambda c: -c.weight)
    logger.debug(f"normalized {len(samples)} samples -> {len(result)} colors ({dropped} dropped)")
    return result


def normalize_values(values: Sequence[str], weights: Optional[Sequence[float]] = None,
                     config: EngineConfig = None) -> List[WeightedColor]:
    """Convenience wrapper for plain color strings, one occurrence each."""
    if weights is None:
        samples = [ColorSample(value=v) for v in values]
    else:
        samples = [ColorSample(value=v, weight=w) for v, w in zip(values, weights)]
    return normalize_samples(samples, config)
