# design_tokens/analyzers.py
"""
Design token analyzers (pipeline entry points)

Features:
- Record loaders for the extractor's JSON document (colors + layout sections)
- Palette inference: normalize -> cluster -> assign roles
- Fallback to hue-bucket-only grouping when fine clustering fails
- Contrast / theme / tone semantics
- Median-based layout tokens and ordered block structure

All entry points are pure functions of their arguments; they keep no state
between calls and can run concurrently.
"""

import math
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from .blocks import classify_blocks
from .clustering import bucket_only_clusters, cluster_colors
from .colors import normalize_samples
from .config import EngineConfig, get_default_config
from .exceptions import InputFormatError
from .layout import derive_layout_tokens
from .logging_config import get_logger
from .models import (
    ColorSample, DesignTokenSet, LayoutInput, PaletteEntry, SourceTag, StructuralSample,
)
from .roles import assign_roles
from .semantics import classify_palette

logger = get_logger(__name__)


# ---------- Record loaders ----------
def _number(value) -> Optional[float]:
    """Finite, non-negative number or None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return float(value)


def _first(record: Mapping[str, Any], *keys):
    for key in keys:
        if key in record and record[key] is not None:
            return record[key]
    return None


def _load_tag(record) -> Optional[SourceTag]:
    if not isinstance(record, Mapping):
        return None
    return SourceTag(
        element_tag=str(_first(record, "tag", "elementTag") or ""),
        css_property=str(_first(record, "property", "cssProperty") or ""),
        area_px2=_number(_first(record, "areaPx2", "area")) or 0.0,
    )


def load_color_samples(records: Iterable[Any]) -> List[ColorSample]:
    """
    Convert extractor records ({value, weight, count, tags}) or bare strings
    into ColorSamples. Records that cannot be read are skipped.
    """
    samples = []
    for record in records or []:
        if isinstance(record, str):
            samples.append(ColorSample(value=record))
            continue
        if not isinstance(record, Mapping) or not isinstance(record.get("value"), str):
            logger.debug(f"skipping color record {record!r}")
            continue
        weight = record.get("weight", 1.0)
        count = record.get("count", 1)
        if _number(weight) is None or _number(count) is None or count < 1 or int(count) != count:
            logger.debug(f"skipping color record with bad weight/count: {record!r}")
            continue
        tags = tuple(t for t in (_load_tag(r) for r in record.get("tags") or []) if t is not None)
        samples.append(ColorSample(value=record["value"], weight=float(weight), count=int(count), source_tags=tags))
    return samples


def _load_section(record, index: int) -> Optional[StructuralSample]:
    if not isinstance(record, Mapping):
        return None
    columns = _number(record.get("columns"))
    children = _number(_first(record, "childrenCount", "children"))
    order = _number(record.get("order", record.get("index")))
    radii = _first(record, "cardRadii", "cardRadius") or ()
    if not isinstance(radii, (list, tuple)):
        radii = (radii,)
    return StructuralSample(
        tag=str(record.get("tag") or "section").lower(),
        class_hint=str(_first(record, "classHint", "className") or ""),
        padding_y=_number(record.get("paddingY")),
        max_width_px=_number(record.get("maxWidthPx")),
        columns=int(columns) if columns else 1,
        background_role=_first(record, "backgroundRole"),
        is_centered=bool(record.get("isCentered", False)),
        children_count=int(children) if children else 0,
        order=int(order) if order is not None else index,
        role=_first(record, "role"),
        background_color=_first(record, "backgroundColor", "background"),
        margin_y=_number(record.get("marginY")),
        card_radii=tuple(r for r in (_number(v) for v in radii) if r is not None),
        card_padding=_number(record.get("cardPadding")),
        gap_px=_number(_first(record, "gapPx", "gap")),
        box_shadow=_first(record, "boxShadow"),
    )


def load_layout_input(data: Optional[Mapping[str, Any]]) -> LayoutInput:
    """Read {sections, common: {containerMaxWidthPx}, viewportWidth} into a LayoutInput."""
    if not isinstance(data, Mapping):
        return LayoutInput()
    sections = []
    for i, record in enumerate(data.get("sections") or []):
        section = _load_section(record, i)
        if section is None:
            logger.debug(f"skipping section record {record!r}")
            continue
        sections.append(section)
    common = data.get("common") if isinstance(data.get("common"), Mapping) else {}
    return LayoutInput(
        sections=tuple(sections),
        common_container_width_px=_number(_first(common, "containerMaxWidthPx") or data.get("commonContainerWidthPx")),
        viewport_width_px=_number(_first(data, "viewportWidthPx", "viewportWidth")),
    )


# ---------- Palette ----------
def build_palette(samples: Sequence[ColorSample], config: EngineConfig = None) -> List[PaletteEntry]:
    """Normalize, cluster and label colors. Never raises for bad samples."""
    config = config or get_default_config()
    colors = normalize_samples(samples, config)
    if not colors:
        return []
    try:
        clusters = cluster_colors(colors, config)
    except Exception as e:
        logger.warning(f"clustering failed, falling back to hue buckets: {e}")
        try:
            clusters = bucket_only_clusters(colors, config)
        except Exception as fallback_error:
            logger.error(f"hue-bucket fallback failed, returning empty palette: {fallback_error}")
            return []
    return assign_roles(clusters, config)


# ---------- Full pipeline ----------
def analyze_samples(color_samples: Sequence[ColorSample],
                    layout: Union[LayoutInput, Sequence[StructuralSample], None] = None,
                    config: EngineConfig = None) -> DesignTokenSet:
    config = config or get_default_config()
    if layout is not None and not isinstance(layout, LayoutInput):
        layout = LayoutInput(sections=tuple(layout))

    palette = build_palette(color_samples or [], config)
    semantics = classify_palette(palette, config)
    layout_tokens = derive_layout_tokens(layout, config)
    blocks = classify_blocks(layout.sections, config, palette) if layout is not None else []

    logger.info(
        f"design tokens: {len(palette)} colors, {len(blocks)} blocks, "
        f"dark={semantics.is_dark_theme}, contrast_ok={semantics.has_good_contrast}"
    )
    return DesignTokenSet(palette=palette, semantics=semantics, layout=layout_tokens, blocks=blocks)


def analyze_payload(payload: Mapping[str, Any], config: EngineConfig = None) -> DesignTokenSet:
    """
    Analyze a JSON-style document:
      {"colors": [{value, weight, count, tags}], "layout": {"sections": [...], ...}}
    """
    if not isinstance(payload, Mapping):
        raise InputFormatError("payload must be a JSON object", context={"type": type(payload).__name__})
    colors = payload.get("colors") or []
    if not isinstance(colors, (list, tuple)):
        raise InputFormatError("'colors' must be a list", context={"type": type(colors).__name__})
    layout_data = payload.get("layout")
    layout = load_layout_input(layout_data) if layout_data is not None else None
    return analyze_samples(load_color_samples(colors), layout, config)
