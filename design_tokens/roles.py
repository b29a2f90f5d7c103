# design_tokens/roles.py
"""
Semantic role assignment.

Walks the ranked clusters once per role, in priority order
background -> text -> accent -> primary -> secondary -> remaining.
The highest-weight candidate satisfying a role's predicate takes it
(earlier position breaks ties) and leaves candidacy for later roles.
Roles with no candidate are simply absent.
"""

import math
from typing import Callable, List, Optional, Sequence

from .config import EngineConfig, RoleThresholds, get_default_config
from .logging_config import get_logger
from .models import ROLE_NAMES, ColorCluster, PaletteEntry

logger = get_logger(__name__)


def accent_bonus(hue: float, thresholds: RoleThresholds) -> float:
    for low, high, bonus in thresholds.accent_hue_bonuses:
        if low <= hue <= high:
            return bonus
    return 1.0


def _pick(clusters: Sequence[ColorCluster], taken: List[Optional[str]],
          predicate: Callable[[ColorCluster], bool],
          weight: Callable[[ColorCluster], float]) -> Optional[int]:
    best = None
    best_weight = None
    for i, cluster in enumerate(clusters):
        if taken[i] is not None or not predicate(cluster):
            continue
        w = weight(cluster)
        if best is None or w > best_weight:
            best, best_weight = i, w
    return best


def _entry(cluster: ColorCluster, role: str) -> PaletteEntry:
    centroid = cluster.centroid
    return PaletteEntry(
        hex=cluster.representative.hex,
        rgb_string=cluster.representative.rgb_string,
        hsl=centroid.hsl,
        brightness=int(math.floor(centroid.brightness + 0.5)),
        saturation=int(math.floor(centroid.saturation + 0.5)),
        weight=round(cluster.total_weight, 3),
        count=cluster.total_count,
        role=role,
        role_name=ROLE_NAMES[role],
    )


def assign_roles(clusters: Sequence[ColorCluster], config: EngineConfig = None) -> List[PaletteEntry]:
    """Label ranked clusters with design roles; output keeps the ranked order."""
    config = config or get_default_config()
    t = config.roles
    taken: List[Optional[str]] = [None] * len(clusters)

    def claim(role, predicate, weight=lambda c: c.total_weight):
        index = _pick(clusters, taken, predicate, weight)
        if index is not None:
            taken[index] = role
        return index

    claim("background", lambda c: c.centroid.brightness > t.background_min_brightness
          and c.centroid.saturation < t.background_max_saturation)
    claim("text", lambda c: c.centroid.brightness < t.text_max_brightness
          and c.centroid.saturation < t.text_max_saturation)
    claim("accent",
          lambda c: c.centroid.saturation > t.accent_min_saturation
          and t.accent_min_brightness < c.centroid.brightness < t.accent_max_brightness,
          lambda c: c.total_weight * accent_bonus(c.centroid.hue, t))
    primary = claim("primary", lambda c: c.centroid.saturation > t.primary_min_saturation)
    if primary is not None:
        claim("secondary", lambda c: True)

    has_background = "background" in taken
    used = set(taken)
    for i, cluster in enumerate(clusters):
        if taken[i] is not None:
            continue
        brightness = cluster.centroid.brightness
        role = "additional"
        if has_background:
            if brightness > t.surface_min_brightness and "surface" not in used:
                role = "surface"
            elif (t.border_min_brightness <= brightness <= t.border_max_brightness
                  and cluster.centroid.saturation < t.border_max_saturation
                  and "border" not in used):
                role = "border"
        taken[i] = role
        used.add(role)

    palette = [_entry(cluster, role) for cluster, role in zip(clusters, taken)]
    logger.debug(f"assigned roles: {[p.role for p in palette]}")
    return palette
