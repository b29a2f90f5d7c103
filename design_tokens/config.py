"""
Configuration for the token engine.

All heuristic constants live here as frozen dataclasses:
- ColorConfig: normalizer and context weighting
- ClusteringConfig: hue buckets, distance thresholds, cluster counts
- RoleThresholds: role predicates and contrast/theme cutoffs
- LayoutConfig: snapping grid and layout defaults

Every component receives an EngineConfig explicitly; nothing reads
module-level tunables at call time.
"""

import os
from dataclasses import dataclass, field, replace
from functools import lru_cache
from types import MappingProxyType
from typing import Mapping, Tuple


def _frozen_map(**values) -> Mapping[str, float]:
    return MappingProxyType(dict(values))


@dataclass(frozen=True)
class ColorConfig:
    """Normalizer settings"""
    min_alpha: float = 0.1
    max_source_tags: int = 3
    area_scale_px2: float = 10000.0
    element_weights: Mapping[str, float] = field(default_factory=lambda: _frozen_map(
        button=10, nav=9, a=8, header=8, h1=7, h2=7, h3=6, h4=6, h5=5, h6=5,
        footer=3, p=2,
    ))
    property_weights: Mapping[str, float] = field(default_factory=lambda: _frozen_map(**{
        "color": 2,
        "background-color": 3,
        "background": 3,
        "border-color": 1,
        "border-top-color": 1,
        "border-right-color": 1,
        "border-bottom-color": 1,
        "border-left-color": 1,
    }))


@dataclass(frozen=True)
class ClusteringConfig:
    """Two-stage clustering settings"""
    hue_bucket_width: float = 15.0
    min_bucket_size: int = 2
    fine_cluster_min_size: int = 1
    distance_space: str = "rgb"          # "rgb" | "lab"
    rgb_distance_threshold: float = 30.0
    lab_distance_threshold: float = 15.0
    colors_per_cluster: int = 5
    min_clusters: int = 3
    max_clusters: int = 8
    max_palette_size: int = 12
    saturation_weight: float = 0.6
    frequency_weight: float = 0.4


@dataclass(frozen=True)
class RoleThresholds:
    """Role predicates; brightness in 0-255, saturation in 0-100"""
    background_min_brightness: float = 220
    background_max_saturation: float = 20
    text_max_brightness: float = 90
    text_max_saturation: float = 40
    accent_min_saturation: float = 60
    accent_min_brightness: float = 70
    accent_max_brightness: float = 190
    # (hue_from, hue_to, weight multiplier)
    accent_hue_bonuses: Tuple[Tuple[float, float, float], ...] = ((0, 60, 1.5), (200, 300, 1.2))
    primary_min_saturation: float = 20
    surface_min_brightness: float = 180
    border_min_brightness: float = 100
    border_max_brightness: float = 160
    border_max_saturation: float = 50
    contrast_threshold: float = 125
    dark_theme_brightness: float = 128


@dataclass(frozen=True)
class LayoutConfig:
    """Layout token defaults and block heuristics"""
    grid_step: int = 8
    default_container_width: int = 1200
    default_section_padding: int = 64
    default_section_gap: int = 32
    default_card_padding: int = 32
    default_card_radius: int = 8
    default_button_radius: int = 6
    default_grid_gap: int = 24
    default_columns: int = 3
    max_columns: int = 4
    tablet_columns: int = 2
    default_card_shadow: str = "0 4px 6px rgba(0,0,0,0.1)"
    default_soft_shadow: str = "0 2px 4px rgba(0,0,0,0.08)"
    grid_min_columns: int = 3
    grid_class_hints: Tuple[str, ...] = ("row", "col-", "card", "grid")
    neutral_background_roles: Tuple[str, ...] = ("bgNeutral",)
    palette_match_distance: float = 60.0


@dataclass(frozen=True)
class EngineConfig:
    """Complete engine configuration"""
    colors: ColorConfig = field(default_factory=ColorConfig)
    clustering: ClusteringConfig = field(default_factory=ClusteringConfig)
    roles: RoleThresholds = field(default_factory=RoleThresholds)
    layout: LayoutConfig = field(default_factory=LayoutConfig)

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Defaults with DESIGN_TOKENS_* environment overrides applied."""
        base = cls()
        clustering = replace(
            base.clustering,
            hue_bucket_width=float(os.getenv("DESIGN_TOKENS_HUE_BUCKET_WIDTH", base.clustering.hue_bucket_width)),
            rgb_distance_threshold=float(os.getenv("DESIGN_TOKENS_RGB_DISTANCE", base.clustering.rgb_distance_threshold)),
            lab_distance_threshold=float(os.getenv("DESIGN_TOKENS_LAB_DISTANCE", base.clustering.lab_distance_threshold)),
            distance_space=os.getenv("DESIGN_TOKENS_DISTANCE_SPACE", base.clustering.distance_space).lower(),
            max_palette_size=int(os.getenv("DESIGN_TOKENS_MAX_PALETTE_SIZE", base.clustering.max_palette_size)),
        )
        roles = replace(
            base.roles,
            contrast_threshold=float(os.getenv("DESIGN_TOKENS_CONTRAST_THRESHOLD", base.roles.contrast_threshold)),
        )
        layout = replace(
            base.layout,
            grid_step=int(os.getenv("DESIGN_TOKENS_GRID_STEP", base.layout.grid_step)),
            default_container_width=int(os.getenv("DESIGN_TOKENS_CONTAINER_WIDTH", base.layout.default_container_width)),
        )
        return replace(base, clustering=clustering, roles=roles, layout=layout)


@lru_cache()
def get_default_config() -> EngineConfig:
    """Shared read-only configuration built from the environment once."""
    return EngineConfig.from_env()
