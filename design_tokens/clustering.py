# design_tokens/clustering.py
"""
Two-stage color clustering.

Stage 1 buckets colors by rounded hue and drops noise buckets.
Stage 2 runs one greedy distance pass per bucket: a color joins the first
cluster whose centroid is within the threshold, otherwise it seeds a new one.

Precondition: input is sorted by descending weight (normalize_samples()
returns it that way), so the heaviest color anchors each cluster.
"""

import math
from typing import Dict, List, Sequence

import cv2
import numpy as np

from .config import ClusteringConfig, EngineConfig, get_default_config
from .exceptions import ClusteringPreconditionError
from .logging_config import get_logger
from .models import CanonicalColor, ColorCluster, WeightedColor

logger = get_logger(__name__)


# ---------- Distances ----------
def rgb_to_lab(rgb) -> np.ndarray:
    """RGB (0-255, any float) to CIE L*a*b* via OpenCV's float path."""
    arr = np.asarray(rgb, dtype=np.float32).reshape(-1, 1, 3) / 255.0
    return cv2.cvtColor(arr, cv2.COLOR_RGB2LAB).reshape(-1, 3)


def color_distance(rgb_a, rgb_b, space: str = "rgb") -> float:
    a = np.asarray(rgb_a, dtype=np.float64)
    b = np.asarray(rgb_b, dtype=np.float64)
    if space == "lab":
        a, b = rgb_to_lab(a)[0].astype(np.float64), rgb_to_lab(b)[0].astype(np.float64)
    return float(np.linalg.norm(a - b))


def _threshold(config: ClusteringConfig) -> float:
    if config.distance_space == "lab":
        return config.lab_distance_threshold
    return config.rgb_distance_threshold


# ---------- Accumulator ----------
class _Group:
    """Running weighted mean of member RGB values."""

    def __init__(self, first: WeightedColor):
        self.members: List[WeightedColor] = []
        self.rgb_sum = np.zeros(3, dtype=np.float64)
        self.total_weight = 0.0
        self.total_count = 0
        self.add(first)

    def add(self, color: WeightedColor) -> None:
        self.members.append(color)
        self.rgb_sum += np.array(color.color.key, dtype=np.float64) * color.weight
        self.total_weight += color.weight
        self.total_count += color.count

    @property
    def mean_rgb(self) -> np.ndarray:
        if self.total_weight > 0:
            return self.rgb_sum / self.total_weight
        return np.mean([m.color.key for m in self.members], axis=0)

    def to_cluster(self) -> ColorCluster:
        r, g, b = (int(math.floor(v + 0.5)) for v in self.mean_rgb)
        representative = max(self.members, key=lambda m: m.weight)
        return ColorCluster(
            centroid=CanonicalColor(r, g, b, 1.0),
            representative=representative.color,
            total_weight=self.total_weight,
            total_count=self.total_count,
            member_count=len(self.members),
            members=list(self.members),
        )


# ---------- Stage 1: hue buckets ----------
def hue_bucket(hue: float, width: float) -> float:
    key = math.floor(hue / width + 0.5) * width
    return round(key % 360.0, 6)


def bucket_by_hue(colors: Sequence[WeightedColor], config: ClusteringConfig) -> List[List[WeightedColor]]:
    """
    Group colors by rounded hue, in order of each bucket's first (heaviest) member.
    Buckets with fewer than min_bucket_size distinct colors are noise,
    unless they are the only bucket.
    """
    buckets: Dict[float, List[WeightedColor]] = {}
    for color in colors:
        buckets.setdefault(hue_bucket(color.color.hue, config.hue_bucket_width), []).append(color)

    groups = list(buckets.values())
    if len(groups) <= 1:
        return groups
    kept = [g for g in groups if len(g) >= config.min_bucket_size]
    if len(kept) < len(groups):
        logger.debug(f"dropped {len(groups) - len(kept)} noise hue buckets")
    return kept


# ---------- Stage 2: greedy distance pass ----------
def _greedy_cluster(bucket: Sequence[WeightedColor], config: ClusteringConfig) -> List[_Group]:
    threshold = _threshold(config)
    groups: List[_Group] = []
    for color in bucket:
        for group in groups:
            if color_distance(group.mean_rgb, color.color.key, config.distance_space) <= threshold:
                group.add(color)
                break
        else:
            groups.append(_Group(color))
    return groups


def _single_group(bucket: Sequence[WeightedColor]) -> _Group:
    group = _Group(bucket[0])
    for color in bucket[1:]:
        group.add(color)
    return group


# ---------- Ranking ----------
def cluster_limit(distinct_colors: int, config: ClusteringConfig) -> int:
    n = distinct_colors // config.colors_per_cluster
    n = max(config.min_clusters, min(config.max_clusters, n))
    return min(n, config.max_palette_size)


def rank_clusters(clusters: List[ColorCluster], distinct_colors: int, config: ClusteringConfig) -> List[ColorCluster]:
    """Keep the top-N clusters by weight, then order by the combined saturation/frequency score."""
    if not clusters:
        return []
    limit = cluster_limit(distinct_colors, config)
    top = sorted(clusters, key=lambda c: -c.total_weight)[:limit]

    max_weight = max(c.total_weight for c in top) or 1.0
    max_count = max(c.total_count for c in top) or 1
    def score(c: ColorCluster) -> float:
        weight_norm = c.total_weight / max_weight
        saturation_norm = c.centroid.saturation / 100.0
        frequency_norm = c.total_count / max_count
        return weight_norm * saturation_norm * config.saturation_weight + frequency_norm * config.frequency_weight

    indexed = list(enumerate(top))
    indexed.sort(key=lambda item: (-round(score(item[1]), 9), -item[1].total_weight, item[0]))
    return [c for _, c in indexed]


# ---------- Public ----------
def _check_sorted(colors: Sequence[WeightedColor]) -> None:
    for i in range(1, len(colors)):
        if colors[i].weight > colors[i - 1].weight:
            raise ClusteringPreconditionError(
                "colors must be sorted by descending weight",
                context={"index": i, "weight": colors[i].weight, "previous": colors[i - 1].weight},
            )


def cluster_colors(colors: Sequence[WeightedColor], config: EngineConfig = None) -> List[ColorCluster]:
    """
    Reduce deduplicated colors to at most max_palette_size ranked clusters.
    `colors` must be sorted by descending weight; raises ClusteringPreconditionError otherwise.
    """
    config = config or get_default_config()
    cc = config.clustering
    _check_sorted(colors)
    if not colors:
        return []

    groups: List[_Group] = []
    for bucket in bucket_by_hue(colors, cc):
        if len(bucket) > cc.fine_cluster_min_size:
            groups.extend(_greedy_cluster(bucket, cc))
        else:
            groups.append(_single_group(bucket))

    clusters = [g.to_cluster() for g in groups]
    logger.debug(f"clustered {len(colors)} colors into {len(clusters)} clusters")
    return rank_clusters(clusters, len(colors), cc)


def bucket_only_clusters(colors: Sequence[WeightedColor], config: EngineConfig = None) -> List[ColorCluster]:
    """Coarse fallback: one cluster per surviving hue bucket, no distance pass."""
    config = config or get_default_config()
    cc = config.clustering
    if not colors:
        return []
    ordered = sorted(colors, key=lambda c: -c.weight)
    clusters = [_single_group(bucket).to_cluster() for bucket in bucket_by_hue(ordered, cc)]
    return rank_clusters(clusters, len(ordered), cc)
