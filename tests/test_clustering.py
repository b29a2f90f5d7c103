from dataclasses import replace

import pytest

from design_tokens.clustering import (
    bucket_by_hue, bucket_only_clusters, cluster_colors, cluster_limit, color_distance, hue_bucket,
)
from design_tokens.colors import normalize_samples, normalize_values
from design_tokens.config import ClusteringConfig, EngineConfig
from design_tokens.exceptions import ClusteringError, ClusteringPreconditionError
from design_tokens.models import ColorSample


def test_hue_bucket_rounding_and_wrap():
    assert hue_bucket(7.4, 15) == 0
    assert hue_bucket(7.5, 15) == 15
    assert hue_bucket(355, 15) == 0
    assert hue_bucket(240, 15) == 240


def test_cluster_limit_scales_with_input():
    config = ClusteringConfig()
    assert cluster_limit(1, config) == 3
    assert cluster_limit(20, config) == 4
    assert cluster_limit(100, config) == 8
    assert cluster_limit(100, replace(config, max_palette_size=5)) == 5


def test_unsorted_input_is_rejected():
    colors = normalize_values(["#FF0000", "#00FF00"], weights=[5, 1])
    with pytest.raises(ClusteringPreconditionError) as exc:
        cluster_colors(list(reversed(colors)))
    assert isinstance(exc.value, ClusteringError)
    assert "descending weight" in str(exc.value)


def test_empty_input():
    assert cluster_colors([]) == []
    assert bucket_only_clusters([]) == []


def test_near_colors_merge_and_keep_observed_representative():
    colors = normalize_values(["#FF0000", "#FA0000"], weights=[10, 5])
    clusters = cluster_colors(colors)
    assert len(clusters) == 1
    cluster = clusters[0]
    assert cluster.representative.hex == "#FF0000"
    assert cluster.centroid.key == (253, 0, 0)
    assert cluster.total_weight == pytest.approx(15)
    assert cluster.total_count == 2
    assert cluster.member_count == 2


def test_distinct_colors_stay_apart_and_rank_by_score():
    colors = normalize_values(["#FFFFFF", "#000000", "#FF0000"], weights=[100, 90, 50])
    clusters = cluster_colors(colors)
    assert [c.representative.hex for c in clusters] == ["#FF0000", "#FFFFFF", "#000000"]


def test_noise_bucket_dropped():
    colors = normalize_values(["#FF0000", "#EE0000", "#0000FF"], weights=[10, 8, 5])
    clusters = cluster_colors(colors)
    hexes = [c.representative.hex for c in clusters]
    assert "#0000FF" not in hexes
    assert hexes == ["#FF0000"]


def test_only_bucket_is_never_noise():
    clusters = cluster_colors(normalize_values(["#0000FF"]))
    assert len(clusters) == 1
    assert clusters[0].representative.hex == "#0000FF"


def test_occurrence_count_does_not_rescue_single_color_bucket():
    colors = normalize_samples([
        ColorSample("#FFFFFF", weight=100), ColorSample("#000000", weight=90),
        ColorSample("#2563EB", weight=50, count=5),
    ])
    groups = bucket_by_hue(colors, ClusteringConfig())
    assert [len(g) for g in groups] == [2]
    assert "#2563EB" not in [c.representative.hex for c in cluster_colors(colors)]


def test_several_noise_buckets_are_all_dropped():
    colors = normalize_values(["#0000FF", "#00FF00"], weights=[2, 1])
    assert bucket_by_hue(colors, ClusteringConfig()) == []
    assert cluster_colors(colors) == []


def test_palette_size_is_bounded():
    values = ["#%02X%02X%02X" % ((i * 37) % 256, (i * 91) % 256, (i * 53) % 256) for i in range(300)]
    colors = normalize_values(values, weights=list(range(300, 0, -1)))
    clusters = cluster_colors(colors)
    assert 1 <= len(clusters) <= 12


def test_bucket_only_fallback_groups_whole_buckets():
    colors = normalize_values(["#FFFFFF", "#000000", "#FF0000"], weights=[100, 90, 50])
    clusters = bucket_only_clusters(colors)
    assert len(clusters) == 1
    assert clusters[0].representative.hex == "#FFFFFF"
    assert clusters[0].member_count == 3


def test_lab_distance_mode():
    config = EngineConfig(clustering=ClusteringConfig(distance_space="lab"))
    colors = normalize_values(["#FF0000", "#FC0202", "#800000"], weights=[10, 5, 4])
    clusters = cluster_colors(colors, config)
    assert sorted(c.member_count for c in clusters) == [1, 2]
    assert color_distance((255, 0, 0), (255, 0, 0), "lab") == pytest.approx(0.0, abs=1e-4)
    assert color_distance((0, 0, 0), (255, 255, 255), "lab") == pytest.approx(100.0, abs=0.5)
