import json
import logging
from collections import Counter

import pytest

from design_tokens import analyze_payload, analyze_samples
from design_tokens import clustering
from design_tokens.colors import normalize_values
from design_tokens.exceptions import InputFormatError
from design_tokens.layout import default_layout_tokens
from design_tokens.models import ColorSample, StructuralSample


def samples(*pairs):
    return [ColorSample(value=v, weight=w) for v, w in pairs]


NOISY_PAGE = [
    ColorSample(value=v, weight=w, count=c)
    for v, w, c in [
        ("#FFFFFF", 400, 120), ("rgb(255, 255, 255)", 50, 10), ("#FDFDFD", 30, 8),
        ("#111827", 300, 90), ("rgba(17, 24, 39, 0.9)", 20, 5), ("#1F2937", 40, 12),
        ("#2563EB", 120, 30), ("#2563EA", 30, 6), ("hsl(221, 83%, 53%)", 25, 5),
        ("#F97316", 60, 12), ("#FB7B20", 10, 2),
        ("#E5E7EB", 80, 40), ("#D1D5DB", 35, 20), ("#9CA3AF", 25, 10), ("#6B7280", 45, 22),
        ("#10B981", 15, 3), ("#10B982", 5, 1),
        ("transparent", 500, 200), ("inherit", 10, 1), ("url(hero.png)", 10, 1),
        ("rgba(0, 0, 0, 0.02)", 300, 100), ("garbage", 1, 1),
    ]
]

PAGE_SECTIONS = [
    StructuralSample(tag="header", order=0, padding_y=16, max_width_px=1200, is_centered=True),
    StructuralSample(tag="section", class_hint="hero", order=1, padding_y=120, background_role="bgDark"),
    StructuralSample(tag="section", order=2, padding_y=64, max_width_px=1200, is_centered=True),
    StructuralSample(tag="section", class_hint="row cards", order=3, padding_y=72, columns=3,
                     card_radii=(12, 12, 12)),
    StructuralSample(tag="footer", order=4, padding_y=48),
]


def test_light_page_example():
    result = analyze_samples(samples(("#FFFFFF", 100), ("#000000", 90), ("#FF0000", 50)))
    assert len(result.palette) == 3
    assert result.role("background").hex == "#FFFFFF"
    assert result.role("text").hex == "#000000"
    accent = result.role("accent")
    assert accent.hex == "#FF0000"
    assert accent.saturation == 100
    assert accent.brightness == 76
    assert result.semantics.has_good_contrast
    assert result.semantics.accent_hex == "#FF0000"


def test_single_grey_example():
    result = analyze_samples([ColorSample(value="rgb(128,128,128)") for _ in range(5)])
    assert len(result.palette) == 1
    entry = result.palette[0]
    assert entry.role == "additional"
    assert entry.count == 5
    assert not result.semantics.has_good_contrast


def test_outlier_container_example():
    sections = [StructuralSample(max_width_px=w, order=i) for i, w in enumerate((1180, 1200, 1220, 5000))]
    result = analyze_samples([], sections)
    assert result.layout["container"]["maxWidth"] == "1208px"


def test_empty_input_example():
    result = analyze_samples([])
    assert result.palette == []
    assert result.semantics.has_good_contrast is False
    assert result.layout == default_layout_tokens()
    assert result.blocks == []
    data = result.to_dict()
    assert data["palette"] == []
    assert data["blocks"] == []


def test_only_invalid_samples_is_empty_input():
    result = analyze_samples(samples(("transparent", 10), ("none", 5), ("rgba(0,0,0,0)", 7)))
    assert result.palette == []


def test_overflowing_number_does_not_sink_the_palette():
    result = analyze_samples(samples(
        ("#FFFFFF", 100), ("rgb(1e999, 0, 0)", 80), ("#000000", 90), ("hsl(1e999, 50%, 50%)", 5),
    ))
    assert [p.hex for p in result.palette] == ["#FFFFFF", "#000000"]
    assert result.role("background").hex == "#FFFFFF"
    assert result.role("text").hex == "#000000"


def test_noisy_page():
    result = analyze_samples(NOISY_PAGE, PAGE_SECTIONS)
    roles = Counter(p.role for p in result.palette)
    # 15 distinct colors -> 3 clusters
    assert len(result.palette) == 3
    for role, n in roles.items():
        if role != "additional":
            assert n == 1
    assert result.role("background").hex == "#FFFFFF"
    assert result.role("text").hex == "#111827"
    # the three near-identical blues merge, reported by their heaviest member
    assert result.role("accent").hex == "#2563EB"
    assert result.semantics.has_good_contrast
    assert result.semantics.contrast == 231
    assert result.semantics.average_brightness == 125.0
    assert [b.type for b in result.blocks] == ["nav", "hero", "content", "gridSection", "footer"]
    assert result.layout["container"]["maxWidth"] == "1200px"
    assert result.layout["radius"]["card"] == "16px"


def test_idempotent_output():
    first = analyze_samples(NOISY_PAGE, PAGE_SECTIONS).to_json()
    second = analyze_samples(NOISY_PAGE, PAGE_SECTIONS).to_json()
    assert first == second
    assert json.loads(first)["palette"]


def test_dedup_before_clustering():
    colors = normalize_values([s.value for s in NOISY_PAGE])
    keys = [c.color.key for c in colors]
    assert len(keys) == len(set(keys))


def test_clustering_failure_falls_back_to_hue_buckets(monkeypatch, caplog):
    def boom(bucket, config):
        raise RuntimeError("fine clustering exploded")

    monkeypatch.setattr(clustering, "_greedy_cluster", boom)
    with caplog.at_level(logging.WARNING, logger="design_tokens.analyzers"):
        result = analyze_samples(samples(("#FFFFFF", 100), ("#000000", 90), ("#FF0000", 50)))
    assert len(result.palette) == 1
    assert result.palette[0].hex == "#FFFFFF"
    assert "falling back" in caplog.text


def test_payload_document():
    payload = {
        "colors": [
            {"value": "#FFFFFF", "weight": 100, "count": 3, "tags": [{"tag": "body", "property": "background-color", "areaPx2": 1e6}]},
            {"value": "#000000", "weight": 90},
            "#FF0000",
            {"value": "#00FF00", "weight": -3},
            {"value": "#0000FF", "count": "many"},
            {"weight": 5},
            42,
        ],
        "layout": {
            "sections": [
                {"tag": "NAV", "order": 0},
                {"tag": "section", "paddingY": 80, "maxWidthPx": 1140, "isCentered": True, "order": 1},
                {"tag": "section", "paddingY": "wide", "backgroundColor": "#FF0000", "order": 2},
                "not a section",
            ],
            "common": {"containerMaxWidthPx": 1140},
            "viewportWidth": 1440,
        },
    }
    result = analyze_payload(payload)
    hexes = {p.hex for p in result.palette}
    assert hexes == {"#FFFFFF", "#000000", "#FF0000"}
    assert result.layout["container"]["maxWidth"] == "1140px"
    assert result.layout["spacing"]["sectionY"] == "80px"
    assert [b.type for b in result.blocks] == ["nav", "content", "strip"]
    assert result.blocks[2].background_role == "bgAccent"
    json.loads(result.to_json())


def test_payload_must_be_an_object():
    with pytest.raises(InputFormatError):
        analyze_payload(["#FFFFFF"])
    with pytest.raises(InputFormatError):
        analyze_payload({"colors": "#FFFFFF"})


def test_payload_without_layout_has_no_blocks():
    result = analyze_payload({"colors": ["#FFFFFF", "#000000"]})
    assert result.blocks == []
    assert result.layout == default_layout_tokens()
