import colorsys
import json
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional, Tuple

ROLE_NAMES = {
    "background": "Background",
    "text": "Text",
    "primary": "Primary",
    "secondary": "Secondary",
    "accent": "Accent",
    "surface": "Surface",
    "border": "Border",
    "additional": "Additional",
}

BLOCK_TYPES = ("nav", "hero", "gridSection", "strip", "contact", "footer", "content")


# ---------- Inputs ----------

@dataclass(frozen=True)
class SourceTag:
    element_tag: str              # e.g. "button"
    css_property: str             # e.g. "background-color"
    area_px2: float = 0.0         # approximate covered area


@dataclass(frozen=True)
class ColorSample:
    value: str                    # raw CSS string, e.g. "rgba(0, 0, 0, 0.5)"
    weight: float = 1.0           # context-derived importance, >= 0
    count: int = 1                # occurrences, >= 1
    source_tags: Tuple[SourceTag, ...] = ()


@dataclass(frozen=True)
class StructuralSample:
    tag: str = "section"
    class_hint: str = ""
    padding_y: Optional[float] = None
    max_width_px: Optional[float] = None
    columns: int = 1
    background_role: Optional[str] = None     # "bgNeutral" | "bgDark" | "bgPrimary" ...
    is_centered: bool = False
    children_count: int = 0
    order: int = 0
    role: Optional[str] = None                # explicit hint: nav | hero | footer | contact | gridSection
    background_color: Optional[str] = None    # raw CSS color, classified against the palette
    margin_y: Optional[float] = None
    card_radii: Tuple[float, ...] = ()
    card_padding: Optional[float] = None
    gap_px: Optional[float] = None
    box_shadow: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tag": self.tag,
            "classHint": self.class_hint,
            "paddingY": self.padding_y,
            "maxWidthPx": self.max_width_px,
            "columns": self.columns,
            "backgroundRole": self.background_role,
            "isCentered": self.is_centered,
            "childrenCount": self.children_count,
            "order": self.order,
            "role": self.role,
        }


@dataclass(frozen=True)
class LayoutInput:
    sections: Tuple[StructuralSample, ...] = ()
    common_container_width_px: Optional[float] = None
    viewport_width_px: Optional[float] = None


# ---------- Colors ----------

@dataclass(frozen=True)
class CanonicalColor:
    """Integer RGB plus alpha; identity is (r, g, b) only."""
    r: int
    g: int
    b: int
    a: float = field(default=1.0, compare=False)

    @property
    def key(self) -> Tuple[int, int, int]:
        return (self.r, self.g, self.b)

    @property
    def hex(self) -> str:
        return "#%02X%02X%02X" % (self.r, self.g, self.b)

    @property
    def rgb_string(self) -> str:
        return f"rgb({self.r}, {self.g}, {self.b})"

    @property
    def hue(self) -> float:
        h, _, _ = colorsys.rgb_to_hls(self.r / 255.0, self.g / 255.0, self.b / 255.0)
        return (h * 360.0) % 360.0

    @property
    def hsl(self) -> Dict[str, int]:
        h, l, s = colorsys.rgb_to_hls(self.r / 255.0, self.g / 255.0, self.b / 255.0)
        return {"h": int(round(h * 360.0)) % 360, "s": int(round(s * 100)), "l": int(round(l * 100))}

    @property
    def brightness(self) -> float:
        return (299 * self.r + 587 * self.g + 114 * self.b) / 1000.0

    @property
    def saturation(self) -> float:
        _, _, s = colorsys.rgb_to_hls(self.r / 255.0, self.g / 255.0, self.b / 255.0)
        return s * 100.0


@dataclass(frozen=True)
class ParsedColor:
    """Result of parsing one color string: ok with a color, or invalid with a reason."""
    color: Optional[CanonicalColor] = None
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.color is not None

    @classmethod
    def valid(cls, color: CanonicalColor) -> "ParsedColor":
        return cls(color=color)

    @classmethod
    def invalid(cls, reason: str) -> "ParsedColor":
        return cls(color=None, reason=reason)


@dataclass
class WeightedColor:
    color: CanonicalColor
    weight: float = 0.0
    count: int = 0
    source_tags: List[SourceTag] = field(default_factory=list)


@dataclass
class ColorCluster:
    centroid: CanonicalColor          # weighted mean, used for distances and role predicates
    representative: CanonicalColor   # highest-weight member, reported as the palette hex
    total_weight: float
    total_count: int
    member_count: int
    members: List[WeightedColor] = field(default_factory=list)


@dataclass(frozen=True)
class PaletteEntry:
    hex: str
    rgb_string: str
    hsl: Dict[str, int]
    brightness: int
    saturation: int
    weight: float
    count: int
    role: str
    role_name: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hex": self.hex,
            "rgbString": self.rgb_string,
            "hsl": dict(self.hsl),
            "brightness": self.brightness,
            "saturation": self.saturation,
            "weight": self.weight,
            "count": self.count,
            "role": self.role,
            "roleName": self.role_name,
        }


# ---------- Outputs ----------

@dataclass(frozen=True)
class PaletteSemantics:
    is_dark_theme: bool = False
    has_good_contrast: bool = False
    primary_hex: Optional[str] = None
    accent_hex: Optional[str] = None
    contrast: Optional[float] = None
    average_brightness: float = 0.0
    color_count: int = 0
    color_distribution: Dict[str, int] = field(default_factory=dict)
    tone: str = "neutral"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isDarkTheme": self.is_dark_theme,
            "hasGoodContrast": self.has_good_contrast,
            "primaryHex": self.primary_hex,
            "accentHex": self.accent_hex,
            "contrast": self.contrast,
            "averageBrightness": self.average_brightness,
            "colorCount": self.color_count,
            "colorDistribution": dict(self.color_distribution),
            "tone": self.tone,
        }


@dataclass
class LayoutBlock:
    type: str                         # one of BLOCK_TYPES
    background_role: str = "bgNeutral"
    columns: int = 1
    padding_y: Optional[float] = None
    max_width_px: Optional[float] = None
    members: List[StructuralSample] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "mainIndex": self.members[0].order if self.members else None,
            "backgroundRole": self.background_role,
            "columns": self.columns,
            "paddingY": self.padding_y,
            "maxWidthPx": self.max_width_px,
            "members": [m.to_dict() for m in self.members],
        }


@dataclass
class DesignTokenSet:
    palette: List[PaletteEntry]
    semantics: PaletteSemantics
    layout: Dict[str, Any]            # container / spacing / radius / grid / shadow
    blocks: List[LayoutBlock] = field(default_factory=list)

    def role(self, name: str) -> Optional[PaletteEntry]:
        for entry in self.palette:
            if entry.role == name:
                return entry
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "palette": [p.to_dict() for p in self.palette],
            "semantics": self.semantics.to_dict(),
            "layout": json.loads(json.dumps(self.layout)),
            "blocks": [b.to_dict() for b in self.blocks],
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)
