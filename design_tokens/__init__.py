from .analyzers import analyze_payload, analyze_samples, build_palette, load_color_samples, load_layout_input
from .config import EngineConfig, get_default_config
from .logging_config import setup_logging
from .models import ColorSample, DesignTokenSet, LayoutInput, PaletteEntry, SourceTag, StructuralSample

__all__ = [
    "analyze_payload",
    "analyze_samples",
    "build_palette",
    "load_color_samples",
    "load_layout_input",
    "EngineConfig",
    "get_default_config",
    "setup_logging",
    "ColorSample",
    "DesignTokenSet",
    "LayoutInput",
    "PaletteEntry",
    "SourceTag",
    "StructuralSample",
]
