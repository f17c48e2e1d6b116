"""
Render Configuration

Caller-facing render options plus loaders for YAML presets.

Examples:
    # Fixed width, white background
    >>> config = RenderConfiguration(width=512, background="white")

    # Load a preset and override one value
    >>> config = load_render_configuration(Path("presets/thumbnail.yaml"), ["dpi=144"])
"""

import dataclasses
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from omegaconf import OmegaConf
from omegaconf.errors import OmegaConfBaseException

from svgraster.contexts.rendering.exceptions import ArgumentError

DEFAULT_DPI = 96

# CSS generic family -> RenderConfiguration field
GENERIC_FAMILY_FIELDS = {
    "serif": "serif_family",
    "sans-serif": "sans_serif_family",
    "cursive": "cursive_family",
    "fantasy": "fantasy_family",
    "monospace": "monospace_family",
}

# YAML key holding font file paths (read into use_fonts)
FONT_PATHS_KEY = "fonts"


@dataclass
class RenderConfiguration:
    """
    Options for a single SVG -> PNG render.

    Attributes:
        width: Output width in pixels (None keeps the document size or scales from height)
        height: Output height in pixels (None keeps the document size or scales from width)
        zoom: Scale factor applied to the document size (None disables zoom)
        dpi: Resolution used to resolve physical units
        skip_system_fonts: Do not load fonts installed on the system
        background: Background color (e.g. "white", "#ff0000")
        export_id: Id of the element to export
        export_area_page: Export the page area
        export_area_drawing: Export the drawing area
        resources_dir: Directory used to resolve relative image references
        use_fonts: Raw font files (TTF/OTF bytes) to load
        use_font_file: Path of a font file to load
        use_font_dir: Directory of font files to load
        serif_family: Font family used for the generic "serif" family
        sans_serif_family: Font family used for the generic "sans-serif" family
        cursive_family: Font family used for the generic "cursive" family
        fantasy_family: Font family used for the generic "fantasy" family
        monospace_family: Font family used for the generic "monospace" family
    """

    width: Optional[int] = None
    height: Optional[int] = None
    zoom: Optional[float] = None
    dpi: int = DEFAULT_DPI
    skip_system_fonts: bool = False
    background: Optional[str] = None
    export_id: Optional[str] = None
    export_area_page: bool = False
    export_area_drawing: bool = True
    resources_dir: Optional[str] = None
    use_fonts: Optional[List[bytes]] = field(default=None, repr=False)
    use_font_file: Optional[str] = None
    use_font_dir: Optional[str] = None
    serif_family: Optional[str] = None
    sans_serif_family: Optional[str] = None
    cursive_family: Optional[str] = None
    fantasy_family: Optional[str] = None
    monospace_family: Optional[str] = None

    def replace(self, **changes: Any) -> "RenderConfiguration":
        """Return a copy with the given fields changed."""
        return dataclasses.replace(self, **changes)

    def family_overrides(self) -> Dict[str, str]:
        """Generic family overrides that are set, keyed by CSS generic name."""
        overrides = {}
        for generic, field_name in GENERIC_FAMILY_FIELDS.items():
            value = getattr(self, field_name)
            if value:
                overrides[generic] = value
        return overrides


def configuration_fields() -> List[str]:
    return [f.name for f in dataclasses.fields(RenderConfiguration)]


def read_font_files(paths: List[Path]) -> List[bytes]:
    """
    Read font files into buffers suitable for RenderConfiguration.use_fonts.

    Raises:
        ArgumentError: If a path does not exist
    """
    buffers = []
    for path in paths:
        path = Path(path)
        if not path.is_file():
            raise ArgumentError(f"Font file not found: {path}", argument="use_fonts")
        buffers.append(path.read_bytes())
    return buffers


def load_render_configuration(
    config_path: Path, overrides: Optional[List[str]] = None
) -> RenderConfiguration:
    """
    Load a RenderConfiguration from a YAML preset.

    Keys map 1:1 to RenderConfiguration fields, except ``fonts`` which lists font file
    paths (relative paths resolve against the YAML file's directory) that are read into
    ``use_fonts``.

    Args:
        config_path: Path to the YAML preset
        overrides: Optional OmegaConf dotlist overrides (e.g. ["dpi=144", "width=512"])

    Returns:
        RenderConfiguration

    Raises:
        ArgumentError: If the file is missing, malformed, or contains unknown keys
    """
    config_path = Path(config_path)
    if not config_path.is_file():
        raise ArgumentError(f"Config file not found: {config_path}", argument="config")

    try:
        conf = OmegaConf.load(config_path)
        if overrides:
            conf = OmegaConf.merge(conf, OmegaConf.from_dotlist(overrides))
        data = OmegaConf.to_container(conf, resolve=True)
    except (OmegaConfBaseException, yaml.YAMLError) as e:
        raise ArgumentError(f"Invalid config file {config_path}: {e}", argument="config") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ArgumentError(f"Config file must contain a mapping: {config_path}", argument="config")

    font_paths = data.pop(FONT_PATHS_KEY, None) or []
    unknown = sorted(set(data) - set(configuration_fields()))
    if unknown:
        raise ArgumentError(f"Unknown render options in {config_path}: {unknown}", argument="config")

    if font_paths:
        resolved = [
            path if path.is_absolute() else config_path.parent / path
            for path in (Path(p) for p in font_paths)
        ]
        data["use_fonts"] = list(data.get("use_fonts") or []) + read_font_files(resolved)

    return RenderConfiguration(**data)
