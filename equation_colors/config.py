"""
Configuration classes for the equation colors editor
"""

import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import List, Tuple, Union

import yaml

from .exceptions import ConfigurationError
from .palette import COLOR_PRESETS, ColorPalette


logger = logging.getLogger(__name__)


@dataclass
class EditorConfig:
    """Main editor configuration."""
    # General settings
    verbose: bool = False
    debug: bool = False

    # Colors
    palette: List[Tuple[str, str]] = field(
        default_factory=lambda: [(c.name, c.value) for c in COLOR_PRESETS]
    )
    fallback_color: str = "#888888"  # render-time only, never stored on a term

    # New terms
    default_term_text: str = "text"
    term_name_prefix: str = "term"
    unique_term_names: bool = True

    # Range handling for inserted terms
    clamp_ranges: bool = True

    def build_palette(self) -> ColorPalette:
        """Create the color palette described by this configuration."""
        return ColorPalette(self.palette)


def load_config(path: Union[str, Path]) -> EditorConfig:
    """Load editor configuration from a YAML or JSON file."""
    path = Path(path)

    try:
        with open(path, 'r', encoding='utf-8') as f:
            if path.suffix in ['.yaml', '.yml']:
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to load editor config from {path}: {e}")

    data = data or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Editor config in {path} must be a mapping")

    known = {f.name for f in fields(EditorConfig)}
    unknown = set(data) - known
    if unknown:
        logger.warning(f"Ignoring unknown config keys in {path}: {sorted(unknown)}")

    kwargs = {k: v for k, v in data.items() if k in known}
    if 'palette' in kwargs:
        kwargs['palette'] = _parse_palette(kwargs['palette'])

    config = EditorConfig(**kwargs)
    # Fail early on an empty or malformed palette
    config.build_palette()

    logger.info(f"Loaded editor config from {path}")
    return config


def _parse_palette(raw) -> List[Tuple[str, str]]:
    """Accept a list of hex strings, [name, value] pairs or {name: value} dicts."""
    if isinstance(raw, dict):
        return [(str(k), str(v)) for k, v in raw.items()]

    palette = []
    for entry in raw or []:
        if isinstance(entry, str):
            palette.append((entry, entry))
        elif isinstance(entry, dict) and 'value' in entry:
            palette.append((str(entry.get('name', entry['value'])), str(entry['value'])))
        elif isinstance(entry, (list, tuple)) and len(entry) == 2:
            palette.append((str(entry[0]), str(entry[1])))
        else:
            raise ConfigurationError(f"Invalid palette entry: {entry!r}")
    return palette
