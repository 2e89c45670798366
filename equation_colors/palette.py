"""
Preset colors for equation terms
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from .exceptions import ConfigurationError


@dataclass(frozen=True)
class PaletteColor:
    """A named preset color."""
    name: str
    value: str


COLOR_PRESETS: Tuple[PaletteColor, ...] = (
    PaletteColor('Red', '#ef4444'),
    PaletteColor('Blue', '#3b82f6'),
    PaletteColor('Green', '#22c55e'),
    PaletteColor('Orange', '#f97316'),
    PaletteColor('Purple', '#a855f7'),
    PaletteColor('Cyan', '#06b6d4'),
    PaletteColor('Pink', '#ec4899'),
    PaletteColor('Yellow', '#eab308'),
)

ColorSpec = Union[PaletteColor, str, Sequence[str]]


class ColorPalette:
    """Fixed ordered set of colors with deterministic selection by index."""

    def __init__(self, colors: Optional[Iterable[ColorSpec]] = None):
        if colors is None:
            self._colors = COLOR_PRESETS
        else:
            self._colors = tuple(self._coerce(c) for c in colors)

        if not self._colors:
            raise ConfigurationError("Color palette must contain at least one color")

    @staticmethod
    def _coerce(color: ColorSpec) -> PaletteColor:
        if isinstance(color, PaletteColor):
            return color
        if isinstance(color, str):
            return PaletteColor(color, color)
        try:
            name, value = color
        except (TypeError, ValueError):
            raise ConfigurationError(f"Invalid palette entry: {color!r}")
        return PaletteColor(str(name), str(value))

    def color_at(self, index: int) -> str:
        """Return the color for an ordinal, cycling after the palette length."""
        if index < 0:
            raise ValueError(f"Palette index must be non-negative, got {index}")
        return self._colors[index % len(self._colors)].value

    def name_for(self, value: str) -> Optional[str]:
        """Look up the preset name of a color value."""
        for color in self._colors:
            if color.value.lower() == value.lower():
                return color.name
        return None

    @property
    def values(self) -> List[str]:
        return [c.value for c in self._colors]

    def __len__(self) -> int:
        return len(self._colors)

    def __iter__(self) -> Iterator[PaletteColor]:
        return iter(self._colors)

    def __getitem__(self, index: int) -> str:
        return self.color_at(index)


DEFAULT_PALETTE = ColorPalette()


def color_at(index: int) -> str:
    """Color of the default palette for an ordinal."""
    return DEFAULT_PALETTE.color_at(index)
