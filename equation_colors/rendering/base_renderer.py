"""
Base classes for rendering system
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Union, Tuple
from abc import ABC, abstractmethod
from pathlib import Path
import hashlib
from PIL import Image


@dataclass
class RenderConfig:
    """Configuration for rendering."""
    # Renderer options passed by the host editor
    throw_on_error: bool = False
    trust: bool = False
    output_format: str = "png"  # png, pdf

    # Output settings
    dpi: int = 300
    font_size: int = 12
    padding: int = 2

    # Appearance
    background_color: str = "white"
    text_color: str = "black"
    transparent_background: bool = False

    # LaTeX settings
    latex_preamble: str = ""
    packages: list = field(default_factory=list)

    # Performance
    cache_renders: bool = True
    timeout: int = 30

    # Paths
    cache_dir: Optional[Path] = None


@dataclass
class RenderResult:
    """Result of rendering operation."""
    image: Optional[Image.Image] = None
    pdf_bytes: Optional[bytes] = None
    size: Optional[Tuple[int, int]] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        """Check if render was successful."""
        return bool(self.image or self.pdf_bytes) and not self.error

    def save(self, path: Union[str, Path]):
        """Save render result to file."""
        path = Path(path)

        if self.image:
            self.image.save(path)
        elif self.pdf_bytes:
            path.write_bytes(self.pdf_bytes)
        else:
            raise ValueError("No render result to save")


class BaseRenderer(ABC):
    """Base class for all renderers."""

    def __init__(self, config: Optional[RenderConfig] = None):
        self.config = config or RenderConfig()

    @abstractmethod
    def is_available(self) -> bool:
        """Check if renderer is available."""
        pass

    @abstractmethod
    def render_latex(self, latex: str, config: Optional[RenderConfig] = None) -> RenderResult:
        """Render color-directive markup to an image or pdf."""
        pass

    def get_cache_key(self, latex: str, config: RenderConfig) -> str:
        """Generate cache key."""
        key_parts = [
            latex,
            str(config.dpi),
            str(config.font_size),
            config.output_format,
            config.text_color,
            config.background_color,
            str(config.padding),
            str(config.transparent_background),
            config.latex_preamble,
            ",".join(config.packages)
        ]
        return hashlib.md5("|".join(key_parts).encode()).hexdigest()
