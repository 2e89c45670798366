from typing import Optional, List
import logging
from .base_renderer import BaseRenderer, RenderConfig, RenderResult
from .latex_renderer import LaTeXRenderer


logger = logging.getLogger(__name__)


class PreviewRenderer(BaseRenderer):
    """Main interface for rendering equation previews."""

    def __init__(self, config: Optional[RenderConfig] = None,
                 renderers: Optional[List[BaseRenderer]] = None):
        super().__init__(config)

        self.renderers = renderers if renderers is not None else [LaTeXRenderer(config=self.config)]

        # Find first available renderer
        self.default_renderer = None
        for renderer in self.renderers:
            if renderer.is_available():
                self.default_renderer = renderer
                logger.info(f"Using {renderer.__class__.__name__} as preview renderer")
                break

        if not self.default_renderer:
            logger.warning("No preview renderer available")

    def is_available(self) -> bool:
        return self.default_renderer is not None

    def render_latex(self, latex: str, config: Optional[RenderConfig] = None) -> RenderResult:
        """Render markup with the first available renderer, falling back on failure."""
        config = config or self.config

        if not self.default_renderer:
            return RenderResult(error="No preview renderer available")

        result = self.default_renderer.render_latex(latex, config)
        if result.is_valid:
            return result

        logger.warning(f"Primary renderer failed: {result.error}")
        for renderer in self.renderers:
            if renderer is not self.default_renderer and renderer.is_available():
                logger.info(f"Trying {renderer.__class__.__name__}")
                fallback_result = renderer.render_latex(latex, config)
                if fallback_result.is_valid:
                    return fallback_result

        return result

    def get_available_renderers(self) -> List[str]:
        """Get list of available renderers."""
        return [r.__class__.__name__ for r in self.renderers if r.is_available()]


__all__ = [
    'BaseRenderer',
    'PreviewRenderer',
    'RenderConfig',
    'RenderResult',
    'LaTeXRenderer'
]
