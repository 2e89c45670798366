"""
Equation Colors

Keeps an equation's \\clr{name}{content} markup, its list of colored terms
and its name to color mapping consistent while the equation is edited, and
transcodes the markup into \\textcolor directives for preview rendering.
"""

__version__ = "0.1.0"
__author__ = "Equation Colors Team"

# Models
from .models import (
    AnnotationToken,
    Span,
    SpanType,
    Term,
    EquationSnapshot,
    CommitResult
)

# Configuration
from .config import EditorConfig, load_config
from .rendering import RenderConfig, RenderResult

# Errors
from .exceptions import (
    EquationColorsError,
    InvalidRangeError,
    UnreadableTermError,
    SessionClosedError,
    RenderError,
    ConfigurationError
)

# Core components
from .palette import ColorPalette, PaletteColor, COLOR_PRESETS, color_at
from .annotation_parser import AnnotationExtractor, tokenize, extract
from .markup_mutator import MarkupMutator, update_term, remove_term, insert_term
from .transcoder import RenderTranscoder, to_renderable, FALLBACK_COLOR
from .rendering import BaseRenderer, LaTeXRenderer, PreviewRenderer

# Orchestrator
from .session import EquationEditSession, SessionState

__all__ = [
    # Version
    "__version__",

    # Models
    "AnnotationToken",
    "Span",
    "SpanType",
    "Term",
    "EquationSnapshot",
    "CommitResult",

    # Configurations
    "EditorConfig",
    "load_config",
    "RenderConfig",
    "RenderResult",

    # Errors
    "EquationColorsError",
    "InvalidRangeError",
    "UnreadableTermError",
    "SessionClosedError",
    "RenderError",
    "ConfigurationError",

    # Core components
    "ColorPalette",
    "PaletteColor",
    "COLOR_PRESETS",
    "color_at",
    "AnnotationExtractor",
    "tokenize",
    "extract",
    "MarkupMutator",
    "update_term",
    "remove_term",
    "insert_term",
    "RenderTranscoder",
    "to_renderable",
    "FALLBACK_COLOR",
    "BaseRenderer",
    "LaTeXRenderer",
    "PreviewRenderer",

    # Orchestrator
    "EquationEditSession",
    "SessionState"
]


# Convenience function
def open_equation(markup: str = "", color_map=None, **kwargs):
    """Open an edit session with an EditorConfig built from keyword arguments."""
    config = EditorConfig(**kwargs)
    return EquationEditSession(markup, color_map, config=config)
