"""
Transcoding of annotations into renderer color directives
"""

import logging
from typing import Mapping, Optional

from .annotation_parser import tokenize


logger = logging.getLogger(__name__)

FALLBACK_COLOR = "#888888"


def format_color_directive(color: str, content: str) -> str:
    """Build \\textcolor{color}{content}."""
    return f"\\textcolor{{{color}}}{{{content}}}"


class RenderTranscoder:
    """Rewrites \\clr{name}{content} into \\textcolor{color}{content}."""

    def __init__(self, fallback_color: str = FALLBACK_COLOR):
        self.fallback_color = fallback_color

    def to_renderable(self, markup: str, color_map: Optional[Mapping[str, str]] = None) -> str:
        """Produce the string handed to the math renderer.

        Names missing from ``color_map`` render in the fallback color.
        Text outside annotations passes through unchanged.
        """
        color_map = color_map or {}
        parts = []

        for span in tokenize(markup):
            if span.is_annotation:
                color = color_map.get(span.name, self.fallback_color)
                parts.append(format_color_directive(color, span.content))
            else:
                parts.append(span.raw)

        return "".join(parts)


def to_renderable(markup: str, color_map: Optional[Mapping[str, str]] = None) -> str:
    return RenderTranscoder().to_renderable(markup, color_map)
