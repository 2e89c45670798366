"""
Structured edits applied to equation markup
"""

import logging
from typing import List, Optional, Tuple

from .annotation_parser import tokenize, join_spans, format_annotation, is_readable
from .exceptions import InvalidRangeError, UnreadableTermError
from .models import Span, SpanType


logger = logging.getLogger(__name__)


class MarkupMutator:
    """Applies term edits to markup by rebuilding its span list.

    Terms are matched by exact name, so every occurrence sharing a name
    is edited together and names are never interpreted as patterns.
    """

    def __init__(self, default_text: str = "text", clamp_ranges: bool = True):
        self.default_text = default_text
        self.clamp_ranges = clamp_ranges

    def update_term(self, markup: str, name: str, new_content: str) -> str:
        """Replace the content of every annotation named ``name``."""
        self.check_text("content", new_content)
        spans, count = self._rewrite(
            markup, name, lambda span: format_annotation(name, new_content)
        )
        if not count:
            logger.debug(f"update_term: no annotation named '{name}'")
            return markup

        logger.debug(f"update_term: rewrote {count} occurrence(s) of '{name}'")
        return join_spans(spans)

    def remove_term(self, markup: str, name: str) -> str:
        """Strip the annotation wrapper from every occurrence, keeping its content."""
        spans, count = self._rewrite(markup, name, lambda span: span.content)
        if not count:
            logger.debug(f"remove_term: no annotation named '{name}'")
            return markup

        logger.debug(f"remove_term: unwrapped {count} occurrence(s) of '{name}'")
        return join_spans(spans)

    def insert_term(self, markup: str, start: int, end: int, name: str,
                    default_text: Optional[str] = None) -> str:
        """Wrap ``markup[start:end]`` (or the default text) in a new annotation."""
        start, end = self.check_range(markup, start, end)
        default_text = self.default_text if default_text is None else default_text

        selected = markup[start:end] or default_text
        self.check_text("name", name)
        self.check_text("content", selected)
        logger.debug(f"insert_term: '{name}' at [{start}, {end})")
        return markup[:start] + format_annotation(name, selected) + markup[end:]

    def check_text(self, field_name: str, text: str):
        """Reject a name or content that would not re-extract from the markup.

        Empty text and text containing '}' would write an annotation the
        tokenizer reads back truncated or not at all.
        """
        if not is_readable(text):
            raise UnreadableTermError(field_name, text)

    def check_range(self, markup: str, start: int, end: int) -> Tuple[int, int]:
        """Validate a selection range, clamping it when configured to."""
        length = len(markup)
        if 0 <= start <= end <= length:
            return start, end

        if not self.clamp_ranges:
            raise InvalidRangeError(start, end, length)

        clamped_start = min(max(start, 0), length)
        clamped_end = min(max(end, clamped_start), length)
        logger.warning(
            f"Clamped range [{start}, {end}) to [{clamped_start}, {clamped_end}) "
            f"for markup of length {length}"
        )
        return clamped_start, clamped_end

    def _rewrite(self, markup: str, name: str, replace) -> Tuple[List[Span], int]:
        spans = []
        count = 0

        for span in tokenize(markup):
            if span.is_annotation and span.name == name:
                spans.append(Span(type=SpanType.TEXT, raw=replace(span), start=span.start))
                count += 1
            else:
                spans.append(span)

        return spans, count


_default_mutator = MarkupMutator()


def update_term(markup: str, name: str, new_content: str) -> str:
    return _default_mutator.update_term(markup, name, new_content)


def remove_term(markup: str, name: str) -> str:
    return _default_mutator.remove_term(markup, name)


def insert_term(markup: str, start: int, end: int, name: str, default_text: str = "text") -> str:
    return _default_mutator.insert_term(markup, start, end, name, default_text)
