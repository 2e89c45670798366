"""
Tokenizer and extractor for \\clr{name}{content} annotations
"""

import regex
import logging
from typing import Dict, List, Optional, Any, Mapping

from .models import AnnotationToken, Span, SpanType, Term
from .palette import ColorPalette, DEFAULT_PALETTE


logger = logging.getLogger(__name__)

ANNOTATION_COMMAND = r'\clr'

# Name and content are one or more characters other than '}'; no nesting.
ANNOTATION_PATTERN = regex.compile(r'\\clr\{([^}]+)\}\{([^}]+)\}')
COMMAND_PATTERN = regex.compile(r'\\clr(?![a-zA-Z])')
ANNOTATION_TEXT_PATTERN = regex.compile(r'[^}]+')


def format_annotation(name: str, content: str) -> str:
    """Build the markup for one annotation."""
    return f"{ANNOTATION_COMMAND}{{{name}}}{{{content}}}"


def is_readable(text: str) -> bool:
    """Whether text can be a name or content that tokenize() reads back intact."""
    return bool(text) and ANNOTATION_TEXT_PATTERN.fullmatch(text) is not None


def tokenize(markup: str) -> List[Span]:
    """Split markup into a flat list of text and annotation spans.

    Concatenating the ``raw`` text of the returned spans reproduces the
    input exactly. Annotations that do not match the pattern (unbalanced
    braces, empty name or content) stay inside text spans.
    """
    spans = []
    pos = 0

    for match in ANNOTATION_PATTERN.finditer(markup):
        if match.start() > pos:
            spans.append(Span(
                type=SpanType.TEXT,
                raw=markup[pos:match.start()],
                start=pos
            ))

        token = AnnotationToken(
            name=match.group(1),
            content=match.group(2),
            start=match.start(),
            end=match.end(),
            raw=match.group()
        )
        spans.append(Span(
            type=SpanType.ANNOTATION,
            raw=match.group(),
            start=match.start(),
            token=token
        ))
        pos = match.end()

    if pos < len(markup):
        spans.append(Span(type=SpanType.TEXT, raw=markup[pos:], start=pos))

    return spans


def join_spans(spans: List[Span]) -> str:
    """Rebuild markup from spans."""
    return "".join(span.raw for span in spans)


class AnnotationExtractor:
    """Extracts colored terms from equation markup."""

    def __init__(self, palette: Optional[ColorPalette] = None):
        self.palette = palette or DEFAULT_PALETTE

    def tokens(self, markup: str) -> List[AnnotationToken]:
        """Annotation occurrences in discovery order."""
        return [span.token for span in tokenize(markup) if span.is_annotation]

    def extract(self, markup: str, color_map: Optional[Mapping[str, str]] = None) -> List[Term]:
        """Extract one term per annotation occurrence.

        Terms missing from ``color_map`` get the palette color of their
        ordinal within this scan, so unpinned colors can shift when an
        earlier annotation is removed.
        """
        color_map = color_map or {}
        terms: List[Term] = []

        for token in self.tokens(markup):
            if token.name in color_map:
                color = color_map[token.name]
            else:
                color = self.palette.color_at(len(terms))

            terms.append(Term(name=token.name, content=token.content, color=color))

        logger.debug(f"Extracted {len(terms)} terms from markup of length {len(markup)}")
        return terms

    def term_names(self, markup: str) -> List[str]:
        """Unique term names in order of first appearance."""
        names = []
        for token in self.tokens(markup):
            if token.name not in names:
                names.append(token.name)
        return names

    def diagnose(self, markup: str) -> List[Dict[str, Any]]:
        """Report annotations the tokenizer cannot represent cleanly.

        Purely informational: extraction and mutation ignore these cases.
        """
        warnings = []
        seen = set()

        for span in tokenize(markup):
            if span.is_annotation:
                token = span.token
                if COMMAND_PATTERN.search(token.content):
                    warnings.append({
                        'type': 'nested_annotation',
                        'position': token.start,
                        'name': token.name,
                        'message': f"Nested annotation inside '{token.name}' is not supported"
                    })
                if token.name in seen:
                    warnings.append({
                        'type': 'duplicate_name',
                        'position': token.start,
                        'name': token.name,
                        'message': f"Term name '{token.name}' is used more than once"
                    })
                seen.add(token.name)
            else:
                for match in COMMAND_PATTERN.finditer(span.raw):
                    warnings.append({
                        'type': 'malformed_annotation',
                        'position': span.start + match.start(),
                        'message': "Incomplete \\clr annotation is left as plain text"
                    })

        return warnings


_default_extractor = AnnotationExtractor()


def extract(markup: str, color_map: Optional[Mapping[str, str]] = None) -> List[Term]:
    """Extract terms using the default palette."""
    return _default_extractor.extract(markup, color_map)
