"""
Data models for colored equation terms
"""

from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any
from enum import Enum


class SpanType(Enum):
    """Kinds of spans produced by the annotation tokenizer."""
    TEXT = "text"
    ANNOTATION = "annotation"


@dataclass(frozen=True)
class AnnotationToken:
    """One parsed occurrence of \\clr{name}{content}."""
    name: str
    content: str
    start: int
    end: int
    raw: str = ""

    @property
    def length(self) -> int:
        return self.end - self.start

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'name': self.name,
            'content': self.content,
            'start': self.start,
            'end': self.end,
            'raw': self.raw
        }


@dataclass(frozen=True)
class Span:
    """A contiguous slice of markup, either literal text or an annotation."""
    type: SpanType
    raw: str
    start: int
    token: Optional[AnnotationToken] = None

    @property
    def end(self) -> int:
        return self.start + len(self.raw)

    @property
    def is_annotation(self) -> bool:
        return self.type == SpanType.ANNOTATION

    @property
    def name(self) -> Optional[str]:
        return self.token.name if self.token else None

    @property
    def content(self) -> Optional[str]:
        return self.token.content if self.token else None


@dataclass
class Term:
    """Structured view of one annotation occurrence."""
    name: str
    content: str
    color: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'name': self.name,
            'content': self.content,
            'color': self.color
        }


@dataclass
class EquationSnapshot:
    """Markup, color map and derived terms of one open equation."""
    markup: str
    color_map: Dict[str, str] = field(default_factory=dict)
    terms: List[Term] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'markup': self.markup,
            'color_map': dict(self.color_map),
            'terms': [t.to_dict() for t in self.terms],
            'statistics': self.get_statistics()
        }

    def get_statistics(self) -> Dict[str, Any]:
        """Get statistics about the snapshot."""
        names = [t.name for t in self.terms]
        return {
            'total_terms': len(self.terms),
            'unique_names': len(set(names)),
            'pinned_colors': len(self.color_map),
            'stale_colors': len(set(self.color_map) - set(names))
        }


@dataclass(frozen=True)
class CommitResult:
    """Committed (markup, color map) pair handed back to the host editor."""
    markup: str
    color_map: Dict[str, str]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'markup': self.markup,
            'color_map': dict(self.color_map)
        }

    def __iter__(self):
        return iter((self.markup, self.color_map))
