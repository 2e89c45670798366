"""
Edit session keeping markup, color map and terms consistent
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional

from .annotation_parser import AnnotationExtractor
from .config import EditorConfig
from .exceptions import SessionClosedError
from .markup_mutator import MarkupMutator
from .models import CommitResult, EquationSnapshot, Term
from .rendering import BaseRenderer, PreviewRenderer, RenderConfig, RenderResult
from .transcoder import RenderTranscoder


logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Lifecycle states of an edit session."""
    OPEN = "open"
    COMMITTED = "committed"
    DISCARDED = "discarded"


class EquationEditSession:
    """Holds one open equation and routes every edit through the engine.

    The term list is derived from the markup on open and on raw edits.
    Structured updates patch matching terms in place so that the ordinal
    colors of other unpinned terms are not disturbed.
    """

    def __init__(self, initial_markup: str = "",
                 initial_color_map: Optional[Mapping[str, str]] = None,
                 config: Optional[EditorConfig] = None,
                 renderer: Optional[BaseRenderer] = None,
                 on_commit: Optional[Callable[[str, Dict[str, str]], Any]] = None,
                 on_discard: Optional[Callable[[], Any]] = None):
        self.config = config or EditorConfig()

        if self.config.verbose:
            logging.basicConfig(level=logging.INFO)
        if self.config.debug:
            logging.basicConfig(level=logging.DEBUG)

        self.palette = self.config.build_palette()
        self.extractor = AnnotationExtractor(self.palette)
        self.mutator = MarkupMutator(
            default_text=self.config.default_term_text,
            clamp_ranges=self.config.clamp_ranges
        )
        self.transcoder = RenderTranscoder(self.config.fallback_color)
        self.renderer = renderer
        self.on_commit = on_commit
        self.on_discard = on_discard

        self.state = SessionState.OPEN
        self.last_render_error: Optional[str] = None
        self._issued_names = set()

        self._markup = initial_markup or ""
        self._color_map: Dict[str, str] = dict(initial_color_map or {})
        self._terms: List[Term] = self.extractor.extract(self._markup, self._color_map)

        logger.info(f"Opened equation with {len(self._terms)} colored terms")

    # Read access

    @property
    def markup(self) -> str:
        return self._markup

    @property
    def color_map(self) -> Dict[str, str]:
        return dict(self._color_map)

    @property
    def terms(self) -> List[Term]:
        return [Term(t.name, t.content, t.color) for t in self._terms]

    @property
    def is_open(self) -> bool:
        return self.state == SessionState.OPEN

    def snapshot(self) -> EquationSnapshot:
        """Copy of the current markup, color map and terms."""
        return EquationSnapshot(markup=self._markup, color_map=self.color_map, terms=self.terms)

    def renderable(self) -> str:
        """Current markup with annotations rewritten as color directives."""
        return self.transcoder.to_renderable(self._markup, self._color_map)

    def diagnostics(self) -> List[Dict[str, Any]]:
        """Structural warnings about the current markup."""
        return self.extractor.diagnose(self._markup)

    # Edits

    def edit_raw_markup(self, new_markup: str) -> List[Term]:
        """Replace the markup and re-derive terms. Stale colors are kept."""
        self._ensure_open()
        self._markup = new_markup
        self._terms = self.extractor.extract(new_markup, self._color_map)
        logger.debug(f"Raw edit: {len(self._terms)} terms")
        return self.terms

    def update_term(self, name: str, new_content: str, new_color: str) -> List[Term]:
        """Change the content and color of every occurrence of a term."""
        self._ensure_open()
        self.mutator.check_text("content", new_content)
        self._color_map[name] = new_color
        self._markup = self.mutator.update_term(self._markup, name, new_content)

        for term in self._terms:
            if term.name == name:
                term.content = new_content
                term.color = new_color

        return self.terms

    def remove_term(self, name: str) -> List[Term]:
        """Unwrap a term back to plain markup and forget its color."""
        self._ensure_open()
        self._markup = self.mutator.remove_term(self._markup, name)
        self._color_map.pop(name, None)
        self._terms = [t for t in self._terms if t.name != name]
        return self.terms

    def add_term(self, start: int, end: int) -> Term:
        """Wrap the selection ``[start, end)`` in a new colored term."""
        self._ensure_open()
        start, end = self.mutator.check_range(self._markup, start, end)

        count = len(self._terms)
        name = self._next_term_name(count)
        color = self.palette.color_at(count)
        content = self._markup[start:end] or self.config.default_term_text

        self._markup = self.mutator.insert_term(self._markup, start, end, name)
        self._color_map[name] = color
        self._issued_names.add(name)

        term = Term(name=name, content=content, color=color)
        self._terms.append(term)
        logger.debug(f"Added term '{name}' with color {color}")
        return Term(name, content, color)

    def _next_term_name(self, count: int) -> str:
        prefix = self.config.term_name_prefix
        index = count + 1
        name = f"{prefix}{index}"

        if not self.config.unique_term_names:
            return name

        taken = self._issued_names | set(self._color_map) | {t.name for t in self._terms}
        while name in taken:
            index += 1
            name = f"{prefix}{index}"
        return name

    # Preview

    def render_preview(self, renderer: Optional[BaseRenderer] = None,
                       config: Optional[RenderConfig] = None) -> RenderResult:
        """Render the current equation. Failures never touch the snapshot."""
        renderer = renderer or self.renderer
        if renderer is None:
            renderer = self.renderer = PreviewRenderer(config)

        latex = self.renderable()
        try:
            result = renderer.render_latex(latex, config)
        except Exception as e:
            logger.warning(f"Preview render failed: {e}")
            result = RenderResult(error=str(e))

        self.last_render_error = result.error
        return result

    # Lifecycle

    def commit(self) -> CommitResult:
        """Finish the session and hand back the markup and color map."""
        self._ensure_open()
        self.state = SessionState.COMMITTED
        result = CommitResult(markup=self._markup, color_map=dict(self._color_map))

        logger.info(f"Committed equation with {len(self._terms)} colored terms")
        if self.on_commit:
            self.on_commit(result.markup, dict(result.color_map))
        return result

    def discard(self):
        """Finish the session without producing output."""
        self._ensure_open()
        self.state = SessionState.DISCARDED

        logger.info("Discarded equation edits")
        if self.on_discard:
            self.on_discard()

    def _ensure_open(self):
        if self.state != SessionState.OPEN:
            raise SessionClosedError(f"Session is already {self.state.value}")
