import pytest
import tempfile
from pathlib import Path
from equation_colors.annotation_parser import AnnotationExtractor
from equation_colors.markup_mutator import MarkupMutator
from equation_colors.transcoder import RenderTranscoder
from equation_colors.palette import ColorPalette
from equation_colors.session import EquationEditSession


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_markup():
    """Sample equation markup for testing."""
    return {
        'plain': r'\frac{a}{b} + \sqrt{x}',
        'two_terms': r'x + \clr{a}{y} = \clr{b}{z}',
        'duplicate': r'\clr{v}{x} + \clr{v}{y}',
        'unbalanced': r'x + \clr{a}{y = z',
        'empty_content': r'\clr{a}{} + y',
        'nested': r'\clr{outer}{\clr{inner}{x}}',
        'pinned': r'\clr{mass}{m} \clr{accel}{a} = \clr{force}{F}',
        'regex_name': r'\clr{a.b}{x} + \clr{a+b}{y}'
    }


@pytest.fixture
def palette():
    """Default color palette."""
    return ColorPalette()


@pytest.fixture
def extractor(palette):
    """Annotation extractor instance."""
    return AnnotationExtractor(palette)


@pytest.fixture
def mutator():
    """Markup mutator instance."""
    return MarkupMutator()


@pytest.fixture
def transcoder():
    """Render transcoder instance."""
    return RenderTranscoder()


@pytest.fixture
def session(sample_markup):
    """Edit session opened on the two-term scenario."""
    return EquationEditSession(sample_markup['two_terms'], {})
