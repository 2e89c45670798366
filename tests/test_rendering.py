import pytest
from unittest.mock import Mock, patch
from pathlib import Path
from PIL import Image
from equation_colors.rendering import (
    PreviewRenderer, RenderConfig, RenderResult, LaTeXRenderer
)
from equation_colors.rendering.latex_renderer import expand_hex
from equation_colors.exceptions import RenderError


class TestRenderConfig:

    def test_default_config(self):
        """Test default render configuration."""
        config = RenderConfig()
        assert config.dpi == 300
        assert config.output_format == "png"
        assert not config.throw_on_error
        assert not config.trust


class TestRenderResult:

    def test_is_valid(self):
        """Test validity of render results."""
        assert RenderResult(pdf_bytes=b'%PDF').is_valid
        assert not RenderResult().is_valid
        assert not RenderResult(pdf_bytes=b'%PDF', error="bad").is_valid

    def test_save(self, temp_dir):
        """Test saving results to disk."""
        path = temp_dir / "out.pdf"
        RenderResult(pdf_bytes=b'%PDF').save(path)
        assert path.read_bytes() == b'%PDF'

        with pytest.raises(ValueError):
            RenderResult(error="bad").save(temp_dir / "none.png")


class TestLaTeXRenderer:

    @patch('subprocess.run')
    def test_is_available(self, mock_run, temp_dir):
        """Test LaTeX availability check."""
        mock_run.return_value = Mock(returncode=0)

        renderer = LaTeXRenderer(cache_dir=temp_dir)
        assert renderer.is_available()

        mock_run.return_value = Mock(returncode=1)
        renderer._available = None
        assert not renderer.is_available()

    @patch('subprocess.run', side_effect=FileNotFoundError("pdflatex"))
    def test_missing_binary(self, mock_run, temp_dir):
        """Test a missing LaTeX binary is reported as unavailable."""
        renderer = LaTeXRenderer(cache_dir=temp_dir)

        assert not renderer.is_available()
        assert renderer.render_latex("x", RenderConfig()).error == "LaTeX not available"

    def test_build_document_loads_xcolor(self, temp_dir):
        """Test generated document can resolve color directives."""
        renderer = LaTeXRenderer(cache_dir=temp_dir)
        document = renderer.build_document(r'\textcolor{#ef4444}{y}', RenderConfig(packages=['bm']))

        assert r'\usepackage{xcolor}' in document
        assert r'\usepackage{bm}' in document
        assert r'$\displaystyle \textcolor[HTML]{EF4444}{y}$' in document

    def test_build_document_keeps_named_colors(self, temp_dir):
        """Test non-hex color tokens are passed to xcolor unchanged."""
        renderer = LaTeXRenderer(cache_dir=temp_dir)
        document = renderer.build_document(r'\textcolor{red}{y}', RenderConfig())

        assert r'\textcolor{red}{y}' in document

    def test_build_document_expands_short_hex(self, temp_dir):
        """Test three-digit hex colors are widened for the HTML model."""
        renderer = LaTeXRenderer(cache_dir=temp_dir)
        document = renderer.build_document(r'\textcolor{#f00}{y} + \textcolor{#0aF}{z}', RenderConfig())

        assert r'\textcolor[HTML]{FF0000}{y}' in document
        assert r'\textcolor[HTML]{00AAFF}{z}' in document
        assert '#' not in document

    @pytest.mark.parametrize("digits,expected", [
        ("f00", "FF0000"),
        ("ABC", "AABBCC"),
        ("ef4444", "EF4444"),
    ])
    def test_expand_hex(self, digits, expected):
        """Test hex digit normalization."""
        assert expand_hex(digits) == expected

    def test_compile_command(self, temp_dir):
        """Test renderer options map to pdflatex flags."""
        renderer = LaTeXRenderer(cache_dir=temp_dir)

        strict = renderer._compile_command(RenderConfig(throw_on_error=True))
        tolerant = renderer._compile_command(RenderConfig(trust=True))

        assert '-halt-on-error' in strict
        assert '-no-shell-escape' in strict
        assert '-halt-on-error' not in tolerant
        assert '-no-shell-escape' not in tolerant

    @patch.object(LaTeXRenderer, 'is_available', return_value=True)
    @patch('subprocess.run')
    @patch.object(LaTeXRenderer, '_pdf_to_image')
    def test_render_latex(self, mock_pdf_to_image, mock_run, mock_available, temp_dir):
        """Test LaTeX rendering."""
        def compile_pdf(cmd, cwd, **kwargs):
            (Path(cwd) / "formula.pdf").write_bytes(b'%PDF')
            return Mock(returncode=0, stdout="", stderr="")

        mock_run.side_effect = compile_pdf
        mock_pdf_to_image.return_value = Image.new('RGB', (100, 50))

        renderer = LaTeXRenderer(cache_dir=temp_dir)
        result = renderer.render_latex(r"\textcolor{red}{x}", RenderConfig())

        assert result.is_valid
        assert result.image is not None
        assert result.size == (100, 50)

    @patch.object(LaTeXRenderer, 'is_available', return_value=True)
    @patch('subprocess.run')
    def test_render_pdf_output(self, mock_run, mock_available, temp_dir):
        """Test pdf output skips rasterization."""
        def compile_pdf(cmd, cwd, **kwargs):
            (Path(cwd) / "formula.pdf").write_bytes(b'%PDF-1.5')
            return Mock(returncode=0, stdout="", stderr="")

        mock_run.side_effect = compile_pdf

        renderer = LaTeXRenderer(cache_dir=temp_dir)
        result = renderer.render_latex("x", RenderConfig(output_format="pdf"))

        assert result.pdf_bytes == b'%PDF-1.5'

    @patch.object(LaTeXRenderer, 'is_available', return_value=True)
    @patch('subprocess.run')
    def test_compilation_failure(self, mock_run, mock_available, temp_dir):
        """Test failed compilation returns an error result."""
        mock_run.return_value = Mock(
            returncode=1, stdout="! Undefined control sequence.\nl.5 \\foo", stderr=""
        )

        renderer = LaTeXRenderer(cache_dir=temp_dir)
        result = renderer.render_latex(r"\foo", RenderConfig())

        assert not result.is_valid
        assert "Undefined control sequence" in result.error

    @patch.object(LaTeXRenderer, 'is_available', return_value=True)
    @patch('subprocess.run')
    def test_compilation_failure_raises_when_strict(self, mock_run, mock_available, temp_dir):
        """Test throw_on_error raises RenderError."""
        mock_run.return_value = Mock(returncode=1, stdout="! Missing $ inserted.", stderr="")

        renderer = LaTeXRenderer(cache_dir=temp_dir)
        with pytest.raises(RenderError):
            renderer.render_latex("x^", RenderConfig(throw_on_error=True))

    @patch.object(LaTeXRenderer, 'is_available', return_value=True)
    @patch('subprocess.run')
    def test_tolerant_mode_keeps_partial_output(self, mock_run, mock_available, temp_dir):
        """Test error-tolerant mode returns the pdf with warnings."""
        def compile_with_errors(cmd, cwd, **kwargs):
            (Path(cwd) / "formula.pdf").write_bytes(b'%PDF')
            return Mock(returncode=1, stdout="! Undefined control sequence.", stderr="")

        mock_run.side_effect = compile_with_errors

        renderer = LaTeXRenderer(cache_dir=temp_dir)
        result = renderer.render_latex(r"\foo", RenderConfig(output_format="pdf"))

        assert result.is_valid
        assert result.metadata['warnings']

    def test_extract_error_message(self, temp_dir):
        """Test LaTeX error message extraction."""
        renderer = LaTeXRenderer(cache_dir=temp_dir)

        output = """
        ! Undefined control sequence.
        l.5 \\unknowncommand
        The control sequence at the end of the top line
        """

        error_msg = renderer._extract_error_message(output)
        assert "Undefined control sequence" in error_msg

    @patch.object(LaTeXRenderer, 'is_available', return_value=True)
    def test_cache_functionality(self, mock_available, temp_dir):
        """Test caching functionality."""
        renderer = LaTeXRenderer(cache_dir=temp_dir)
        config = RenderConfig(cache_renders=True)

        def compile_pdf(cmd, cwd, **kwargs):
            (Path(cwd) / "formula.pdf").write_bytes(b'%PDF')
            return Mock(returncode=0, stdout="", stderr="")

        with patch.object(renderer, '_pdf_to_image') as mock_convert:
            mock_convert.return_value = Image.new('RGB', (100, 50))

            with patch('subprocess.run', side_effect=compile_pdf) as mock_run:
                renderer.render_latex("x + y", config)
                assert mock_run.call_count == 1

                # Second render is served from the cache
                result = renderer.render_latex("x + y", config)
                assert mock_run.call_count == 1
                assert result.metadata.get("cached")

    def test_clear_cache(self, temp_dir):
        """Test clearing removes cached renders but keeps the directory."""
        cache_dir = temp_dir / "cache"
        renderer = LaTeXRenderer(cache_dir=cache_dir)
        (cache_dir / "stale.png").write_bytes(b'png')

        renderer.clear_cache()

        assert cache_dir.is_dir()
        assert list(cache_dir.iterdir()) == []


class TestPreviewRenderer:

    def test_uses_first_available(self):
        """Test default renderer selection."""
        unavailable = Mock(is_available=Mock(return_value=False))
        available = Mock(is_available=Mock(return_value=True))
        available.render_latex.return_value = RenderResult(pdf_bytes=b'%PDF')

        renderer = PreviewRenderer(renderers=[unavailable, available])

        assert renderer.default_renderer is available
        assert renderer.render_latex("x").is_valid

    def test_fallback_on_failure(self):
        """Test fallback renderers are tried after a failure."""
        primary = Mock(is_available=Mock(return_value=True))
        primary.render_latex.return_value = RenderResult(error="boom")
        secondary = Mock(is_available=Mock(return_value=True))
        secondary.render_latex.return_value = RenderResult(pdf_bytes=b'%PDF')

        renderer = PreviewRenderer(renderers=[primary, secondary])

        assert renderer.render_latex("x").is_valid
        secondary.render_latex.assert_called_once()

    def test_no_renderer(self):
        """Test error result when nothing is available."""
        renderer = PreviewRenderer(renderers=[])

        assert not renderer.is_available()
        assert renderer.render_latex("x").error == "No preview renderer available"

    def test_get_available_renderers(self, temp_dir):
        """Test only available renderers are listed, by class name."""
        unavailable = Mock(is_available=Mock(return_value=False))
        latex = LaTeXRenderer(cache_dir=temp_dir)

        with patch.object(LaTeXRenderer, 'is_available', return_value=True):
            renderer = PreviewRenderer(renderers=[unavailable, latex])
            assert renderer.get_available_renderers() == ['LaTeXRenderer']

        assert PreviewRenderer(renderers=[unavailable]).get_available_renderers() == []
