import io
import tempfile
import subprocess
import shutil
import regex
from typing import Optional
from pathlib import Path
import logging
from PIL import Image
from .base_renderer import BaseRenderer, RenderConfig, RenderResult
from ..exceptions import RenderError


logger = logging.getLogger(__name__)

# xcolor has no #RRGGBB syntax, it takes the HTML model instead
HEX_COLOR_PATTERN = regex.compile(r"\\textcolor\{#([0-9a-fA-F]{6}|[0-9a-fA-F]{3})\}")


def expand_hex(digits: str) -> str:
    """Normalize RGB or RRGGBB hex digits to the RRGGBB form xcolor expects."""
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    return digits.upper()


class LaTeXRenderer(BaseRenderer):
    """Render color-directive markup using a system LaTeX installation."""

    LATEX_TEMPLATE = r"""
\documentclass[{font_size}pt,border={{{padding}pt}}]{{standalone}}
\usepackage{{amsmath}}
\usepackage{{amssymb}}
\usepackage{{xcolor}}
{packages}
{preamble}
\pagestyle{{empty}}
\begin{{document}}
\color{{{color}}}
{content}
\end{{document}}
"""

    def __init__(self, latex_cmd: str = "pdflatex", cache_dir: Optional[Path] = None,
                 config: Optional[RenderConfig] = None):
        super().__init__(config)
        self.latex_cmd = latex_cmd
        self.cache_dir = Path(cache_dir or self.config.cache_dir
                              or Path(tempfile.gettempdir()) / "equation_colors_cache")
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self._available = None

    def is_available(self) -> bool:
        """Check if LaTeX is available."""
        if self._available is None:
            self._available = self._check_latex()
        return self._available

    def _check_latex(self) -> bool:
        """Check if LaTeX installation is available."""
        try:
            result = subprocess.run(
                [self.latex_cmd, "--version"],
                capture_output=True,
                text=True,
                timeout=5
            )
            return result.returncode == 0
        except (OSError, subprocess.SubprocessError):
            return False

    def render_latex(self, latex: str, config: Optional[RenderConfig] = None) -> RenderResult:
        """Render markup to an image (or pdf bytes)."""
        config = config or self.config

        if not self.is_available():
            return self._fail("LaTeX not available", config)

        # Check cache
        cache_key = self.get_cache_key(latex, config)
        cached_path = self.cache_dir / f"{cache_key}.{config.output_format}"

        if config.cache_renders and cached_path.exists():
            try:
                return self._load_cached(cached_path, config)
            except OSError:
                logger.warning(f"Failed to load cached render: {cached_path}")

        with tempfile.TemporaryDirectory() as temp_dir:
            temp_path = Path(temp_dir)

            tex_file = temp_path / "formula.tex"
            tex_file.write_text(self.build_document(latex, config), encoding='utf-8')

            try:
                result = subprocess.run(
                    self._compile_command(config),
                    cwd=temp_path,
                    capture_output=True,
                    text=True,
                    timeout=config.timeout
                )
            except subprocess.TimeoutExpired:
                return self._fail("LaTeX compilation timeout", config)
            except OSError as e:
                return self._fail(f"LaTeX compilation error: {str(e)}", config)

            pdf_file = temp_path / "formula.pdf"
            warnings = []

            if result.returncode != 0:
                error_msg = self._extract_error_message(result.stdout + result.stderr)
                # Error-tolerant mode keeps whatever pdflatex managed to produce
                if config.throw_on_error or not pdf_file.exists():
                    return self._fail(f"LaTeX compilation failed: {error_msg}", config)
                warnings.append(error_msg)

            if not pdf_file.exists():
                return self._fail("PDF output not found", config)

            metadata = {"renderer": "latex", "dpi": config.dpi, "warnings": warnings}

            if config.output_format == "pdf":
                pdf_bytes = pdf_file.read_bytes()
                if config.cache_renders and not warnings:
                    shutil.copyfile(pdf_file, cached_path)
                return RenderResult(pdf_bytes=pdf_bytes, metadata=metadata)

            image = self._pdf_to_image(pdf_file, config)
            if image is None:
                return self._fail("Failed to convert PDF to image", config)

            if not config.transparent_background:
                background = Image.new('RGBA', image.size, config.background_color)
                if image.mode == 'RGBA':
                    background.paste(image, mask=image.split()[3])
                else:
                    background.paste(image)
                image = background.convert('RGB')

            if config.cache_renders and not warnings:
                try:
                    image.save(cached_path, "PNG")
                except OSError:
                    logger.warning(f"Failed to cache image: {cached_path}")

            return RenderResult(image=image, size=image.size, metadata=metadata)

    def build_document(self, latex: str, config: RenderConfig) -> str:
        """Wrap markup in a standalone document that loads xcolor."""
        latex = HEX_COLOR_PATTERN.sub(
            lambda m: f"\\textcolor[HTML]{{{expand_hex(m.group(1))}}}", latex
        )

        if not latex.startswith('$') and not latex.startswith('\\['):
            content = f"$\\displaystyle {latex}$"
        else:
            content = latex

        packages = "\n".join(f"\\usepackage{{{p}}}" for p in config.packages)
        return self.LATEX_TEMPLATE.format(
            font_size=config.font_size,
            padding=config.padding,
            packages=packages,
            preamble=config.latex_preamble,
            color=config.text_color,
            content=content
        )

    def _compile_command(self, config: RenderConfig) -> list:
        cmd = [self.latex_cmd, "-interaction=nonstopmode"]
        if config.throw_on_error:
            cmd.append("-halt-on-error")
        if not config.trust:
            cmd.append("-no-shell-escape")
        cmd.append("formula.tex")
        return cmd

    def _fail(self, message: str, config: RenderConfig) -> RenderResult:
        if config.throw_on_error:
            raise RenderError(message)
        return RenderResult(error=message)

    def _load_cached(self, cached_path: Path, config: RenderConfig) -> RenderResult:
        metadata = {"cached": True, "renderer": "latex"}
        if config.output_format == "pdf":
            return RenderResult(pdf_bytes=cached_path.read_bytes(), metadata=metadata)

        image = Image.open(cached_path)
        return RenderResult(image=image, size=image.size, metadata=metadata)

    def _extract_error_message(self, output: str) -> str:
        """Extract meaningful error message from LaTeX output."""
        lines = output.split('\n')

        error_lines = []
        for i, line in enumerate(lines):
            if line.strip().startswith('!'):
                error_lines.append(line.strip())
                # Next few lines carry the context
                for j in range(i + 1, min(i + 3, len(lines))):
                    if lines[j].strip():
                        error_lines.append(lines[j].strip())

        if error_lines:
            return " ".join(error_lines[:3])

        non_empty = [l.strip() for l in lines if l.strip()]
        return " ".join(non_empty[-3:]) if non_empty else "Unknown error"

    def _pdf_to_image(self, pdf_path: Path, config: RenderConfig) -> Optional[Image.Image]:
        """Convert PDF to image using available tools."""
        # Try pdf2image (using Poppler)
        try:
            from pdf2image import convert_from_path

            images = convert_from_path(
                pdf_path,
                dpi=config.dpi,
                transparent=config.transparent_background,
                fmt='png',
                single_file=True
            )

            if images:
                return images[0]

        except ImportError:
            logger.warning("pdf2image not available")
        except Exception as e:
            logger.warning(f"pdf2image failed: {e}")

        # Try ImageMagick/Wand
        try:
            from wand.image import Image as WandImage

            with WandImage(filename=str(pdf_path), resolution=config.dpi) as img:
                img.format = 'png'
                img.background_color = 'transparent' if config.transparent_background else 'white'
                img.alpha_channel = 'remove'
                return Image.open(io.BytesIO(img.make_blob()))

        except ImportError:
            logger.warning("Wand not available")
        except Exception as e:
            logger.warning(f"Wand failed: {e}")

        # Try subprocess with ImageMagick convert
        output_path = pdf_path.with_suffix('.png')
        cmd = [
            'convert',
            '-density', str(config.dpi),
            '-background', 'transparent' if config.transparent_background else 'white',
            '-alpha', 'remove',
            str(pdf_path),
            str(output_path)
        ]

        try:
            result = subprocess.run(cmd, capture_output=True, timeout=10)
            if result.returncode == 0 and output_path.exists():
                # Load now, the temp directory is removed after rendering
                image = Image.open(output_path)
                image.load()
                return image
        except (OSError, subprocess.SubprocessError):
            logger.warning("ImageMagick convert not available")

        return None

    def clear_cache(self):
        """Clear the render cache."""
        if self.cache_dir.exists():
            shutil.rmtree(self.cache_dir)
            self.cache_dir.mkdir(parents=True, exist_ok=True)
