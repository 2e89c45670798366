"""
Exceptions raised by the equation colors engine
"""


class EquationColorsError(Exception):
    """Base class for all package errors."""


class InvalidRangeError(EquationColorsError, ValueError):
    """Selection range falls outside the markup."""

    def __init__(self, start: int, end: int, length: int):
        self.start = start
        self.end = end
        self.length = length
        super().__init__(
            f"Invalid range [{start}, {end}) for markup of length {length}"
        )


class SessionClosedError(EquationColorsError, RuntimeError):
    """Mutation attempted on a committed or discarded session."""


class RenderError(EquationColorsError):
    """Renderer rejected the transcoded markup."""


class ConfigurationError(EquationColorsError, ValueError):
    """Invalid or unreadable editor configuration."""


class UnreadableTermError(EquationColorsError, ValueError):
    """Term name or content would produce an annotation the tokenizer cannot read back."""

    def __init__(self, field_name: str, text: str):
        self.field_name = field_name
        self.text = text
        super().__init__(
            f"Term {field_name} {text!r} must be non-empty and must not contain '}}'"
        )
