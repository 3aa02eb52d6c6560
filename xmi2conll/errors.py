"""
Exception types raised by xmi2conll.
"""

from __future__ import annotations


class Xmi2ConllError(Exception):
    """Base class for all xmi2conll errors."""


class AlignmentError(Xmi2ConllError):
    """The tokenization cannot be found verbatim (modulo whitespace) in the document text."""

    def __init__(self, message: str, position: int, token: str):
        super().__init__(message)
        self.position = position
        self.token = token


class TokenNotFoundError(AlignmentError):
    """A token was expected, but only whitespace remains in the document text."""

    def __init__(self, position: int, token: str):
        super().__init__(
            f"expected token {token!r} at index {position}, but only whitespace remains",
            position,
            token,
        )


class TokenMismatchError(AlignmentError):
    """The document text at the current position does not start with the expected token."""

    def __init__(self, position: int, token: str, found: str = ""):
        super().__init__(
            f"expected token {token!r} at index {position}, found {found!r}",
            position,
            token,
        )
        self.found = found


class XmiFormatError(Xmi2ConllError):
    """The XMI input cannot be used (unknown format, malformed XML)."""
