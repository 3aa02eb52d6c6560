"""
Alignment of a tokenization with the text it was produced from.

An ``Aligner`` is initialized with the document text and then delivers,
token by token, the index at which the next token has to start. Usage::

    aligner = Aligner(text)
    for token in tokens:
        if not aligner.find_next_token():
            ...  # only whitespace remains: token not found
        elif text.startswith(token, aligner.position):
            aligner.advance(len(token))
        else:
            ...  # text and expected token deviate

Checking that the expected token actually starts at the returned position is
left to the caller, so that it can report mismatches with its own context.
"""

from __future__ import annotations

import re

# Unicode general category Z (Zs, Zl, Zp)
UNICODE_SEPARATORS = (
    "\u0020\u00a0\u1680"
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u2028\u2029\u202f\u205f\u3000"
)
# Tab, LF, VT, FF, CR and the information separators U+001C..U+001F
CONTROL_WHITESPACE = "\t\n\x0b\x0c\r\x1c\x1d\x1e\x1f"
WHITESPACE_CHARS = CONTROL_WHITESPACE + UNICODE_SEPARATORS
WHITESPACE_PATTERN = re.compile("[" + re.escape(WHITESPACE_CHARS) + "]*")


def is_alignment_whitespace(char: str) -> bool:
    """Return True if *char* is skipped between tokens during alignment."""
    return len(char) == 1 and char in WHITESPACE_CHARS


class Aligner:
    def __init__(self, text: str, position: int = 0):
        self._text = text
        self._end = len(text)
        self._pos = position

    @property
    def text(self) -> str:
        return self._text

    @property
    def position(self) -> int:
        """Start of the current token after a successful ``find_next_token``."""
        return self._pos

    def current_position(self) -> int:
        return self._pos

    def find_next_token(self) -> bool:
        """
        Skip whitespace (possibly none) from the current position.

        Returns True and moves to the first non-whitespace character if there
        is one; otherwise returns False and leaves the position unchanged.
        """
        whitespace_end = WHITESPACE_PATTERN.match(self._text, self._pos).end()
        if whitespace_end < self._end:
            self._pos = whitespace_end
            return True
        return False

    def advance(self, length: int) -> None:
        """Pass over a token of *length* characters (codepoints)."""
        self._pos += length

    def remaining_text(self) -> str:
        return self._text[self._pos:]
