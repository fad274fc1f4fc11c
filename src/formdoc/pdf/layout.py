"""Line wrapping for the built-in (non-embedded) PDF fonts.

The standard fonts only cover a Latin-1-ish code page, and this writer emits
literal strings without an encoding table, so text is reduced to printable
ASCII: accents are stripped, other non-ASCII characters are dropped, and the
string-literal delimiters are escaped.
"""

from __future__ import annotations

import re
import unicodedata

_WHITESPACE_RE = re.compile(r"\s")
_ESCAPES = {"\\": "\\\\", "(": "\\(", ")": "\\)"}
# One drawn glyph: an escape pair or a single character.
_GLYPH_RE = re.compile(r"\\.|.")


def sanitize_text(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text.replace("\u00a0", " "))
    out: list[str] = []
    for ch in decomposed:
        if unicodedata.combining(ch):
            continue
        if _WHITESPACE_RE.match(ch):
            out.append(" ")
        elif ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif " " <= ch <= "~":
            out.append(ch)
    return "".join(out)


def glyph_width(text: str) -> int:
    """Number of glyphs ``text`` draws once its escape pairs are decoded."""
    return len(_GLYPH_RE.findall(text))


def _split_word(word: str, limit: int) -> list[str]:
    # Chunk boundaries fall between glyphs, never inside an escape pair.
    chunks: list[str] = []
    chunk = ""
    count = 0
    for glyph in _GLYPH_RE.findall(word):
        if count == limit:
            chunks.append(chunk)
            chunk, count = "", 0
        chunk += glyph
        count += 1
    chunks.append(chunk)
    return chunks


def wrap_lines(text: str, max_line_length: int) -> list[str]:
    """Sanitize ``text`` and greedily wrap it to ``max_line_length`` glyphs.

    Escape pairs count as one glyph. Always returns at least one line; blank
    input yields ``[""]``.
    """
    limit = max(1, max_line_length)
    lines: list[str] = []
    current = ""
    width = 0

    for word in sanitize_text(text).split(" "):
        if not word:
            continue
        word_width = glyph_width(word)
        if word_width > limit:
            if current:
                lines.append(current)
            *full, current = _split_word(word, limit)
            lines.extend(full)
            width = glyph_width(current)
            continue
        if not current:
            current, width = word, word_width
        elif width + 1 + word_width <= limit:
            current, width = f"{current} {word}", width + 1 + word_width
        else:
            lines.append(current)
            current, width = word, word_width

    if current or not lines:
        lines.append(current)
    return lines
