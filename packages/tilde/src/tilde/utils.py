"""Terminal text measurement: visible column widths and truncation.

Row content is laid out in terminal columns, not code points, so anything
placed on screen (the welcome banner today, buffer rows later) is measured
here.
"""

from __future__ import annotations

import unicodedata

import grapheme
import wcwidth as _wcwidth


def _grapheme_width(g: str) -> int:
    """Return the terminal display width of a single grapheme cluster.

    Control characters and lone combining marks are zero width, emoji
    sequences (VS16, ZWJ, regional indicators) are two columns, everything
    else is delegated to wcwidth on the base code point.
    """
    if not g:
        return 0

    if len(g) == 1:
        cp = ord(g)
        if cp < 0x20 or (0x7F <= cp <= 0x9F):
            return 0
        return max(_wcwidth.wcwidth(g), 0)

    for ch in g:
        cp = ord(ch)
        if cp in (0xFE0F, 0x200D):
            return 2
        if 0x1F1E6 <= cp <= 0x1F1FF or 0x1F3FB <= cp <= 0x1F3FF:
            return 2

    base = g[0]
    if ord(base) >= 0x1F000:
        return 2
    cat = unicodedata.category(base)
    if cat.startswith("M") or cat == "Cf":
        return 0
    return max(_wcwidth.wcwidth(base), 0)


def visible_width(text: str) -> int:
    """Calculate the number of terminal columns *text* occupies.

    Pure printable ASCII takes a fast path; other strings are measured per
    grapheme cluster.
    """
    if not text:
        return 0

    if all(0x20 <= ord(ch) <= 0x7E for ch in text):
        return len(text)

    return sum(_grapheme_width(g) for g in grapheme.graphemes(text))


def truncate_to_width(text: str, max_width: int) -> str:
    """Truncate *text* to fit within *max_width* visible columns.

    The cut always falls on a grapheme boundary, so a wide character that
    would straddle the limit is dropped entirely.
    """
    if max_width <= 0:
        return ""

    if visible_width(text) <= max_width:
        return text

    return _take_columns(text, max_width)


def _take_columns(text: str, max_cols: int) -> str:
    result: list[str] = []
    cols = 0
    for g in grapheme.graphemes(text):
        w = _grapheme_width(g)
        if cols + w > max_cols:
            break
        result.append(g)
        cols += w
    return "".join(result)
