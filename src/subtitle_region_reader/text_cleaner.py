"""Clean raw OCR output of a subtitle band into a lookup-ready line.

Subtitle OCR tends to pick up junk in front of the actual line: frame
counters, burned-in time-codes, caption badges ("CC", "HD"), and a stray
"ie" that Tesseract reads from the edge of the player UI. Only the LEADING
part of the text is stripped; the interior of the subtitle is never touched.

The strip steps run repeatedly until the text stops changing, which makes
``clean_subtitle_text`` idempotent: stripping one prefix can expose another
("12 00:01:23 PR Hello" needs three of them removed).

Short all-caps badges cannot be told apart from short all-caps words, so
a subtitle written in capitals loses its leading two- and three-letter
words: "YOU ARE NOT READY" cleans to "READY". Mixed-case text is not
affected.
"""

from __future__ import annotations

import re

# ---------------------------------------------------------------------------
# Compiled regex patterns
# ---------------------------------------------------------------------------

# Any whitespace run (newlines included: multi-line subtitles become one line).
_RE_WHITESPACE = re.compile(r"\s+")

# Frame-counter artifacts: "12 Hello", "0042Hello".
_RE_LEADING_DIGITS = re.compile(r"^\d+\s*")

# Burned-in time-codes: "1:23", "01:23", "01:23:45".
_RE_LEADING_TIMECODE = re.compile(r"^\d{1,2}:\d{2}(?::\d{2})?\s*")

# Caption badges from the player overlay. Whole token only, so "Subway"
# or "Capital" are left alone.
CAPTION_TOKENS = ("PR", "CC", "SD", "HD", "SUB", "CAP")
_RE_CAPTION_TOKEN = re.compile(
    r"^(?:" + "|".join(CAPTION_TOKENS) + r")\b\s*",
    re.IGNORECASE,
)

# Any other short all-caps badge followed by a space ("EN ", "TV ").
_RE_UPPER_PREFIX = re.compile(r"^[A-Z]{2,3}\s+")

# Recurring misread of the player edge.
_RE_IE_TOKEN = re.compile(r"^ie\b\s*", re.IGNORECASE)

# Everything up to the first letter. [\W\d_] is "not a letter" for Unicode
# text, so accented and Cyrillic letters survive.
_RE_LEADING_NON_LETTERS = re.compile(r"^[\W\d_]+")

_STRIP_STEPS: tuple[re.Pattern[str], ...] = (
    _RE_LEADING_DIGITS,
    _RE_LEADING_TIMECODE,
    _RE_CAPTION_TOKEN,
    _RE_UPPER_PREFIX,
    _RE_IE_TOKEN,
    _RE_LEADING_NON_LETTERS,
)


def _clean_once(text: str) -> str:
    text = _RE_WHITESPACE.sub(" ", text).strip()
    for pattern in _STRIP_STEPS:
        text = pattern.sub("", text, count=1)
    return text.strip()


def clean_subtitle_text(raw: str | None) -> str:
    """Strip OCR prefix noise and collapse whitespace.

    Never raises. Returns an empty string when nothing letter-like is left,
    which callers treat as "no subtitle detected".
    """
    if not raw or not isinstance(raw, str):
        return ""

    text = raw
    while True:
        cleaned = _clean_once(text)
        if cleaned == text:
            return cleaned
        text = cleaned
