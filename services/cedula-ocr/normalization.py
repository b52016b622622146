"""Field normalization shared by reply parsing and reconciliation.

Everything here is a pure function over plain values so the parse boundary
and the reconciler apply exactly the same rules.
"""

import datetime
import math
import re
from typing import Any, Literal

ConfidenceLevel = Literal["alto", "medio", "bajo"]

HIGH_CONFIDENCE_THRESHOLD = 70
MEDIUM_CONFIDENCE_THRESHOLD = 40

DOCUMENT_NUMBER_MIN_DIGITS = 6
DOCUMENT_NUMBER_MAX_DIGITS = 11

_WORD_START = re.compile(r"\b\w")
_NUMBER_SEPARATORS = re.compile(r"[.,\s\-]")
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def confidence_level(score: int) -> ConfidenceLevel:
    """Map a 0-100 score to its bucket: >=70 alto, >=40 medio, else bajo."""
    if score >= HIGH_CONFIDENCE_THRESHOLD:
        return "alto"
    if score >= MEDIUM_CONFIDENCE_THRESHOLD:
        return "medio"
    return "bajo"


def capitalize_name(text: str | None) -> str | None:
    """Lowercase the whole string, then uppercase the first letter of each word.

    "MARIA DEL CARMEN" -> "Maria Del Carmen". Blank input becomes None.
    """
    if text is None:
        return None
    text = text.strip()
    if not text:
        return None
    return _WORD_START.sub(lambda m: m.group(0).upper(), text.lower())


def clean_text(value: Any) -> str | None:
    """Return a stripped string, or None for anything that is not non-empty text."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    if not value or value.lower() == "null":
        return None
    return value


def clean_document_number(value: Any) -> str | None:
    """Strip thousands separators and keep the number only if it is 6-11 digits."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        value = str(value)
    text = clean_text(value)
    if text is None:
        return None

    digits = _NUMBER_SEPARATORS.sub("", text)
    if not digits.isdigit() or not digits.isascii():
        return None
    if not DOCUMENT_NUMBER_MIN_DIGITS <= len(digits) <= DOCUMENT_NUMBER_MAX_DIGITS:
        return None
    return digits


def clean_iso_date(value: Any) -> str | None:
    """Keep a value only if it is a real calendar date written as YYYY-MM-DD."""
    text = clean_text(value)
    if text is None or not _ISO_DATE.match(text):
        return None
    try:
        datetime.date.fromisoformat(text)
    except ValueError:
        return None
    return text


def clean_score(value: Any) -> int:
    """Coerce a reported confidence to an int clamped to 0-100; junk becomes 0."""
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, str):
        try:
            value = float(value.strip().rstrip("%"))
        except ValueError:
            return 0
    if isinstance(value, int):
        return max(0, min(100, value))
    if not isinstance(value, float) or math.isnan(value):
        return 0
    return int(round(max(0.0, min(100.0, value))))
