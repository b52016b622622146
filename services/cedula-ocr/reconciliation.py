"""Merge two independent extraction attempts into one result without losing data.

Per field:
1. only one side has a value -> take it, with its confidence
2. both have a value -> the strictly higher numeric confidence wins
3. equal numeric confidence -> the first result wins
4. neither has a value -> null, 0/bajo

Document type prefers CC, then CE, then desconocido. The merge is pure and
total: it has no failure mode and keeps no reference to its inputs.
"""

import logging

from models import FIELD_NAMES, NAME_FIELDS, DocumentType, ExtractionResult
from normalization import capitalize_name


def reconcile(
    first: ExtractionResult,
    second: ExtractionResult,
    logger: logging.Logger | None = None,
) -> ExtractionResult:
    """Combine two ExtractionResults field by field."""
    log = logger or logging.getLogger(__name__)

    values: dict[str, str | None] = {}
    scores: dict[str, int] = {}

    for name in FIELD_NAMES:
        value, score, source = _pick(first, second, name)
        if source:
            # Field names and scores only; values are personal data
            log.debug("Field %s taken from image %d (%d%%)", name, source, score)
        if name in NAME_FIELDS:
            value = capitalize_name(value)
        values[name] = value
        scores[name] = score

    return ExtractionResult.build(
        values,
        scores,
        document_type=merge_document_type(first.document_type, second.document_type),
        success=first.success or second.success,
    )


def merge_document_type(first: DocumentType, second: DocumentType) -> DocumentType:
    if "CC" in (first, second):
        return "CC"
    if "CE" in (first, second):
        return "CE"
    return "desconocido"


def _pick(first: ExtractionResult, second: ExtractionResult, name: str) -> tuple[str | None, int, int]:
    """Return (value, score, source) where source is 1, 2, or 0 when both are empty."""
    value1, value2 = _present(first.value(name)), _present(second.value(name))
    score1, score2 = first.score(name), second.score(name)

    if value1 is None and value2 is None:
        return None, 0, 0
    if value2 is None:
        return value1, score1, 1
    if value1 is None:
        return value2, score2, 2
    if score2 > score1:
        return value2, score2, 2
    return value1, score1, 1


def _present(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value
