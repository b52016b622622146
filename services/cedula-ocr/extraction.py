"""Vision extraction — build the Gemini request, call it, parse the JSON reply.

One call per extraction: either a single image or every image of a request
as parts of the same request. Parse failures never raise; they produce a
well-formed all-null result with ``success=False``.
"""

import json
import logging
import re
import time
from typing import Any

from config import settings
from gemini_client import GeminiClient
from models import FIELD_NAMES, NAME_FIELDS, DocumentType, ExtractionResult, UploadedImage
from normalization import capitalize_name, clean_document_number, clean_iso_date, clean_score, clean_text
from prompts import MULTI_IMAGE_PROMPT, SINGLE_IMAGE_PROMPT

CONFIDENCE_SUFFIX = "_confianza"
DATE_FIELDS = frozenset({"fecha_nacimiento", "fecha_expedicion_documento"})

_CODE_FENCE = re.compile(r"```(?:json)?[ \t]*\n?", re.IGNORECASE)
_JSON_DECODER = json.JSONDecoder()


def default_generation_config() -> dict[str, Any]:
    return {
        "temperature": settings.GEMINI_TEMPERATURE,
        "topK": settings.GEMINI_TOP_K,
        "topP": settings.GEMINI_TOP_P,
        "maxOutputTokens": settings.GEMINI_MAX_OUTPUT_TOKENS,
    }


class VisionExtractor:
    """Turns document images into ExtractionResults through a Gemini model."""

    def __init__(
        self,
        client: GeminiClient,
        generation_config: dict[str, Any] | None = None,
        logger: logging.Logger | None = None,
    ):
        self._client = client
        self._generation_config = generation_config or default_generation_config()
        self._log = logger or logging.getLogger(__name__)

    def extract_single(self, image: UploadedImage) -> ExtractionResult:
        """Extract fields from one image with the single-image prompt."""
        return self._extract([image], SINGLE_IMAGE_PROMPT)

    def extract_batch(self, images: list[UploadedImage]) -> ExtractionResult:
        """Extract fields from all images in one request; the model combines them."""
        if not images:
            raise ValueError("extract_batch requires at least one image")
        return self._extract(images, MULTI_IMAGE_PROMPT)

    def _extract(self, images: list[UploadedImage], prompt: str) -> ExtractionResult:
        start = time.monotonic()

        parts: list[dict[str, Any]] = [{"text": prompt}]
        for index, image in enumerate(images, start=1):
            # Privacy: log name, type and size only, never the payload
            self._log.info(
                "Image %d/%d: %s (%s, %d bytes)",
                index, len(images), image.name, image.mime_type, image.size_bytes,
            )
            parts.append({"inline_data": {"mime_type": image.mime_type, "data": image.payload}})

        raw_text = self._client.generate(parts, self._generation_config)
        elapsed_ms = int((time.monotonic() - start) * 1000)

        result = parse_model_reply(raw_text, processing_time_ms=elapsed_ms, logger=self._log)
        self._log.info(
            "Extraction finished in %dms: success=%s type=%s fields=%d",
            elapsed_ms, result.success, result.document_type, result.fields_found(),
        )
        return result


def parse_model_reply(
    raw: str,
    processing_time_ms: int | None = None,
    logger: logging.Logger | None = None,
) -> ExtractionResult:
    """Convert the model's reply text into a typed ExtractionResult.

    Pure: the same text always yields the same result.
    """
    log = logger or logging.getLogger(__name__)

    parsed = try_parse_json(raw)
    if parsed is None:
        log.warning("Could not parse JSON from model response: %s", (raw or "")[:200])
        return ExtractionResult.failed(processing_time_ms=processing_time_ms)

    values: dict[str, str | None] = {}
    scores: dict[str, int] = {}
    for name in FIELD_NAMES:
        values[name] = _clean_field(name, parsed.get(name))
        scores[name] = clean_score(parsed.get(name + CONFIDENCE_SUFFIX))

    return ExtractionResult.build(
        values,
        scores,
        document_type=parse_document_type(parsed.get("tipo_documento")),
        processing_time_ms=processing_time_ms,
    )


def parse_document_type(value: Any) -> DocumentType:
    text = clean_text(value)
    if text is None:
        return "desconocido"
    text = text.upper()
    if text == "CC":
        return "CC"
    if text == "CE":
        return "CE"
    return "desconocido"


def _clean_field(name: str, value: Any) -> str | None:
    if name == "numero_cedula":
        return clean_document_number(value)
    if name in DATE_FIELDS:
        return clean_iso_date(value)
    if name in NAME_FIELDS:
        return capitalize_name(clean_text(value))
    return clean_text(value)


def try_parse_json(raw: str) -> dict | None:
    """Try to extract a JSON object from the model output.

    Handles: direct JSON, markdown fences, and text around the object.
    Only the first top-level object is used.
    """
    if not raw:
        return None

    cleaned = _CODE_FENCE.sub("", raw).strip()

    # Try direct parse first
    try:
        result = json.loads(cleaned)
        if isinstance(result, dict):
            return result
    except json.JSONDecodeError:
        pass

    # Fall back to the first {...} block
    start = cleaned.find("{")
    if start == -1:
        return None
    try:
        result, _ = _JSON_DECODER.raw_decode(cleaned, start)
    except json.JSONDecodeError:
        return None
    return result if isinstance(result, dict) else None
