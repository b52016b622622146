"""Extraction service — the single entry point behind the HTTP API.

Validates the request, decides between one batched model call and one call
per image (reconciled afterwards), retries the whole extraction once when
Gemini is temporarily unavailable, and shapes the response envelope.
"""

import functools
import logging
import time

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from config import settings
from extraction import VisionExtractor
from gemini_client import GeminiServiceError, GeminiServiceUnavailable
from models import (
    DOCUMENT_TYPE_CONFIDENCE,
    DOCUMENT_TYPE_NUMERIC_CONFIDENCE,
    DebugInfo,
    ExtractionResult,
    OCRFile,
    OCRResponse,
    ResponseConfidence,
    ResponseFields,
    ResponseNumericConfidence,
    UploadedImage,
)
from reconciliation import reconcile
from validation import validate_files

MODE_BATCH = "batch"
MODE_PER_IMAGE = "per_image"
EXTRACTION_MODES = (MODE_BATCH, MODE_PER_IMAGE)


class ExtractionService:
    """Orchestrates validation, extraction, reconciliation and the response envelope."""

    def __init__(
        self,
        extractor: VisionExtractor,
        mode: str | None = None,
        model_name: str | None = None,
        retry_attempts: int | None = None,
        retry_delay: float | None = None,
        retry_backoff: float | None = None,
        logger: logging.Logger | None = None,
    ):
        self._extractor = extractor
        self._mode = mode or settings.EXTRACTION_MODE
        if self._mode not in EXTRACTION_MODES:
            raise ValueError(f"Unknown extraction mode: {self._mode!r} (expected one of {EXTRACTION_MODES})")

        self._model_name = model_name or settings.GEMINI_MODEL
        self._retry_attempts = retry_attempts if retry_attempts is not None else settings.GEMINI_RETRY_ATTEMPTS
        self._retry_delay = retry_delay if retry_delay is not None else settings.GEMINI_RETRY_DELAY
        self._retry_backoff = retry_backoff if retry_backoff is not None else settings.GEMINI_RETRY_BACKOFF
        self._log = logger or logging.getLogger(__name__)

    @property
    def mode(self) -> str:
        return self._mode

    def process(self, files: list[OCRFile] | None) -> OCRResponse:
        """Extract cédula fields from 1-2 files.

        Raises InvalidUploadError before any model call when the files are
        invalid. Every other failure is returned as ``success=False``.
        """
        start = time.monotonic()
        images = validate_files(files)

        self._log.info("Processing extraction: files=%d mode=%s", len(images), self._mode)

        try:
            result = self._extract_with_retry(images)
        except (GeminiServiceUnavailable, GeminiServiceError) as e:
            self._log.error("Gemini extraction failed: %s", e)
            return OCRResponse(success=False, error=f"Error en Gemini: {e}")
        except Exception as e:
            self._log.exception("Unexpected extraction failure")
            return OCRResponse(success=False, error=f"Error interno del servidor: {e}")

        elapsed_ms = int((time.monotonic() - start) * 1000)

        if not result.success:
            message = (
                "No se pudo procesar la imagen correctamente"
                if len(images) == 1
                else "No se pudo procesar las imágenes correctamente"
            )
            self._log.warning("Model reply unusable after %dms: %s", elapsed_ms, message)
            return OCRResponse(
                success=False,
                error=message,
                debug=self._debug(result, len(images), elapsed_ms),
            )

        self._log.info(
            "Extraction completed in %dms: type=%s fields=%d",
            elapsed_ms, result.document_type, result.fields_found(),
        )
        return build_response(result, self._debug(result, len(images), elapsed_ms))

    def _extract_with_retry(self, images: list[UploadedImage]) -> ExtractionResult:
        """Retry wrapper — a retry reruns every model call of this request."""

        @retry(
            retry=retry_if_exception_type(GeminiServiceUnavailable),
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential(
                multiplier=self._retry_delay,
                exp_base=self._retry_backoff,
                max=30,
            ),
            reraise=True,
            before_sleep=lambda state: self._log.warning(
                "Gemini unavailable, retrying in %.1fs (attempt %d/%d)",
                state.next_action.sleep,  # type: ignore[union-attr]
                state.attempt_number,
                self._retry_attempts,
            ),
        )
        def _do_extract() -> ExtractionResult:
            return self._extract(images)

        return _do_extract()

    def _extract(self, images: list[UploadedImage]) -> ExtractionResult:
        if len(images) == 1:
            return self._extractor.extract_single(images[0])

        if self._mode == MODE_BATCH:
            return self._extractor.extract_batch(images)

        results = [self._extractor.extract_single(image) for image in images]
        return functools.reduce(
            lambda merged, nxt: reconcile(merged, nxt, logger=self._log),
            results,
        )

    def _debug(self, result: ExtractionResult, files_processed: int, elapsed_ms: int) -> DebugInfo:
        return DebugInfo(
            detected_text=(
                f"Procesado con {self._model_name} - {files_processed} archivo(s) "
                f"- Tipo: {result.document_type}"
            ),
            processing_time=elapsed_ms,
            document_type="frente" if result.document_type in ("CC", "CE") else "desconocido",
            files_processed=files_processed,
            combined_results=files_processed > 1,
        )


def build_response(result: ExtractionResult, debug: DebugInfo | None = None) -> OCRResponse:
    """Fold the document type into the field, confidence and numeric maps."""
    return OCRResponse(
        success=True,
        fields=ResponseFields(
            **result.fields.model_dump(),
            tipo_identificacion=result.document_type,
        ),
        confidence=ResponseConfidence(
            **result.confidence.model_dump(),
            tipo_identificacion=DOCUMENT_TYPE_CONFIDENCE,
        ),
        numeric_confidence=ResponseNumericConfidence(
            **result.numeric_confidence.model_dump(),
            tipo_identificacion=DOCUMENT_TYPE_NUMERIC_CONFIDENCE,
        ),
        debug=debug,
    )
