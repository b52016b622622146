"""FastAPI cédula OCR service — extracts identity-document fields with Gemini.

Images arrive base64-encoded in a JSON body, are validated, sent to the model
and discarded. GDPR: no image logging, no disk writes.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from extraction import VisionExtractor
from gemini_client import GeminiClient
from models import OCRRequest
from service import ExtractionService
from validation import InvalidUploadError

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

_gemini_client: GeminiClient | None = None
_service: ExtractionService | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize the Gemini client and extraction service on startup if configured."""
    global _gemini_client, _service

    if not settings.GEMINI_API_KEY:
        logger.info("Gemini not configured (GEMINI_API_KEY is empty) — cédula extraction disabled")
    else:
        logger.info("Using Gemini model %s (mode=%s)", settings.GEMINI_MODEL, settings.EXTRACTION_MODE)
        _gemini_client = GeminiClient(logger=logging.getLogger("gemini_client"))
        extractor = VisionExtractor(_gemini_client, logger=logging.getLogger("extraction"))
        _service = ExtractionService(extractor, logger=logging.getLogger("service"))

    yield

    if _gemini_client is not None:
        _gemini_client.close()
    _gemini_client = None
    _service = None


app = FastAPI(title="Cédula OCR", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["POST", "GET", "OPTIONS"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def invalid_body(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": "JSON inválido en el request"},
    )


@app.post("/api/v1/extract-cedula")
def extract_cedula(body: OCRRequest):
    """Extract cédula fields from one or two document images."""
    if _service is None:
        return JSONResponse(
            status_code=503,
            content={"success": False, "error": "Extracción de cédulas no disponible - GEMINI_API_KEY no configurada"},
        )

    # GDPR: log counts and types only, never image content
    logger.info(
        "Extraction request: files=%d types=%s",
        len(body.files or []),
        [f.type for f in body.files or []],
    )

    try:
        result = _service.process(body.files)
    except InvalidUploadError as e:
        logger.info("Rejected extraction request: %s", e)
        return JSONResponse(status_code=400, content={"success": False, "error": str(e)})

    return JSONResponse(content=result.to_wire())


@app.get("/health")
def health():
    """Return service status and Gemini reachability."""
    base = {
        "status": "healthy",
        "gemini_configured": _service is not None,
        "model": settings.GEMINI_MODEL,
    }

    if _gemini_client is not None:
        base["gemini_health"] = _gemini_client.health()

    return base


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
