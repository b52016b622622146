"""Shared test fixtures for cédula OCR tests."""

import base64
import json
import sys
from pathlib import Path

import pytest

# Add parent directory to path so we can import the modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from models import ExtractionResult, OCRFile, UploadedImage  # noqa: E402


@pytest.fixture
def jpeg_b64() -> str:
    """Base64 of a tiny JPEG-looking payload (the service never decodes pixels)."""
    return base64.b64encode(b"\xff\xd8\xff\xe0" + b"\x00" * 256 + b"\xff\xd9").decode()


@pytest.fixture
def front_file(jpeg_b64: str) -> OCRFile:
    return OCRFile(name="cedula_frente.jpg", data=jpeg_b64, type="image/jpeg")


@pytest.fixture
def back_file(jpeg_b64: str) -> OCRFile:
    return OCRFile(name="cedula_dorso.png", data=jpeg_b64, type="image/png")


@pytest.fixture
def front_image(jpeg_b64: str) -> UploadedImage:
    return UploadedImage(name="cedula_frente.jpg", mime_type="image/jpeg", size_bytes=262, payload=jpeg_b64)


@pytest.fixture
def back_image(jpeg_b64: str) -> UploadedImage:
    return UploadedImage(name="cedula_dorso.png", mime_type="image/png", size_bytes=262, payload=jpeg_b64)


@pytest.fixture
def mock_cc_reply() -> str:
    """Mock Gemini reply for a new-format citizen card."""
    return json.dumps({
        "tipo_documento": "CC",
        "numero_cedula": "1020742434",
        "numero_cedula_confianza": 92,
        "primer_nombre": "JUAN",
        "primer_nombre_confianza": 88,
        "segundo_nombre": "CARLOS",
        "segundo_nombre_confianza": 75,
        "primer_apellido": "PEREZ",
        "primer_apellido_confianza": 90,
        "segundo_apellido": "GOMEZ",
        "segundo_apellido_confianza": 65,
        "fecha_nacimiento": "1990-03-15",
        "fecha_nacimiento_confianza": 80,
        "fecha_expedicion_documento": "2008-07-22",
        "fecha_expedicion_documento_confianza": 35,
    })


@pytest.fixture
def mock_markdown_reply() -> str:
    """Mock Gemini reply wrapped in a markdown code fence."""
    return (
        '```json\n{"tipo_documento": "CE", "numero_cedula": "379929", '
        '"numero_cedula_confianza": 85, "primer_nombre": "ana", "primer_nombre_confianza": 70}\n```'
    )


@pytest.fixture
def mock_preamble_reply() -> str:
    """Mock Gemini reply with text before and after the JSON."""
    return (
        'Aquí están los datos extraídos:\n\n'
        '{"tipo_documento": "CC", "numero_cedula": "51554033", "numero_cedula_confianza": 95}\n\n'
        'Espero que sea útil.'
    )


def make_result(
    values: dict | None = None,
    scores: dict | None = None,
    document_type: str = "desconocido",
    success: bool = True,
) -> ExtractionResult:
    """Build an ExtractionResult from partial field/score maps."""
    return ExtractionResult.build(
        values or {},
        scores or {},
        document_type=document_type,
        success=success,
    )


@pytest.fixture
def result_factory():
    return make_result
