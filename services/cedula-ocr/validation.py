"""Inbound file validation — runs before any model call.

Turns the request's files into UploadedImages or raises InvalidUploadError
with a message the UI can show as-is.
"""

import base64
import binascii

from config import settings
from models import OCRFile, UploadedImage

# Accepted declared types and the MIME type sent to the model
ALLOWED_MIME_TYPES: dict[str, str] = {
    "image/jpeg": "image/jpeg",
    "image/jpg": "image/jpeg",
    "image/png": "image/png",
    "application/pdf": "application/pdf",
}


class InvalidUploadError(ValueError):
    """The request's files violate a count, type, or size constraint."""


def validate_files(
    files: list[OCRFile] | None,
    max_files: int | None = None,
    max_size_bytes: int | None = None,
) -> list[UploadedImage]:
    max_files = max_files if max_files is not None else settings.MAX_FILES
    max_size_bytes = max_size_bytes if max_size_bytes is not None else settings.MAX_FILE_SIZE_BYTES

    if not files:
        raise InvalidUploadError("No se enviaron archivos para procesar")
    if len(files) > max_files:
        raise InvalidUploadError(f"Máximo {max_files} archivos permitidos (frente y dorso)")

    return [_validate_file(f, index, max_size_bytes) for index, f in enumerate(files, start=1)]


def _validate_file(file: OCRFile, index: int, max_size_bytes: int) -> UploadedImage:
    if not file.data or not file.type:
        raise InvalidUploadError("Archivo incompleto (falta data o type)")

    declared = file.type.strip().lower()
    mime_type = ALLOWED_MIME_TYPES.get(declared)
    if mime_type is None:
        raise InvalidUploadError(f"Tipo de archivo no permitido: {file.type}. Permitidos: JPG, PNG, PDF")

    payload = strip_data_url(file.data)
    size = decoded_size(payload)
    if size > max_size_bytes:
        limit_mb = max_size_bytes // (1024 * 1024)
        raise InvalidUploadError(f"Archivo muy grande. Máximo {limit_mb}MB por archivo.")

    try:
        base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidUploadError(f"Archivo {file.name or index} no es base64 válido") from e
    if size == 0:
        raise InvalidUploadError(f"Archivo {file.name or index} está vacío")

    return UploadedImage(
        name=file.name or f"archivo_{index}",
        mime_type=mime_type,
        size_bytes=size,
        payload=payload,
    )


def strip_data_url(data: str) -> str:
    """Drop a ``data:<mime>;base64,`` prefix and any whitespace from a base64 payload."""
    if data.startswith("data:") and "," in data:
        data = data.split(",", 1)[1]
    return "".join(data.split())


def decoded_size(payload: str) -> int:
    """Exact decoded byte length of a base64 payload, without decoding it."""
    if not payload:
        return 0
    padding = len(payload) - len(payload.rstrip("="))
    return max(0, (len(payload) * 3) // 4 - padding)
