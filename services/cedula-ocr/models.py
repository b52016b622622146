"""Pydantic models for extraction results and the extract-cedula wire contract.

Field names are part of the contract consumed by the contract form
(``numero_cedula``, not ``numeroCedula``) and must not change.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from normalization import ConfidenceLevel, confidence_level

DocumentType = Literal["CC", "CE", "desconocido"]

FIELD_NAMES: tuple[str, ...] = (
    "numero_cedula",
    "primer_nombre",
    "segundo_nombre",
    "primer_apellido",
    "segundo_apellido",
    "fecha_nacimiento",
    "fecha_expedicion_documento",
)

NAME_FIELDS: frozenset[str] = frozenset({
    "primer_nombre",
    "segundo_nombre",
    "primer_apellido",
    "segundo_apellido",
})

# The model identifies the document type reliably; the envelope reports it as such.
DOCUMENT_TYPE_CONFIDENCE: ConfidenceLevel = "alto"
DOCUMENT_TYPE_NUMERIC_CONFIDENCE = 95


class ExtractedFields(BaseModel):
    model_config = ConfigDict(frozen=True)

    numero_cedula: str | None = None
    primer_nombre: str | None = None
    segundo_nombre: str | None = None
    primer_apellido: str | None = None
    segundo_apellido: str | None = None
    fecha_nacimiento: str | None = None  # YYYY-MM-DD
    fecha_expedicion_documento: str | None = None  # YYYY-MM-DD


class FieldConfidence(BaseModel):
    model_config = ConfigDict(frozen=True)

    numero_cedula: ConfidenceLevel = "bajo"
    primer_nombre: ConfidenceLevel = "bajo"
    segundo_nombre: ConfidenceLevel = "bajo"
    primer_apellido: ConfidenceLevel = "bajo"
    segundo_apellido: ConfidenceLevel = "bajo"
    fecha_nacimiento: ConfidenceLevel = "bajo"
    fecha_expedicion_documento: ConfidenceLevel = "bajo"


class NumericConfidence(BaseModel):
    model_config = ConfigDict(frozen=True)

    numero_cedula: int = Field(default=0, ge=0, le=100)
    primer_nombre: int = Field(default=0, ge=0, le=100)
    segundo_nombre: int = Field(default=0, ge=0, le=100)
    primer_apellido: int = Field(default=0, ge=0, le=100)
    segundo_apellido: int = Field(default=0, ge=0, le=100)
    fecha_nacimiento: int = Field(default=0, ge=0, le=100)
    fecha_expedicion_documento: int = Field(default=0, ge=0, le=100)


class ExtractionResult(BaseModel):
    """One extraction attempt (single image, batched images, or a reconciliation).

    Reconciled results carry no ``processing_time_ms`` of their own.
    """

    model_config = ConfigDict(frozen=True)

    success: bool
    fields: ExtractedFields = Field(default_factory=ExtractedFields)
    confidence: FieldConfidence = Field(default_factory=FieldConfidence)
    numeric_confidence: NumericConfidence = Field(default_factory=NumericConfidence)
    document_type: DocumentType = "desconocido"
    processing_time_ms: int | None = None

    @classmethod
    def build(
        cls,
        values: dict[str, str | None],
        scores: dict[str, int],
        document_type: DocumentType,
        success: bool = True,
        processing_time_ms: int | None = None,
    ) -> "ExtractionResult":
        """Assemble a result, forcing null fields to 0/bajo and deriving levels."""
        numeric: dict[str, int] = {}
        for name in FIELD_NAMES:
            numeric[name] = scores.get(name, 0) if values.get(name) is not None else 0

        return cls(
            success=success,
            fields=ExtractedFields(**{name: values.get(name) for name in FIELD_NAMES}),
            confidence=FieldConfidence(**{name: confidence_level(s) for name, s in numeric.items()}),
            numeric_confidence=NumericConfidence(**numeric),
            document_type=document_type,
            processing_time_ms=processing_time_ms,
        )

    @classmethod
    def failed(cls, processing_time_ms: int | None = None) -> "ExtractionResult":
        """All-null, all-bajo result for an unreadable model reply."""
        return cls(success=False, processing_time_ms=processing_time_ms)

    def value(self, name: str) -> str | None:
        return getattr(self.fields, name)

    def score(self, name: str) -> int:
        return getattr(self.numeric_confidence, name)

    def fields_found(self) -> int:
        return sum(1 for name in FIELD_NAMES if self.value(name) is not None)


class UploadedImage(BaseModel):
    """A validated upload, consumed once by an extraction call and never persisted."""

    model_config = ConfigDict(frozen=True)

    name: str
    mime_type: Literal["image/jpeg", "image/png", "application/pdf"]
    size_bytes: int
    payload: str  # base64, without data-URL prefix


# --- Wire contract ---


class OCRFile(BaseModel):
    """An inbound file. Everything is optional so validation can report what is missing."""

    name: str = ""
    data: str | None = None
    type: str | None = None


class OCRRequest(BaseModel):
    files: list[OCRFile] | None = None


class ResponseFields(ExtractedFields):
    tipo_identificacion: str | None = None


class ResponseConfidence(FieldConfidence):
    tipo_identificacion: ConfidenceLevel = "bajo"


class ResponseNumericConfidence(NumericConfidence):
    tipo_identificacion: int = Field(default=0, ge=0, le=100)


class DebugInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    detected_text: str = Field(alias="detectedText")
    processing_time: int = Field(alias="processingTime")
    document_type: Literal["frente", "dorso", "completo", "desconocido"] = Field(alias="documentType")
    files_processed: int = Field(alias="filesProcessed")
    combined_results: bool = Field(alias="combinedResults")


class OCRResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    fields: ResponseFields = Field(default_factory=ResponseFields)
    confidence: ResponseConfidence = Field(default_factory=ResponseConfidence)
    numeric_confidence: ResponseNumericConfidence | None = Field(default=None, alias="numericConfidence")
    error: str | None = None
    debug: DebugInfo | None = None

    def to_wire(self) -> dict[str, Any]:
        """Serialize with camelCase aliases, dropping the optional top-level keys when unset."""
        data = self.model_dump(by_alias=True)
        for key in ("numericConfidence", "error", "debug"):
            if data.get(key) is None:
                data.pop(key, None)
        return data

    def form_fields(self) -> dict[str, str] | None:
        """Values keyed the way the contract form names them; None unless successful."""
        if not self.success:
            return None
        f = self.fields
        return {
            "tipo_identificacion": f.tipo_identificacion or "",
            "numero_identificacion": f.numero_cedula or "",
            "fecha_expedicion_documento": f.fecha_expedicion_documento or "",
            "primer_nombre": f.primer_nombre or "",
            "segundo_nombre": f.segundo_nombre or "",
            "primer_apellido": f.primer_apellido or "",
            "segundo_apellido": f.segundo_apellido or "",
            "fecha_nacimiento": f.fecha_nacimiento or "",
        }

    def form_confidence(self) -> dict[str, ConfidenceLevel] | None:
        if not self.success:
            return None
        c = self.confidence
        return {
            "tipo_identificacion": c.tipo_identificacion,
            "numero_identificacion": c.numero_cedula,
            "fecha_expedicion_documento": c.fecha_expedicion_documento,
            "primer_nombre": c.primer_nombre,
            "segundo_nombre": c.segundo_nombre,
            "primer_apellido": c.primer_apellido,
            "segundo_apellido": c.segundo_apellido,
            "fecha_nacimiento": c.fecha_nacimiento,
        }
