"""Environment-based configuration for the cédula OCR service."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Cédula OCR settings, loaded from environment variables."""

    # Server
    PORT: int = 8092
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["*"]

    # Gemini connection (empty key = extraction disabled, local dev default)
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-1.5-flash"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"

    # Gemini timeouts and retry (one bounded retry of the whole extraction)
    GEMINI_TIMEOUT_SECONDS: int = 60
    GEMINI_CONNECT_TIMEOUT: int = 10
    GEMINI_RETRY_ATTEMPTS: int = 2
    GEMINI_RETRY_DELAY: float = 1.0
    GEMINI_RETRY_BACKOFF: float = 2.0

    # Sampling parameters
    GEMINI_TEMPERATURE: float = 0.1
    GEMINI_TOP_K: int = 32
    GEMINI_TOP_P: float = 1.0
    GEMINI_MAX_OUTPUT_TOKENS: int = 1024

    # Upload limits
    MAX_FILE_SIZE_BYTES: int = 15 * 1024 * 1024  # 15 MiB
    MAX_FILES: int = 2

    # "batch": one request for all images; "per_image": one request per image + reconcile
    EXTRACTION_MODE: str = "batch"

    model_config = {"env_prefix": "", "case_sensitive": True}


settings = Settings()
