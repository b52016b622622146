"""HTTP client for the Gemini generateContent API.

Uses httpx with explicit connect/read timeouts. Failures are split into
retryable (GeminiServiceUnavailable) and non-retryable (GeminiServiceError);
the retry policy itself lives in the service so a retry reruns the whole
extraction of one request.
"""

import logging

import httpx

from config import settings

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class GeminiServiceUnavailable(Exception):
    """Gemini is temporarily unavailable (retryable — 429/5xx, connection error, timeout)."""


class GeminiServiceError(Exception):
    """Gemini returned a non-retryable error or an unusable reply."""


class GeminiClient:
    """HTTP client for a Gemini multimodal model."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        timeout: int | None = None,
        connect_timeout: int | None = None,
        logger: logging.Logger | None = None,
    ):
        self._api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        if not self._api_key:
            raise ValueError("GEMINI_API_KEY no configurada")

        self.model = model or settings.GEMINI_MODEL
        self._log = logger or logging.getLogger(__name__)

        read_timeout = timeout if timeout is not None else settings.GEMINI_TIMEOUT_SECONDS
        conn_timeout = connect_timeout if connect_timeout is not None else settings.GEMINI_CONNECT_TIMEOUT

        self._client = httpx.Client(
            base_url=(base_url or settings.GEMINI_BASE_URL).rstrip("/"),
            headers={"x-goog-api-key": self._api_key},
            timeout=httpx.Timeout(
                connect=float(conn_timeout),
                read=float(read_timeout),
                write=30.0,
                pool=30.0,
            ),
        )

    def close(self):
        self._client.close()

    def generate(self, parts: list[dict], generation_config: dict | None = None) -> str:
        """Send one generateContent request and return the reply text.

        Raises GeminiServiceUnavailable (retryable) or GeminiServiceError (non-retryable).
        """
        payload: dict = {"contents": [{"parts": parts}]}
        if generation_config:
            payload["generationConfig"] = generation_config

        try:
            resp = self._client.post(f"/models/{self.model}:generateContent", json=payload)
        except (httpx.ConnectError, httpx.ConnectTimeout) as e:
            self._log.warning("Gemini connection failed: %s", e)
            raise GeminiServiceUnavailable(f"Cannot connect to Gemini: {e}") from e
        except httpx.ReadTimeout as e:
            self._log.warning("Gemini read timeout: %s", e)
            raise GeminiServiceUnavailable(f"Gemini read timeout: {e}") from e
        except httpx.HTTPError as e:
            self._log.error("Gemini HTTP error: %s", e)
            raise GeminiServiceError(f"Gemini HTTP error: {e}") from e

        if resp.status_code in RETRYABLE_STATUS_CODES:
            detail = _error_detail(resp)
            self._log.warning("Gemini returned %d: %s", resp.status_code, detail)
            raise GeminiServiceUnavailable(detail)

        if resp.status_code != 200:
            detail = _error_detail(resp)
            self._log.error("Gemini API error %d: %s", resp.status_code, detail)
            raise GeminiServiceError(f"Gemini API error: {detail}")

        try:
            data = resp.json()
        except ValueError as e:
            raise GeminiServiceError("Respuesta inesperada de Gemini API") from e
        if not isinstance(data, dict):
            raise GeminiServiceError("Respuesta inesperada de Gemini API")

        usage = data.get("usageMetadata")
        if usage:
            self._log.info(
                "Gemini tokens: prompt=%s candidates=%s total=%s",
                usage.get("promptTokenCount", 0),
                usage.get("candidatesTokenCount", 0),
                usage.get("totalTokenCount", 0),
            )

        return _reply_text(data)

    def health(self) -> dict:
        """Check that the configured model is reachable. Returns a status dict, never raises."""
        try:
            resp = self._client.get(f"/models/{self.model}", timeout=10.0)
            if resp.status_code != 200:
                return {"status": "unreachable", "error": _error_detail(resp)}
            return {"status": "reachable", "model": resp.json().get("name", self.model)}
        except Exception as e:
            self._log.warning("Gemini health check failed: %s", e)
            return {"status": "unreachable", "error": str(e)}


def _reply_text(data: dict) -> str:
    """Concatenate the text parts of the first candidate."""
    candidates = data.get("candidates") or []
    if not candidates:
        block_reason = (data.get("promptFeedback") or {}).get("blockReason")
        if block_reason:
            raise GeminiServiceError(f"Gemini bloqueó la solicitud: {block_reason}")
        raise GeminiServiceError("Respuesta inesperada de Gemini API")

    parts = (candidates[0].get("content") or {}).get("parts") or []
    text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))
    if not text.strip():
        raise GeminiServiceError("Respuesta vacía de Gemini")
    return text


def _error_detail(resp: httpx.Response) -> str:
    """Best-effort error message from a Gemini error body."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:200] or f"HTTP {resp.status_code}"
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return error["message"]
        if body.get("detail"):
            return str(body["detail"])
    return f"HTTP {resp.status_code}"
