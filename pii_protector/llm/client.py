"""Ollama LLM client wrapper -- the PII oracle transport.

Wraps the Ollama REST API (``POST /api/generate``) with:

- **JSON mode**: requests set ``format="json"`` so the model is steered
  toward a single JSON object.  The body is still untrusted.
- **Error taxonomy**: network, timeout and malformed-envelope failures are
  raised as ``OracleError`` subclasses so callers can fail the whole scan.
- **Latency tracking**: wall-clock time is measured per request.
- **PII-safe logging**: prompts and responses are never logged, only the
  use case, model and latency.

The client is async (``httpx.AsyncClient``) because a scan issues two
oracle requests concurrently.  A custom ``transport`` may be injected for
tests.
"""
from __future__ import annotations

import logging
import time

import httpx

from pii_protector.core.settings import get_settings

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Custom exceptions
# ---------------------------------------------------------------------------


class OracleError(RuntimeError):
    """Base class for oracle-level failures (whole-scan failures)."""


class OracleConnectionError(OracleError):
    """Raised when Ollama is unreachable or answers with an HTTP error."""


class OracleTimeoutError(OracleError):
    """Raised when the Ollama request exceeds the configured timeout."""


class OracleResponseError(OracleError):
    """Raised when the Ollama envelope is not the expected JSON object."""


# ---------------------------------------------------------------------------
# OllamaClient
# ---------------------------------------------------------------------------


class OllamaClient:
    """Async client for the Ollama REST API.

    Parameters
    ----------
    base_url:
        Ollama base URL.  Defaults to ``settings.ollama_url``.
    model:
        Model tag (e.g. ``"qwen2.5:7b"``).  Defaults to
        ``settings.ollama_model``.
    timeout_s:
        Request timeout in seconds.  Defaults to
        ``settings.ollama_timeout_s``.
    transport:
        Optional ``httpx`` transport, e.g. ``httpx.MockTransport`` in tests.
    """

    def __init__(
        self,
        *,
        base_url: str | None = None,
        model: str | None = None,
        timeout_s: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self.base_url = (base_url or settings.ollama_url).rstrip("/")
        self.model = model or settings.ollama_model
        self.timeout_s = timeout_s if timeout_s is not None else settings.ollama_timeout_s
        self._transport = transport
        self._last_latency_ms: int | None = None

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=self._transport,
        )

    # -- public API ---------------------------------------------------------

    async def generate(
        self,
        prompt: str,
        system: str | None = None,
        *,
        use_case: str = "general",
        json_mode: bool = True,
    ) -> str:
        """Send a prompt to Ollama and return the generated text.

        Parameters
        ----------
        prompt:
            The user prompt.
        system:
            Optional system prompt.
        use_case:
            Label for log output (e.g. ``"detect_pii"``).
        json_mode:
            Ask Ollama to constrain output to JSON.

        Returns
        -------
        str
            The model's response text (possibly empty).

        Raises
        ------
        OracleConnectionError
            If Ollama is unreachable or returns an HTTP error status.
        OracleTimeoutError
            If the request exceeds the configured timeout.
        OracleResponseError
            If the response envelope is not a JSON object.
        """
        payload: dict = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
        }
        if system is not None:
            payload["system"] = system
        if json_mode:
            payload["format"] = "json"

        start = time.monotonic()
        try:
            async with self._client(self.timeout_s) as client:
                response = await client.post("/api/generate", json=payload)
                response.raise_for_status()
        except httpx.TimeoutException as exc:
            self._record_latency(start)
            raise OracleTimeoutError(
                f"Ollama request timed out after {self.timeout_s}s"
            ) from exc
        except httpx.ConnectError as exc:
            self._record_latency(start)
            raise OracleConnectionError(
                f"Cannot connect to Ollama at {self.base_url}"
            ) from exc
        except httpx.HTTPError as exc:
            self._record_latency(start)
            raise OracleConnectionError(
                f"Ollama HTTP error: {exc}"
            ) from exc

        elapsed_ms = self._record_latency(start)

        try:
            data = response.json()
        except ValueError as exc:
            raise OracleResponseError("Ollama returned a non-JSON response") from exc
        if not isinstance(data, dict):
            raise OracleResponseError("Ollama returned an unexpected response shape")

        response_text = data.get("response")
        if response_text is None:
            response_text = ""
        elif not isinstance(response_text, str):
            raise OracleResponseError("Ollama returned a non-string 'response' field")
        logger.info(
            "Oracle call complete (use_case=%s, model=%s, latency_ms=%d, tokens=%s)",
            use_case,
            self.model,
            elapsed_ms,
            data.get("eval_count"),
        )
        return response_text

    async def is_available(self) -> bool:
        """Check whether Ollama is reachable.

        Returns ``False`` if the server is not running or unreachable.
        Never raises an exception.
        """
        try:
            async with self._client(5) as client:
                resp = await client.get("/api/tags")
            return resp.status_code == 200
        except Exception:
            return False

    @property
    def last_latency_ms(self) -> int | None:
        """Wall-clock latency of the most recent ``generate()`` call (ms)."""
        return self._last_latency_ms

    def _record_latency(self, start: float) -> int:
        elapsed_ms = int((time.monotonic() - start) * 1000)
        self._last_latency_ms = elapsed_ms
        return elapsed_ms
