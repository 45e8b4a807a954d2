"""Ollama HTTP client for catalog translation.

``OllamaClient`` is the only place in the package that makes a network
call.  It wraps two Ollama endpoints:

- ``GET  /api/tags``: liveness probe and model listing.
- ``POST /api/generate``: streaming generation, consumed line by line.

Transport
---------
The client takes an injected ``httpx.Client``.  Production code lets the
client build its own; tests pass one backed by ``httpx.MockTransport`` (or
patch routes with ``respx``) to feed arbitrary chunked bodies.

Candidate endpoints
-------------------
Every call expands the configured base URL with
:func:`~xcstrings_translator.translation.endpoints.candidate_base_urls`
and tries the candidates in order.  For ``/api/generate`` only
transport-level failures move on to the next candidate: once a server has
answered, even with a 404 or 500, that answer is final.

Call lifecycle (``translate_text``)
-----------------------------------
resolving-endpoint → connecting → streaming → done, with two terminal
outcomes besides success:

- **aborted**: the :class:`CancellationToken` fired.  Checked before every
  connection attempt and on every streamed chunk.  Waits for response
  headers and for body chunks run on a helper thread
  (:mod:`~xcstrings_translator.translation.interrupt`), so a cancel ends
  them at once even while the server is silent.  Surfaces as
  :class:`TranslationCancelled`.
- **failed**: an :class:`OllamaError` with one of the three
  :class:`ErrorKind` values.

Timeouts
--------
Probes (``check_connection``, ``list_models``) are bounded by
``probe_timeout_seconds`` per candidate.  Generation has no read timeout;
only establishing the connection is bounded, by
``connect_timeout_seconds``.  A running generation ends when the server
closes the stream or the cancellation token fires.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from functools import partial
from typing import Any

import httpx

from xcstrings_translator.config import OllamaSettings
from xcstrings_translator.config import config as app_config
from xcstrings_translator.translation.cancellation import CancellationToken, check_cancelled
from xcstrings_translator.translation.endpoints import candidate_base_urls
from xcstrings_translator.translation.errors import ErrorKind, OllamaError
from xcstrings_translator.translation.extractor import extract_result
from xcstrings_translator.translation.interrupt import call_interruptible, iter_interruptible
from xcstrings_translator.translation.prompt import build_prompt
from xcstrings_translator.translation.stream import iter_fragments
from xcstrings_translator.translation.types import OllamaModel, TranslationRequest

logger = logging.getLogger(__name__)

# Low temperature keeps translations literal and repeatable.
_DEFAULT_TEMPERATURE = 0.1

# Bound for /api/tags lookups.
_DEFAULT_PROBE_TIMEOUT = 5.0

# Bound for establishing the /api/generate connection.
_DEFAULT_CONNECT_TIMEOUT = 5.0

_TAGS_PATH = "/api/tags"
_GENERATE_PATH = "/api/generate"


def _close_quietly(response: httpx.Response) -> None:
    """Close a response nobody is waiting for any more."""
    try:
        response.close()
    except httpx.HTTPError:
        logger.debug("OllamaClient: error closing abandoned response", exc_info=True)


class OllamaClient:
    """Synchronous client for one Ollama server (or its candidate URLs).

    The client holds no per-call state; one instance can serve any number of
    sequential calls.  It is a context manager and closes the underlying
    ``httpx.Client`` only if it created it.

    Attributes:
        _http:            The ``httpx.Client`` all requests go through.
        _owns_http:       Whether ``close()`` should close ``_http``.
        _temperature:     Sampling temperature sent in ``options``.
        _probe_timeout:   Timeout in seconds for ``/api/tags`` requests.
        _connect_timeout: Connect timeout in seconds for ``/api/generate``.
    """

    def __init__(
        self,
        *,
        http_client: httpx.Client | None = None,
        temperature: float = _DEFAULT_TEMPERATURE,
        probe_timeout_seconds: float = _DEFAULT_PROBE_TIMEOUT,
        connect_timeout_seconds: float = _DEFAULT_CONNECT_TIMEOUT,
    ) -> None:
        """Initialise the client.

        Args:
            http_client:             Transport to use; a fresh ``httpx.Client``
                                     when omitted.
            temperature:             Sampling temperature for generation.
            probe_timeout_seconds:   Timeout for liveness/model-list probes.
            connect_timeout_seconds: Connect timeout for generation requests.
        """
        self._http = http_client if http_client is not None else httpx.Client()
        self._owns_http = http_client is None
        self._temperature = temperature
        self._probe_timeout = probe_timeout_seconds
        self._connect_timeout = connect_timeout_seconds

    @classmethod
    def from_settings(
        cls,
        settings: OllamaSettings | None = None,
        *,
        http_client: httpx.Client | None = None,
    ) -> OllamaClient:
        """Build a client from ``[ollama]`` settings (the loaded config by default)."""
        settings = settings or app_config.ollama
        return cls(
            http_client=http_client,
            temperature=settings.temperature,
            probe_timeout_seconds=settings.probe_timeout_seconds,
            connect_timeout_seconds=settings.connect_timeout_seconds,
        )

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> OllamaClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ── Probes ────────────────────────────────────────────────────────────────

    def _get_tags(self, candidate: str) -> httpx.Response | None:
        """GET ``/api/tags`` on one candidate; ``None`` on transport failure."""
        try:
            return self._http.get(f"{candidate}{_TAGS_PATH}", timeout=self._probe_timeout)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.debug("OllamaClient: %s unreachable: %s", candidate, exc)
            return None

    def check_connection(self, base_url: str) -> bool:
        """Return ``True`` if any candidate answers ``/api/tags`` with 2xx."""
        for candidate in candidate_base_urls(base_url):
            response = self._get_tags(candidate)
            if response is not None and response.is_success:
                logger.debug("OllamaClient: %s is reachable", candidate)
                return True
        logger.warning("OllamaClient: no Ollama server reachable at %s", base_url)
        return False

    def list_models(self, base_url: str) -> list[OllamaModel]:
        """Return the models installed on the first candidate that answers.

        Non-2xx answers and unparseable bodies move on to the next candidate;
        ``[]`` when none of them produce a listing.
        """
        for candidate in candidate_base_urls(base_url):
            response = self._get_tags(candidate)
            if response is None or not response.is_success:
                continue
            try:
                data = response.json()
            except ValueError:
                logger.debug("OllamaClient: %s returned a non-JSON model list", candidate)
                continue
            raw_models = data.get("models") if isinstance(data, dict) else None
            if not isinstance(raw_models, list):
                return []
            models = [OllamaModel.from_dict(m) for m in raw_models if isinstance(m, dict)]
            return [m for m in models if m is not None]
        return []

    # ── Generation ────────────────────────────────────────────────────────────

    def _build_payload(self, model: str, prompt: str) -> dict[str, Any]:
        """Construct the ``/api/generate`` request body."""
        return {
            "model": model,
            "prompt": prompt,
            "stream": True,
            "options": {"temperature": self._temperature},
        }

    def _connect(
        self,
        base_url: str,
        payload: dict[str, Any],
        cancellation: CancellationToken | None,
    ) -> httpx.Response:
        """Open a streaming ``/api/generate`` response on the first reachable candidate.

        Raises:
            TranslationCancelled: The token fired before or during a connection attempt.
            OllamaError: ``CONNECTION_FAILED`` when every candidate failed to connect.
        """
        timeout = httpx.Timeout(None, connect=self._connect_timeout)
        for candidate in candidate_base_urls(base_url):
            check_cancelled(cancellation)
            try:
                request = self._http.build_request(
                    "POST",
                    f"{candidate}{_GENERATE_PATH}",
                    json=payload,
                    timeout=timeout,
                )
                response = call_interruptible(
                    partial(self._http.send, request, stream=True),
                    cancellation,
                    discard=_close_quietly,
                )
            except (httpx.TransportError, httpx.InvalidURL) as exc:
                logger.debug("OllamaClient: cannot connect to %s: %s", candidate, exc)
                continue
            logger.info("OllamaClient: streaming from %s", candidate)
            return response

        logger.warning("OllamaClient: cannot connect to Ollama at %s", base_url)
        raise OllamaError(
            "Cannot connect to Ollama. Make sure it is running (try 127.0.0.1:11434).",
            ErrorKind.CONNECTION_FAILED,
        )

    @staticmethod
    def _raise_for_status(
        response: httpx.Response,
        model: str,
        cancellation: CancellationToken | None,
    ) -> None:
        """Map a non-2xx generate response to the right :class:`OllamaError`."""
        if response.is_success:
            return
        try:
            call_interruptible(response.read, cancellation)
            body = response.text
        except (httpx.HTTPError, httpx.StreamError):
            body = ""

        if response.status_code == 404 or "not found" in body:
            raise OllamaError(
                f'Model "{model}" not found. Pull it with: ollama pull {model}',
                ErrorKind.MODEL_NOT_FOUND,
            )
        raise OllamaError(
            f"Ollama error: {response.status_code} {body}",
            ErrorKind.GENERATION_FAILED,
        )

    @staticmethod
    def _iter_chunks(
        response: httpx.Response,
        cancellation: CancellationToken | None,
    ) -> Iterator[str]:
        """Yield decoded body chunks until the body ends or the token fires.

        A read error seen after cancellation (the response was closed under
        the reader) surfaces as :class:`TranslationCancelled`.
        """
        try:
            yield from iter_interruptible(response.iter_text, cancellation)
        except httpx.StreamError as exc:
            check_cancelled(cancellation)
            raise OllamaError("No response body", ErrorKind.GENERATION_FAILED) from exc
        except httpx.TransportError as exc:
            check_cancelled(cancellation)
            raise OllamaError(
                f"Ollama stream interrupted: {exc}",
                ErrorKind.GENERATION_FAILED,
            ) from exc

    def stream_generate(
        self,
        *,
        prompt: str,
        base_url: str,
        model: str,
        cancellation: CancellationToken | None = None,
    ) -> Iterator[str]:
        """Stream ``response`` fragments for ``prompt``.

        The returned iterator is lazy and single-use.  Nothing is sent until
        the first ``next()``; the HTTP response is closed once the iterator
        finishes or is garbage-collected.

        Raises:
            TranslationCancelled: The token fired while connecting or streaming.
            OllamaError: Connection, model, or generation failure.
        """
        payload = self._build_payload(model, prompt)
        response = self._connect(base_url, payload, cancellation)
        try:
            self._raise_for_status(response, model, cancellation)
            yield from iter_fragments(self._iter_chunks(response, cancellation))
        finally:
            response.close()

    def translate_text(self, request: TranslationRequest) -> str:
        """Translate one string, streaming tokens to ``request.on_token``.

        Returns:
            The extracted translation (may be ``""`` if the model said nothing).

        Raises:
            TranslationCancelled: ``request.cancellation`` fired.
            OllamaError: The server could not produce a translation.
        """
        prompt = build_prompt(request.text, request.source_locale, request.target_locale)
        fragments: list[str] = []
        for token in self.stream_generate(
            prompt=prompt,
            base_url=request.base_url,
            model=request.model,
            cancellation=request.cancellation,
        ):
            fragments.append(token)
            if request.on_token is not None:
                request.on_token(token)

        result = "".join(fragments)
        translation = extract_result(result, request.target_locale)
        logger.debug(
            "OllamaClient: translated %s (%d chars streamed)",
            request.key or "<text>",
            len(result),
        )
        return translation


# ── Module-level conveniences ────────────────────────────────────────────────


def check_connection(base_url: str, *, client: OllamaClient | None = None) -> bool:
    """Probe ``base_url`` with a throwaway client unless one is given."""
    if client is not None:
        return client.check_connection(base_url)
    with OllamaClient.from_settings() as owned:
        return owned.check_connection(base_url)


def list_models(base_url: str, *, client: OllamaClient | None = None) -> list[OllamaModel]:
    if client is not None:
        return client.list_models(base_url)
    with OllamaClient.from_settings() as owned:
        return owned.list_models(base_url)


def translate_text(request: TranslationRequest, *, client: OllamaClient | None = None) -> str:
    """Translate one string with a throwaway client unless one is given."""
    if client is not None:
        return client.translate_text(request)
    with OllamaClient.from_settings() as owned:
        return owned.translate_text(request)
