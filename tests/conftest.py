"""
Shared pytest fixtures for the xcstrings-translator test suite.

Fixtures provided here:
- ``make_client``: build an ``OllamaClient`` over an ``httpx.MockTransport``
  so tests can feed arbitrary (chunked, failing, slow) responses.
- ``clean_env``: strip every ``XCT_*`` variable so config tests start from
  defaults regardless of the developer's shell.
"""

from collections.abc import Callable, Generator

import httpx
import pytest

from xcstrings_translator.translation.client import OllamaClient

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def make_client() -> Generator[Callable[[Handler], OllamaClient], None, None]:
    """
    Factory fixture: ``make_client(handler)`` → ``OllamaClient``.

    Every ``httpx.Client`` created through the factory is closed on teardown.
    """
    created: list[httpx.Client] = []

    def factory(handler: Handler) -> OllamaClient:
        http_client = httpx.Client(transport=httpx.MockTransport(handler))
        created.append(http_client)
        return OllamaClient(http_client=http_client)

    yield factory

    for http_client in created:
        http_client.close()


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove XCT_* overrides from the environment for the test's duration."""
    for name in (
        "XCT_OLLAMA_URL",
        "XCT_MODEL",
        "XCT_TEMPERATURE",
        "XCT_PROBE_TIMEOUT",
        "XCT_CONNECT_TIMEOUT",
        "XCT_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
