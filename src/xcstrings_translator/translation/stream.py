"""Incremental decoder for Ollama's newline-delimited JSON stream.

``/api/generate`` with ``stream: true`` answers with one JSON object per
line::

    {"model":"llama3","response":"Bon","done":false}
    {"model":"llama3","response":"jour","done":false}
    {"model":"llama3","response":"","done":true, ...}

HTTP chunking does not respect those lines.  :class:`LineDecoder` keeps the
unterminated tail of each chunk and only decodes complete lines, so the
fragments it yields are identical however the body was split.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator


def decode_event(line: str) -> str | None:
    """Return the ``response`` fragment carried by one stream line.

    Blank lines, malformed or too deeply nested JSON, non-object payloads,
    and events with no (or an empty) ``response`` string all yield ``None``.
    """
    if not line.strip():
        return None
    try:
        payload = json.loads(line)
    except (ValueError, RecursionError):
        return None
    if not isinstance(payload, dict):
        return None
    fragment = payload.get("response")
    if isinstance(fragment, str) and fragment:
        return fragment
    return None


class LineDecoder:
    """Stateful chunk → fragment decoder.  One instance per response."""

    def __init__(self) -> None:
        self._pending = ""

    @property
    def pending(self) -> str:
        """Text received after the last newline, not yet decoded."""
        return self._pending

    def feed(self, chunk: str) -> list[str]:
        """Add ``chunk`` and return fragments from every line it completed."""
        self._pending += chunk
        *lines, self._pending = self._pending.split("\n")
        fragments = []
        for line in lines:
            fragment = decode_event(line)
            if fragment is not None:
                fragments.append(fragment)
        return fragments

    def flush(self) -> list[str]:
        """Decode whatever is left once the body has ended."""
        pending, self._pending = self._pending, ""
        fragment = decode_event(pending)
        return [fragment] if fragment is not None else []


def iter_fragments(chunks: Iterable[str]) -> Iterator[str]:
    """Decode a complete chunk sequence into ``response`` fragments."""
    decoder = LineDecoder()
    for chunk in chunks:
        yield from decoder.feed(chunk)
    yield from decoder.flush()
