"""Sequential batch translation with progress reporting.

``translate_batch`` walks a list of :class:`BatchEntry` objects and
translates them one at a time through a single :class:`OllamaClient`.

Caller contract
---------------
- Returns exactly one :class:`BatchResult` per entry, in input order.
- A failed entry does not stop the batch: its result has
  ``translation=""`` and ``error`` set, and ``on_progress`` still fires.
- Cancellation stops the batch: :class:`TranslationCancelled` propagates
  out of ``translate_batch`` and no result list is returned at all.

Ordering
--------
Entries are never dispatched concurrently.  At most one generation is in
flight against the server, and ``on_progress`` fires in input order with
``completed`` counting up from 1 to ``len(entries)``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from functools import partial

from xcstrings_translator.translation.cancellation import CancellationToken, check_cancelled
from xcstrings_translator.translation.client import OllamaClient
from xcstrings_translator.translation.errors import TranslationCancelled
from xcstrings_translator.translation.types import (
    BatchEntry,
    BatchResult,
    EntryTokenCallback,
    ProgressCallback,
    TranslationRequest,
)

logger = logging.getLogger(__name__)


def _translate_entries(
    client: OllamaClient,
    entries: Sequence[BatchEntry],
    *,
    source_locale: str,
    target_locale: str,
    base_url: str,
    model: str,
    cancellation: CancellationToken | None,
    on_progress: ProgressCallback | None,
    on_entry_token: EntryTokenCallback | None,
) -> list[BatchResult]:
    results: list[BatchResult] = []
    total = len(entries)

    for index, entry in enumerate(entries):
        check_cancelled(cancellation)

        request = TranslationRequest(
            text=entry.source_text,
            source_locale=source_locale,
            target_locale=target_locale,
            base_url=base_url,
            model=model,
            key=entry.key,
            comment=entry.comment,
            cancellation=cancellation,
            on_token=partial(on_entry_token, entry.key) if on_entry_token else None,
        )

        try:
            translation = client.translate_text(request)
        except TranslationCancelled:
            logger.info("translate_batch: cancelled at %s (%d/%d)", entry.key, index, total)
            raise
        except Exception as exc:
            message = str(exc) or "Unknown error"
            logger.warning("translate_batch: %s failed: %s", entry.key, message)
            results.append(BatchResult(key=entry.key, translation="", error=message))
            if on_progress is not None:
                on_progress(index + 1, total, entry.key, "")
            continue

        results.append(BatchResult(key=entry.key, translation=translation))
        if on_progress is not None:
            on_progress(index + 1, total, entry.key, translation)

    return results


def translate_batch(
    entries: Sequence[BatchEntry],
    *,
    source_locale: str,
    target_locale: str,
    base_url: str,
    model: str,
    cancellation: CancellationToken | None = None,
    on_progress: ProgressCallback | None = None,
    on_entry_token: EntryTokenCallback | None = None,
    client: OllamaClient | None = None,
) -> list[BatchResult]:
    """Translate ``entries`` in order, one call at a time.

    Args:
        entries:        Catalog strings to translate.
        source_locale:  Locale tag shared by every source string.
        target_locale:  Locale tag to translate into.
        base_url:       Ollama base URL.
        model:          Ollama model tag.
        cancellation:   Checked before each entry and inside each call.
        on_progress:    ``(completed, total, key, translation)`` after every
                        entry, with ``translation=""`` for failed entries.
        on_entry_token: ``(key, token)`` for every streamed fragment.
        client:         Client to use; a throwaway one built from the loaded
                        config when omitted.

    Returns:
        One :class:`BatchResult` per entry, in input order.

    Raises:
        TranslationCancelled: ``cancellation`` fired before or during an entry.
    """
    if client is None:
        with OllamaClient.from_settings() as owned:
            return translate_batch(
                entries,
                source_locale=source_locale,
                target_locale=target_locale,
                base_url=base_url,
                model=model,
                cancellation=cancellation,
                on_progress=on_progress,
                on_entry_token=on_entry_token,
                client=owned,
            )

    logger.info("translate_batch: %d entries → %s via %s", len(entries), target_locale, model)
    return _translate_entries(
        client,
        entries,
        source_locale=source_locale,
        target_locale=target_locale,
        base_url=base_url,
        model=model,
        cancellation=cancellation,
        on_progress=on_progress,
        on_entry_token=on_entry_token,
    )
