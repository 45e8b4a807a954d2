"""Ollama translation client for localization catalogs.

This package translates catalog strings through a locally-hosted LLM (via
Ollama), one at a time or in sequential batches, streaming partial tokens
back to the caller.

Package structure
-----------------
locales.py       language_name          — locale tag → English language name.
endpoints.py     candidate_base_urls    — base URL → ordered URLs to try.
prompt.py        build_prompt           — the fixed three-line prompt.
extractor.py     extract_result         — JSON-first, heuristic-second
                 cleanup of accumulated model output.
stream.py        LineDecoder            — newline-delimited JSON stream
                 decoding across arbitrary chunk boundaries.
interrupt.py     call_interruptible     — blocking network waits that a
                 cancellation token can cut short.
client.py        OllamaClient           — probes and streaming generation.
batch.py         translate_batch        — sequential batch orchestration.
cancellation.py  CancellationToken      — explicit, thread-safe cancel flag.
errors.py        OllamaError, ErrorKind, TranslationCancelled.
types.py         TranslationRequest, BatchEntry, BatchResult, OllamaModel.

Typical call flow
-----------------
1. caller builds ``BatchEntry`` objects from the catalog
2. ``translate_batch(entries, ...)`` checks the cancellation token
3. ``OllamaClient.translate_text`` builds the prompt and tries each
   candidate URL until one connects
4. streamed lines are decoded and forwarded to ``on_entry_token``
5. the accumulated text is run through ``extract_result``
6. ``on_progress`` fires and the next entry starts
"""

from xcstrings_translator.translation.batch import translate_batch
from xcstrings_translator.translation.cancellation import CancellationToken
from xcstrings_translator.translation.client import (
    OllamaClient,
    check_connection,
    list_models,
    translate_text,
)
from xcstrings_translator.translation.errors import ErrorKind, OllamaError, TranslationCancelled
from xcstrings_translator.translation.types import (
    BatchEntry,
    BatchResult,
    OllamaModel,
    TranslationRequest,
)

__all__ = [
    "BatchEntry",
    "BatchResult",
    "CancellationToken",
    "ErrorKind",
    "OllamaClient",
    "OllamaError",
    "OllamaModel",
    "TranslationCancelled",
    "TranslationRequest",
    "check_connection",
    "list_models",
    "translate_batch",
    "translate_text",
]
