"""Value types exchanged between the translation client and its callers."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from xcstrings_translator.translation.cancellation import CancellationToken

TokenCallback = Callable[[str], None]
EntryTokenCallback = Callable[[str, str], None]
ProgressCallback = Callable[[int, int, str, str], None]


@dataclass(frozen=True)
class TranslationRequest:
    """Everything one ``translate_text`` call needs.

    ``key`` and ``comment`` are catalog metadata.  They are not part of the
    prompt; they travel with the request so batch callers and logs can
    correlate a call with its catalog entry.

    Attributes:
        text:          Source string to translate.
        source_locale: Locale tag of ``text`` (e.g. ``"en"``).
        target_locale: Locale tag to translate into (e.g. ``"pt_BR"``).
        base_url:      Configured Ollama base URL.
        model:         Ollama model tag.
        key:           Catalog key, if any.
        comment:       Developer comment, if any.
        cancellation:  Token checked at every suspension point.
        on_token:      Called with each streamed fragment as it arrives.
    """

    text: str
    source_locale: str
    target_locale: str
    base_url: str
    model: str
    key: str | None = None
    comment: str | None = None
    cancellation: CancellationToken | None = field(default=None, compare=False)
    on_token: TokenCallback | None = field(default=None, compare=False)


@dataclass(frozen=True)
class BatchEntry:
    """One catalog string scheduled for translation."""

    key: str
    source_text: str
    comment: str | None = None


@dataclass(frozen=True)
class BatchResult:
    """Outcome for one :class:`BatchEntry`.

    ``translation`` is ``""`` and ``error`` holds the failure message when
    the entry could not be translated.
    """

    key: str
    translation: str
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"key": self.key, "translation": self.translation}
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class OllamaModel:
    """One entry of the ``/api/tags`` model listing."""

    name: str
    modified_at: str = ""
    size: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OllamaModel | None:
        """Build from a raw listing entry; ``None`` if it has no usable name."""
        name = data.get("name")
        if not isinstance(name, str) or not name:
            return None
        modified_at = data.get("modified_at")
        size = data.get("size")
        return cls(
            name=name,
            modified_at=modified_at if isinstance(modified_at, str) else "",
            size=size if isinstance(size, int) and not isinstance(size, bool) else 0,
        )
