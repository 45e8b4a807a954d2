"""Recover the translated string from accumulated model output.

Local models are chatty.  Asked for a translation they may return the bare
string, a JSON object, a JSON object wrapped in commentary, or an echo of
the prompt followed by the answer.  ``extract_result`` turns all of those
into the one string the catalog needs.

Extraction pipeline (applied in order)
--------------------------------------
1. **Empty check** — blank output → ``""``.
2. **Structured JSON** — a ``{"translation": "..."}`` object, either the
   whole output or the span from the first ``{`` to the last ``}``.  A hit
   here wins outright.
3. **Target label** — text after the last ``"<TargetLanguage>:"`` label,
   matched case-insensitively.
4. **Line cleanup** — drop prompt/instruction echo lines and bare
   ``Label:`` lines, keep the last surviving line.
5. **Verbatim** — if cleanup removed everything, the trimmed output.

The boilerplate list in step 4 is English-only and tied to the prompt
templates this client has used.
"""

from __future__ import annotations

import json
import logging

from xcstrings_translator.translation.locales import language_name

logger = logging.getLogger(__name__)

# Lowercased line prefixes that only ever appear when the model echoes the
# prompt or its instructions back at us.
_BOILERPLATE_PREFIXES: tuple[str, ...] = (
    "translate this from ",
    "translate source_text from ",
    "keep placeholder tokens unchanged",
    "return only the translated text",
    "return strict json object",
    "you are a translation engine",
    "use metadata only for disambiguation",
    "preserve placeholders exactly",
    "context:",
    "- localization key:",
    "- developer comment:",
    "metadata_key:",
    "metadata_comment:",
    "source_text:",
    "rules:",
    "text to translate:",
)

# Longest label, in letters and whitespace, that counts as a bare label line.
_MAX_LABEL_LENGTH = 24


def _parse_translation_object(candidate: str) -> str | None:
    try:
        parsed = json.loads(candidate)
    except (ValueError, RecursionError):
        return None
    if not isinstance(parsed, dict):
        return None
    value = parsed.get("translation")
    if isinstance(value, str):
        return value.strip()
    return None


def extract_json_translation(raw: str) -> str | None:
    """Return the ``translation`` field of a JSON object in ``raw``, if any.

    Tries the trimmed output as-is first, then the substring spanning the
    first ``{`` to the last ``}`` to tolerate commentary around the object.

    Returns:
        The trimmed translation, or ``None`` when no such object exists.
    """
    trimmed = raw.strip()
    if not trimmed:
        return None

    direct = _parse_translation_object(trimmed)
    if direct is not None:
        return direct

    first_brace = trimmed.find("{")
    last_brace = trimmed.rfind("}")
    if first_brace != -1 and last_brace > first_brace:
        return _parse_translation_object(trimmed[first_brace : last_brace + 1])
    return None


def _is_boilerplate(line: str) -> bool:
    return line.lower().startswith(_BOILERPLATE_PREFIXES)


def _is_label_line(line: str) -> bool:
    """True for a whole line like ``"French:"`` or ``"Source text:"``.

    Only letters (``str.isalpha``) and whitespace may precede the colon, so
    digits and numeric symbols such as ``"²"`` or ``"Ⅻ"`` keep a line.
    """
    if not line.endswith(":"):
        return False
    label = line[:-1]
    return 0 < len(label) <= _MAX_LABEL_LENGTH and all(
        char.isalpha() or char.isspace() for char in label
    )


def extract_translation(raw: str, target_locale: str) -> str:
    """Heuristically pull the translation out of free-form model output.

    Args:
        raw:           Accumulated model output.
        target_locale: Locale tag of the requested translation; its language
                       name is the label the prompt ends with.

    Returns:
        The best guess at the translated text; ``""`` for blank output.
    """
    trimmed = raw.strip()
    if not trimmed:
        return ""

    # ── Target label ──────────────────────────────────────────────────────────
    target_label = f"{language_name(target_locale)}:"
    label_index = trimmed.lower().rfind(target_label.lower())
    if label_index != -1:
        after_label = trimmed[label_index + len(target_label) :].strip()
        if after_label:
            return after_label

    # ── Line cleanup ──────────────────────────────────────────────────────────
    lines = [line.strip() for line in trimmed.split("\n")]
    cleaned = [
        line
        for line in lines
        if line and not _is_boilerplate(line) and not _is_label_line(line)
    ]
    if cleaned:
        return cleaned[-1]

    logger.debug("extract_translation: nothing survived cleanup, returning raw output.")
    return trimmed


def extract_result(raw: str, target_locale: str) -> str:
    """Structured extraction first, heuristic fallback second."""
    structured = extract_json_translation(raw)
    if structured is not None:
        return structured
    return extract_translation(raw, target_locale)
