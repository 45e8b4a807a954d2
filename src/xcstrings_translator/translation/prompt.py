"""Translation prompt template.

The template is the plain three-line form that GemmaX2-style translation
models are fine-tuned on.  Its last line is the target-language label
the response extractor searches for.
"""

from __future__ import annotations

from xcstrings_translator.translation.locales import language_name

PROMPT_TEMPLATE = "Translate this from {source} to {target}:\n{source}: {text}\n{target}:"


def build_prompt(text: str, source_locale: str, target_locale: str) -> str:
    """Render the instruction sent to ``/api/generate``."""
    return PROMPT_TEMPLATE.format(
        source=language_name(source_locale),
        target=language_name(target_locale),
        text=text,
    )
