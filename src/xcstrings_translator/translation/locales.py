"""Locale tag → English language name.

The prompt names languages ("French"), never tags ("fr-CA").  Names come
from the CLDR data shipped with Babel.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from babel import Locale, UnknownLocaleError

logger = logging.getLogger(__name__)

# Language names are always rendered in English; the prompt template is English.
_DISPLAY_LOCALE = "en"


@lru_cache(maxsize=1)
def _display_names() -> dict[str, str]:
    return dict(Locale(_DISPLAY_LOCALE).languages)


def primary_subtag(locale: str) -> str:
    """Return the lowercased language subtag of ``locale`` (``"pt_BR"`` → ``"pt"``)."""
    return locale.replace("_", "-", 1).split("-")[0].lower()


def language_name(locale: str) -> str:
    """Resolve ``locale`` to an English language name.

    Regions and scripts are ignored: ``"en-US"`` and ``"en_GB"`` both give
    ``"English"``.  A tag that cannot be resolved is returned unchanged.

    Args:
        locale: A locale or language tag such as ``"fr"``, ``"pt_BR"``.

    Returns:
        The display name, or ``locale`` itself on any lookup failure.
    """
    subtag = primary_subtag(locale)
    if not subtag:
        return locale
    try:
        name = _display_names().get(subtag)
    except (UnknownLocaleError, LookupError, OSError) as exc:
        logger.debug("language_name: lookup unavailable for %r: %s", locale, exc)
        return locale
    return name or locale
