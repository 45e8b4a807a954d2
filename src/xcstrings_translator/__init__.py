"""xcstrings-translator — local-LLM translation client for localization catalogs.

Translates the strings of Apple-style ``.xcstrings`` catalogs through a
locally-hosted Ollama server, one string at a time or in sequential
batches, streaming partial tokens back to the caller as they arrive.

Version Management
------------------
``__version__`` is read from the installed package metadata at import time.
The single source of truth is the ``version`` field in ``pyproject.toml``.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

# ---------------------------------------------------------------------------
# Package version, read from installed metadata.
#
# If the package is imported without being installed we fall back to the
# last released version so the CLI can still start.
# ---------------------------------------------------------------------------
try:
    __version__: str = version("xcstrings-translator")
except PackageNotFoundError:
    __version__ = "0.3.0"
