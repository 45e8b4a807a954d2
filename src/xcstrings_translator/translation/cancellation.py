"""Explicit cancellation handle for translation calls.

A :class:`CancellationToken` is created by the caller (typically a UI thread
or the CLI's Ctrl+C handler) and passed down every call chain.  The client
checks it at each suspension point: before every connection attempt, on
every streamed chunk, and before every batch entry.

Blocking network waits cannot poll the flag, so the token also runs
registered callbacks the moment it fires.  The client uses them to wake a
thread that is waiting on a response or a body chunk (see
:mod:`~xcstrings_translator.translation.interrupt`).

The token is backed by :class:`threading.Event`, so ``cancel()`` is safe
to call from a different thread than the one running the translation.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from xcstrings_translator.translation.errors import TranslationCancelled

logger = logging.getLogger(__name__)


class CancellationToken:
    """One-shot, thread-safe cancellation flag.

    Example:
        token = CancellationToken()
        worker = threading.Thread(target=run_batch, args=(token,))
        worker.start()
        ...
        token.cancel()  # worker raises TranslationCancelled at its next check
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []
        self._reason = "Translation cancelled"

    @property
    def cancelled(self) -> bool:
        """Whether ``cancel()`` has been called."""
        return self._event.is_set()

    @property
    def reason(self) -> str:
        return self._reason

    def cancel(self, reason: str | None = None) -> None:
        """Signal cancellation and run registered callbacks.  Subsequent calls are no-ops."""
        with self._lock:
            if self._event.is_set():
                return
            if reason:
                self._reason = reason
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            self._run_callback(callback)

    def add_callback(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` on cancellation; immediately if already cancelled."""
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        self._run_callback(callback)

    def remove_callback(self, callback: Callable[[], None]) -> None:
        """Unregister ``callback``.  Unknown callbacks are ignored."""
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def raise_if_cancelled(self) -> None:
        """Raise :class:`TranslationCancelled` if the token has fired."""
        if self._event.is_set():
            raise TranslationCancelled(self._reason)

    @staticmethod
    def _run_callback(callback: Callable[[], None]) -> None:
        # A failing callback must not stop the others or the cancelling thread.
        try:
            callback()
        except Exception:
            logger.warning("CancellationToken: cancel callback failed", exc_info=True)


def check_cancelled(token: CancellationToken | None) -> None:
    """``raise_if_cancelled`` that tolerates an absent token."""
    if token is not None:
        token.raise_if_cancelled()
