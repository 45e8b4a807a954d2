"""Run blocking network waits so a cancellation token can interrupt them.

``httpx`` offers no way to abort a blocked ``send()`` or body read from
another thread, and generation requests have no read timeout.  Both helpers
here move the blocking work onto a daemon thread and make the calling thread
wait on a queue instead.  The token's cancel callback drops a wake-up marker
into that queue, so the caller raises :class:`TranslationCancelled` as soon
as the token fires, however long the server stays silent.

Abandoned work keeps running on its daemon thread until the server answers
or the connection is closed.  Results that arrive after the caller has left
are handed to ``discard`` (``call_interruptible``) or dropped
(``iter_interruptible``).

Without a token both helpers run the work inline on the calling thread.
"""

from __future__ import annotations

import queue
import threading
from collections.abc import Callable, Iterable, Iterator
from typing import Any, TypeVar

from xcstrings_translator.translation.cancellation import CancellationToken

T = TypeVar("T")

_VALUE = "value"
_ERROR = "error"
_END = "end"
_CANCELLED = "cancelled"


def _drain(items: queue.Queue) -> list[tuple[str, Any]]:
    drained = []
    while True:
        try:
            drained.append(items.get_nowait())
        except queue.Empty:
            return drained


def call_interruptible(
    func: Callable[[], T],
    token: CancellationToken | None,
    *,
    discard: Callable[[T], None] | None = None,
) -> T:
    """Return ``func()``, or raise ``TranslationCancelled`` as soon as ``token`` fires.

    Exceptions raised by ``func`` propagate to the caller unchanged.

    Args:
        func:    The blocking call.
        token:   Cancellation token; ``None`` runs ``func`` inline.
        discard: Cleanup for a result that arrives after cancellation
                 (e.g. closing an ``httpx.Response``).
    """
    if token is None:
        return func()
    token.raise_if_cancelled()

    items: queue.Queue = queue.Queue()
    lock = threading.Lock()
    abandoned = threading.Event()

    def run() -> None:
        try:
            item = (_VALUE, func())
        except BaseException as exc:  # noqa: BLE001 - re-raised on the waiting thread
            item = (_ERROR, exc)
        with lock:
            if not abandoned.is_set():
                items.put(item)
                return
        if item[0] == _VALUE and discard is not None:
            discard(item[1])

    def wake() -> None:
        items.put((_CANCELLED, None))

    token.add_callback(wake)
    try:
        threading.Thread(target=run, name="xct-call", daemon=True).start()
        kind, value = items.get()
        if kind == _CANCELLED:
            with lock:
                abandoned.set()
                leftovers = _drain(items)
            for left_kind, left_value in leftovers:
                if left_kind == _VALUE and discard is not None:
                    discard(left_value)
            token.raise_if_cancelled()
        if kind == _ERROR:
            raise value
        return value
    finally:
        token.remove_callback(wake)


def iter_interruptible(
    produce: Callable[[], Iterable[T]],
    token: CancellationToken | None,
) -> Iterator[T]:
    """Yield from ``produce()``, raising ``TranslationCancelled`` as soon as ``token`` fires.

    The token is checked before every item is handed to the caller, so no
    item is yielded after cancellation.  Exceptions raised while producing
    propagate to the caller unchanged.
    """
    if token is None:
        yield from produce()
        return

    items: queue.Queue = queue.Queue()
    stop = threading.Event()

    def pump() -> None:
        try:
            for value in produce():
                if stop.is_set():
                    return
                items.put((_VALUE, value))
        except BaseException as exc:  # noqa: BLE001 - re-raised on the waiting thread
            items.put((_ERROR, exc))
            return
        items.put((_END, None))

    def wake() -> None:
        items.put((_CANCELLED, None))

    token.add_callback(wake)
    try:
        threading.Thread(target=pump, name="xct-stream", daemon=True).start()
        while True:
            kind, value = items.get()
            token.raise_if_cancelled()
            if kind == _END:
                return
            if kind == _ERROR:
                raise value
            yield value
    finally:
        stop.set()
        token.remove_callback(wake)
