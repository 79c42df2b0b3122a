from __future__ import annotations

import queue
from typing import Any, Callable, Protocol


class Dispatcher(Protocol):
    def dispatch(self, callback: Callable[..., Any], *args: Any) -> None: ...


class ImmediateDispatcher:
    """Runs callbacks on whichever thread produced them."""

    def dispatch(self, callback: Callable[..., Any], *args: Any) -> None:
        callback(*args)


class QueueDispatcher:
    """Hands callbacks over to the thread that calls ``run_pending``.

    Callbacks run in the order they were dispatched and none is dropped.
    """

    def __init__(self) -> None:
        self._pending: queue.Queue[tuple[Callable[..., Any], tuple[Any, ...]]] = queue.Queue()

    def dispatch(self, callback: Callable[..., Any], *args: Any) -> None:
        self._pending.put((callback, args))

    def run_pending(self, block: bool = False, timeout: float | None = None) -> int:
        """Run queued callbacks; optionally wait for the first one."""
        ran = 0
        while True:
            try:
                if block and ran == 0:
                    callback, args = self._pending.get(timeout=timeout)
                else:
                    callback, args = self._pending.get_nowait()
            except queue.Empty:
                return ran
            callback(*args)
            ran += 1
