"""
Store Worker — runs blocking store calls off the UI thread.

Every call returns a concurrent.futures.Future right away. Callers that are
not on the Qt event loop (scripts, tests) just block on future.result().
UI code passes on_result / on_error instead; those are delivered through Qt
signals, so they run back on the thread that submitted the call.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import Any, Callable, Optional, Set

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal

logger = logging.getLogger(__name__)

DEFAULT_MAX_THREADS = 2


class _CallSignals(QObject):
    succeeded = Signal(object)
    failed = Signal(object)


class _StoreCall(QRunnable):
    def __init__(self, fn: Callable[..., Any], args: tuple, kwargs: dict,
                 future: Future, signals: Optional[_CallSignals]) -> None:
        super().__init__()
        self.fn = fn
        self.args = args
        self.kwargs = kwargs
        self.future = future
        self.signals = signals

    def run(self) -> None:
        if not self.future.set_running_or_notify_cancel():
            return
        try:
            result = self.fn(*self.args, **self.kwargs)
        except Exception as exc:
            logger.warning("Store call %s failed: %r",
                           getattr(self.fn, "__qualname__", self.fn), exc)
            self.future.set_exception(exc)
            if self.signals is not None:
                self.signals.failed.emit(exc)
            return
        self.future.set_result(result)
        if self.signals is not None:
            self.signals.succeeded.emit(result)


class StoreWorker:
    """
    Thin wrapper over a private QThreadPool.

    No cancellation of work that has started: a caller may stop waiting, but
    a transaction that is running always finishes.
    """

    def __init__(self, max_threads: int = DEFAULT_MAX_THREADS) -> None:
        self.pool = QThreadPool()
        self.pool.setMaxThreadCount(max(1, int(max_threads)))
        # signal objects must outlive the queued delivery
        self._live_signals: Set[_CallSignals] = set()

    def submit(
        self,
        fn: Callable[..., Any],
        *args: Any,
        on_result: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[BaseException], None]] = None,
        **kwargs: Any,
    ) -> Future:
        future: Future = Future()
        signals = None
        if on_result is not None or on_error is not None:
            signals = _CallSignals()
            self._live_signals.add(signals)

            def _done(_payload: Any, s: _CallSignals = signals) -> None:
                self._live_signals.discard(s)

            if on_result is not None:
                signals.succeeded.connect(on_result)
            if on_error is not None:
                signals.failed.connect(on_error)
            signals.succeeded.connect(_done)
            signals.failed.connect(_done)

        self.pool.start(_StoreCall(fn, args, kwargs, future, signals))
        return future

    def shutdown(self, timeout_ms: int = -1) -> bool:
        """Wait for queued and running calls. Returns False on timeout."""
        done = self.pool.waitForDone(timeout_ms)
        logger.info("Store worker stopped (all done=%s).", done)
        return done


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Moves SQLite work onto a thread pool so clicking "save" never freezes
#   the window, while keeping the stores themselves plain and synchronous.
#
# Key design decisions:
#   - Future for every call: tests and scripts can block on .result(), and
#     exceptions come out of .result() exactly as the store raised them.
#   - Qt signals for UI callbacks: a signal emitted on a pool thread is
#     queued to the thread that owns the QObject, so widgets are only ever
#     touched from the GUI thread.
#   - Atomicity is NOT the worker's job. Two calls can run at once; the
#     Database transaction scope is what keeps them from interleaving.
