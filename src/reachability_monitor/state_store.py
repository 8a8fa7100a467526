# ─── Future imports ───
from __future__ import annotations

# ─── Standard library imports ───
import queue
import threading
import time
from typing import TYPE_CHECKING, Iterator

# ─── Project imports ───
from .logger import LogSink, NullLogSink
from .telemetry import tlog
from .verdict import VERDICT_EMOJI, ReachabilityVerdict

if TYPE_CHECKING:
    from .probe_loop import CancellationToken


TAG = "state_store"

_CLOSED = object()

class Subscription:
    """
    Ordered stream of verdicts for one observer.

    Iterating blocks for the next change and stops once the store is
    closed or the subscription itself is closed.

    By default every change is queued, so a consumer that never reads
    grows its backlog without bound. A conflating subscription keeps at
    most one undelivered verdict, the latest, and drops any that would
    repeat the verdict it last delivered.
    """

    def __init__(self, store: StateStore, conflate: bool = False):
        self._store = store
        self._conflate = conflate
        self._queue: queue.Queue = queue.Queue()
        self._push_lock = threading.Lock()
        self._last: ReachabilityVerdict | None = None
        self.closed = False

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def _push(self, item) -> None:
        if not self._conflate or item is _CLOSED:
            self._queue.put(item)
            return
        with self._push_lock:
            ended = False
            while True:
                try:
                    ended = self._queue.get_nowait() is _CLOSED or ended
                except queue.Empty:
                    break
            self._queue.put(_CLOSED if ended else item)

    def get(self, timeout: float | None = None) -> ReachabilityVerdict | None:
        """
        Next verdict, or None on timeout / end of stream.
        """
        if self.closed:
            return None
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            try:
                item = self._queue.get(timeout=remaining)
            except queue.Empty:
                return None
            if item is _CLOSED:
                self.closed = True
                return None
            if item == self._last:
                continue
            self._last = item
            return item

    def close(self) -> None:
        self._store._unsubscribe(self)
        self._push(_CLOSED)

    def __iter__(self) -> Iterator[ReachabilityVerdict]:
        return self

    def __next__(self) -> ReachabilityVerdict:
        verdict = self.get()
        if verdict is None:
            raise StopIteration
        return verdict


class StateStore:
    """
    Single source of truth for the published reachability verdict.

    • One lock guards the value slot and the subscriber list
    • Publication is deduplicated: only a changed value reaches observers
    • Last writer wins, in real-time order of entry to the critical section
    • Writes carrying a cancelled token are discarded
    """

    def __init__(self, sink: LogSink | None = None):
        self.sink = sink or NullLogSink()
        self._lock = threading.Lock()
        self._value: ReachabilityVerdict | None = None
        self._subscribers: list[Subscription] = []
        self._closed = False

    def current_value(self) -> ReachabilityVerdict | None:
        return self._value

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, verdict: ReachabilityVerdict, token: CancellationToken | None = None) -> bool:
        """
        Store `verdict`, publishing it only if it differs from the last one.

        Returns:
            True if subscribers were notified of a change.
        """
        with self._lock:
            if self._closed:
                return False
            if token is not None and token.cancelled:
                self.sink.debug(TAG, f"Discarded {verdict} from cancelled probe cycle")
                return False

            previous = self._value
            if previous == verdict:
                return False

            self._value = verdict
            for subscription in self._subscribers:
                subscription._push(verdict)

        tlog(
            self.sink,
            TAG,
            VERDICT_EMOJI[verdict],
            "REACHABILITY",
            "CHANGED",
            primary=str(verdict),
            meta=f"previous={previous}",
        )
        return True

    def subscribe(self, conflate: bool = False) -> Subscription:
        """
        Open a stream that starts with the current verdict (if any) and
        continues with every later change.

        Args:
            conflate: keep only the latest undelivered verdict instead of
                queueing every change. Unconflated streams are unbounded.
        """
        subscription = Subscription(self, conflate)
        with self._lock:
            if self._closed:
                subscription._push(_CLOSED)
                return subscription
            if self._value is not None:
                subscription._push(self._value)
            self._subscribers.append(subscription)
        return subscription

    def _unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscribers:
                self._subscribers.remove(subscription)

    def close(self) -> None:
        """Tear the store down; every open subscription terminates."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            subscribers, self._subscribers = self._subscribers, []
        for subscription in subscribers:
            subscription._push(_CLOSED)
