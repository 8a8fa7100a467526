# --- Standard library imports ---
import threading
from typing import Callable, TypeVar

# --- Project imports ---
from .logger import LogSink, NullLogSink


T = TypeVar("T")

TAG = "aggregator"

class SignalAggregator:
    """
    Combine foreground activity and network availability into one
    "should-probe" decision.

    Invariants:
      - foreground starts False; network is unknown until seeded
      - nothing is emitted while network is unknown
      - `on_change` fires only when the conjunction changes
      - emissions happen under the aggregator lock, so directives reach
        the consumer in the order the inputs changed
    """

    def __init__(self, on_change: Callable[[bool], None], sink: LogSink | None = None):
        self.on_change = on_change
        self.sink = sink or NullLogSink()
        self._lock = threading.RLock()
        self._foreground = False
        self._network: bool | None = None
        self._last: bool | None = None

    @property
    def active(self) -> bool:
        """Most recently emitted conjunction (False before the first emission)."""
        with self._lock:
            return bool(self._last)

    def inputs(self) -> tuple[bool, bool | None]:
        with self._lock:
            return self._foreground, self._network

    def update_foreground(self, active: bool) -> None:
        with self._lock:
            self._foreground = active
            self._evaluate()

    def update_network(self, available: bool) -> None:
        with self._lock:
            self._network = available
            self._evaluate()

    def when_active(self, action: Callable[[], T]) -> T | None:
        """
        Run `action` only while the conjunction is True.

        The check and the action share the lock, so no stop directive can
        slip in between them.
        """
        with self._lock:
            if not self._last:
                return None
            return action()

    def _evaluate(self) -> None:
        if self._network is None:
            return

        combined = self._foreground and self._network
        if combined == self._last:
            return

        self.sink.debug(
            TAG,
            f"should_probe={combined} (foreground={self._foreground}, network={self._network})",
        )
        self._last = combined
        self.on_change(combined)
