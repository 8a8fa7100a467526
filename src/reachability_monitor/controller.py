# --- Standard library imports ---
import threading
from enum import Enum, auto

# --- Project imports ---
from .aggregator import SignalAggregator
from .config import MonitorConfiguration
from .errors import ErrorClassifier, MonitorStateError, SignalSourceError
from .logger import GuardedLogSink, NullLogSink
from .probe_loop import LoopState, ProbeLoop
from .signals import ConnectivitySource, LifecycleSource, Registration
from .state_store import StateStore, Subscription
from .telemetry import tlog
from .verdict import ReachabilityVerdict


TAG = "monitor"

class MonitorLifecycle(Enum):
    CREATED = auto()
    STARTED = auto()
    STOPPED = auto()

    def __str__(self) -> str:
        return self.name


class MonitorController:
    """
    Composition root of the reachability monitor.

    Responsibilities:
    • Register with the lifecycle and connectivity signal sources
    • Gate the probe loop on (foreground AND network available)
    • Publish UNREACHABLE immediately when the network path is lost
    • Fast-path re-probe when a caller reports a network fault

    Lifecycle: CREATED → start() → STARTED → stop() → STOPPED (terminal).
    A stopped controller is never restarted; build a new one instead.
    """

    def __init__(
        self,
        config: MonitorConfiguration,
        lifecycle: LifecycleSource,
        connectivity: ConnectivitySource,
    ):
        # ─── Dependencies / Configuration ───
        self.config = config
        self.lifecycle = lifecycle
        self.connectivity = connectivity
        self.sink = GuardedLogSink(config.log_sink) if config.log_sink else NullLogSink()
        self.classifier = ErrorClassifier(config.network_error_types)

        # ─── Components ───
        self.store = StateStore(self.sink)
        self.loop = ProbeLoop(config.probe, self.store, config.interval_s, self.sink)
        self.aggregator = SignalAggregator(self._on_should_probe, self.sink)

        # ─── Runtime State ───
        self._lock = threading.Lock()
        self._lifecycle_state = MonitorLifecycle.CREATED
        self._registrations: list[Registration] = []

    # ──────────────────────────────────────────────────────────────
    # Lifecycle
    # ──────────────────────────────────────────────────────────────

    @property
    def lifecycle_state(self) -> MonitorLifecycle:
        return self._lifecycle_state

    @property
    def is_probing(self) -> bool:
        return self.loop.state == LoopState.PROBING

    def start(self) -> None:
        """
        Register with both signal sources and begin publishing.

        Raises:
            MonitorStateError: the controller was already started or stopped,
                or stop() ran before registration finished.
            SignalSourceError: a signal source could not be registered with;
                the controller is left STOPPED with nothing registered.
        """
        with self._lock:
            if self._lifecycle_state != MonitorLifecycle.CREATED:
                raise MonitorStateError(
                    f"start() called on a {self._lifecycle_state} monitor; "
                    "construct a new MonitorController instead"
                )
            self._lifecycle_state = MonitorLifecycle.STARTED

        try:
            # Seed before registering so later events are never overwritten
            # by the older snapshot
            initially_available = self.connectivity.is_available()
            self.aggregator.update_network(initially_available)
            self._adopt(self.lifecycle.register(self._on_foreground_changed))
            self._adopt(self.connectivity.register(_ConnectivityBridge(self)))
        except MonitorStateError:
            # stop() won the race and already tore everything down
            raise
        except Exception as e:
            self.sink.error(TAG, "Signal source registration failed; aborting start", e)
            self._teardown(self._mark_stopped() or [])
            if isinstance(e, SignalSourceError):
                raise
            raise SignalSourceError(f"Signal source registration failed: {e}") from e

        tlog(
            self.sink, TAG, "🚀", "MONITOR", "STARTED",
            primary=f"interval={self.config.interval_s}s",
            meta=f"network={initially_available} | probe={self.config.probe!r}",
        )

    def stop(self) -> None:
        """
        Cancel probing, deregister from signal sources and release owned
        resources. Safe whether or not probing ever ran; repeat calls are
        no-ops.
        """
        registrations = self._mark_stopped()
        if registrations is None:
            return
        self._teardown(registrations)
        tlog(self.sink, TAG, "⚪", "MONITOR", "STOPPED")

    def _adopt(self, registration: Registration) -> None:
        """
        Keep `registration` for release on stop. If stop() ran while the
        source was registering, release it at once instead.
        """
        with self._lock:
            if self._lifecycle_state == MonitorLifecycle.STARTED:
                self._registrations.append(registration)
                return
        registration.release()
        raise MonitorStateError("stop() ran while start() was registering with signal sources")

    def _mark_stopped(self) -> list[Registration] | None:
        """Enter STOPPED; None if another caller already did."""
        with self._lock:
            if self._lifecycle_state == MonitorLifecycle.STOPPED:
                return None
            self._lifecycle_state = MonitorLifecycle.STOPPED
            registrations, self._registrations = self._registrations, []
        return registrations

    def _teardown(self, registrations: list[Registration]) -> None:
        self.loop.shutdown()

        for registration in reversed(registrations):
            try:
                registration.release()
            except Exception as e:
                self.sink.error(TAG, "Failed to release signal registration", e)

        if self.config.owns_probe:
            try:
                self.config.probe.close()
            except Exception as e:
                self.sink.error(TAG, f"Failed to close {self.config.probe!r}", e)

        self.store.close()

    def __enter__(self) -> "MonitorController":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    # ──────────────────────────────────────────────────────────────
    # Published state
    # ──────────────────────────────────────────────────────────────

    def current_state(self) -> ReachabilityVerdict | None:
        return self.store.current_value()

    def subscribe(self, conflate: bool = False) -> Subscription:
        return self.store.subscribe(conflate)

    # ──────────────────────────────────────────────────────────────
    # Error fast path
    # ──────────────────────────────────────────────────────────────

    def notify_error(self, cause: BaseException) -> bool:
        """
        Report a fault observed by an external caller (e.g. an HTTP client).

        Network-related causes cancel the current wait and force a fresh
        probe while probing is warranted. Other causes are logged only and
        never touch loop state.

        Returns:
            True if a fresh probe cycle was launched.
        """
        if not self.classifier.is_network_error(cause):
            self.sink.warning(TAG, f"Non-network error reported ({type(cause).__name__}); no action", cause)
            return False

        if self._lifecycle_state != MonitorLifecycle.STARTED:
            self.sink.debug(TAG, f"Network error reported while {self._lifecycle_state}; ignoring")
            return False

        restarted = bool(self.aggregator.when_active(self.loop.restart))
        if restarted:
            tlog(self.sink, TAG, "🟡", "FAST PATH", "RE-PROBE", primary=type(cause).__name__)
        else:
            self.sink.info(TAG, f"Network error reported ({type(cause).__name__}) while not probing")
        return restarted

    # ──────────────────────────────────────────────────────────────
    # Signal handlers
    # ──────────────────────────────────────────────────────────────

    def _accepting_signals(self) -> bool:
        return self._lifecycle_state == MonitorLifecycle.STARTED

    def _on_foreground_changed(self, active: bool) -> None:
        if not self._accepting_signals():
            return
        self.sink.debug(TAG, f"App entered {'foreground' if active else 'background'}")
        self.aggregator.update_foreground(active)

    def _on_network_available(self) -> None:
        if not self._accepting_signals():
            return
        self.aggregator.update_network(True)

    def _on_network_unavailable(self) -> None:
        if not self._accepting_signals():
            return
        self.aggregator.update_network(False)

    def _on_network_lost(self) -> None:
        if not self._accepting_signals():
            return
        # Stop first so the cancelled cycle cannot overwrite UNREACHABLE
        self.aggregator.update_network(False)
        self.store.write(ReachabilityVerdict.UNREACHABLE)

    def _on_should_probe(self, should_probe: bool) -> None:
        if should_probe:
            self.loop.start()
        else:
            self.loop.stop()


class _ConnectivityBridge:
    """Adapt ConnectivityListener callbacks onto the controller."""

    def __init__(self, controller: MonitorController):
        self._controller = controller

    def on_available(self) -> None:
        self._controller._on_network_available()

    def on_unavailable(self) -> None:
        self._controller._on_network_unavailable()

    def on_lost(self) -> None:
        self._controller._on_network_lost()
