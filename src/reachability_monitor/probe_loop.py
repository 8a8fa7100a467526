# --- Standard library imports ---
import time
import threading
from enum import Enum, auto
from concurrent.futures import ThreadPoolExecutor

# --- Project imports ---
from .logger import LogSink, NullLogSink, get_logger
from .probes import ReachabilityProbe
from .state_store import StateStore
from .telemetry import tlog
from .verdict import ReachabilityVerdict


TAG = "probe_loop"

# Old cycles may still be finishing an in-flight probe after a restart
DEFAULT_MAX_WORKERS = 4

logger = get_logger(TAG)

class LoopState(Enum):
    IDLE = auto()
    PROBING = auto()

    def __str__(self) -> str:
        return self.name


class CancellationToken:
    """
    One-shot cancellation flag shared by a probe cycle and its owner.

    Waiting on the token returns as soon as it is cancelled, which bounds
    how long a cancelled cycle can linger between probes.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float) -> bool:
        """Sleep up to `timeout` seconds; True if cancelled meanwhile."""
        return self._event.wait(timeout)


class ProbeLoop:
    """
    Periodic probe scheduler with two states, IDLE and PROBING.

    While PROBING, a single cycle on the worker pool repeats:
        probe → map to verdict → write to store → wait one interval

    The wait follows each probe, so a slow probe delays the next tick
    and probes from one cycle never overlap. Stopping cancels the cycle's
    token: the wait ends at once and the store discards any result the
    cancelled cycle still produces.
    """

    def __init__(
        self,
        probe: ReachabilityProbe,
        store: StateStore,
        interval_s: float = 5.0,
        sink: LogSink | None = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ):
        # ─── Dependencies / Configuration ───
        self.probe = probe
        self.store = store
        self.interval_s = interval_s
        self.sink = sink or NullLogSink()

        # ─── Runtime State ───
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="probe")
        self._lock = threading.Lock()
        self._token: CancellationToken | None = None
        self._cycle = 0
        self._shutdown = False

    @property
    def state(self) -> LoopState:
        with self._lock:
            return LoopState.PROBING if self._token is not None else LoopState.IDLE

    @property
    def cycles_started(self) -> int:
        with self._lock:
            return self._cycle

    def start(self) -> bool:
        """
        IDLE → PROBING. No-op when already probing.

        Returns:
            True if a new cycle was launched.
        """
        with self._lock:
            if self._shutdown:
                self.sink.warning(TAG, "Start requested after shutdown; ignoring")
                return False
            if self._token is not None:
                self.sink.debug(TAG, "Probing is already active")
                return False
            cycle = self._launch()

        tlog(self.sink, TAG, "🟢", "PROBE LOOP", "STARTED", primary=f"cycle={cycle}",
             meta=f"interval={self.interval_s}s | probe={self.probe!r}")
        return True

    def stop(self) -> bool:
        """
        PROBING → IDLE. No-op when already idle.

        Returns:
            True if a running cycle was cancelled.
        """
        with self._lock:
            token, self._token = self._token, None
            cycle = self._cycle
        if token is None:
            return False

        token.cancel()
        tlog(self.sink, TAG, "⚪", "PROBE LOOP", "STOPPED", primary=f"cycle={cycle}")
        return True

    def restart(self) -> bool:
        """
        Cancel the current cycle (if any) and launch a fresh one that
        probes immediately.
        """
        with self._lock:
            if self._shutdown:
                return False
            if self._token is not None:
                self._token.cancel()
            cycle = self._launch()

        tlog(self.sink, TAG, "🟡", "PROBE LOOP", "RESTARTED", primary=f"cycle={cycle}")
        return True

    def shutdown(self, wait: bool = False) -> None:
        """Stop probing for good and release the worker pool."""
        self.stop()
        with self._lock:
            self._shutdown = True
        self._executor.shutdown(wait=wait, cancel_futures=True)

    # ──────────────────────────────────────────────────────────────
    # Cycle internals
    # ──────────────────────────────────────────────────────────────

    def _launch(self) -> int:
        # Caller holds self._lock
        token = CancellationToken()
        self._token = token
        self._cycle += 1
        self._executor.submit(self._run_cycle, token, self._cycle)
        return self._cycle

    def _run_cycle(self, token: CancellationToken, cycle: int) -> None:
        while not token.cancelled:
            try:
                self._tick(token, cycle)
            except Exception:
                # Keep probing; the sink itself may be what failed
                logger.exception(f"Probe cycle {cycle} iteration failed; continuing")

            if token.wait(self.interval_s):
                break
        logger.debug(f"Probe cycle {cycle} exited")

    def _tick(self, token: CancellationToken, cycle: int) -> None:
        start = time.perf_counter()
        reachable = self._invoke_probe()
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.timing(f"Timing | {'probe() cycle=' + str(cycle):<28} [{elapsed_ms:8.1f} ms]")

        self.store.write(ReachabilityVerdict.from_probe(reachable), token)

    def _invoke_probe(self) -> bool:
        try:
            return bool(self.probe.probe())
        except Exception as e:
            # Probes must not raise; treat a leaked fault as a failed probe
            self.sink.error(TAG, f"{self.probe!r} raised instead of returning False", e)
            return False
