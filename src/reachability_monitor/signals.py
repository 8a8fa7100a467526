# --- Standard library imports ---
import socket
import threading
from abc import ABC, abstractmethod
from typing import Callable, Protocol

# --- Project imports ---
from .logger import get_logger


logger = get_logger("signals")

class Registration:
    """
    Handle returned by every signal-source registration.

    `release()` detaches the listener and is safe to call more than once.
    """

    def __init__(self, on_release: Callable[[], None]):
        self._on_release = on_release
        self._lock = threading.Lock()
        self.released = False

    def release(self) -> None:
        with self._lock:
            if self.released:
                return
            self.released = True
        self._on_release()


class ConnectivityListener(Protocol):
    def on_available(self) -> None: ...

    def on_unavailable(self) -> None: ...

    def on_lost(self) -> None: ...


class ConnectivitySource(ABC):
    """
    Platform "is a network path available" signal.

    • `is_available()` — synchronous snapshot taken at registration time
    • `register()`     — asynchronous available / unavailable / lost events

    A *lost* event (the active path went away) is distinct from a plain
    change to unavailable: only *lost* is a certain fact about the path.
    """

    @abstractmethod
    def is_available(self) -> bool:
        ...

    @abstractmethod
    def register(self, listener: ConnectivityListener) -> Registration:
        ...


class LifecycleSource(ABC):
    """
    Platform foreground/background signal.

    Callbacks receive the new "is active" value. Until the first
    callback the process is treated as inactive.
    """

    @abstractmethod
    def register(self, callback: Callable[[bool], None]) -> Registration:
        ...


# ============================================================
# Programmatic sources (embedding apps, tests)
# ============================================================

class _ListenerSet:
    def __init__(self):
        self._lock = threading.Lock()
        self._items: list = []

    def add(self, item) -> Registration:
        with self._lock:
            self._items.append(item)
        return Registration(lambda: self._remove(item))

    def _remove(self, item) -> None:
        with self._lock:
            if item in self._items:
                self._items.remove(item)

    def snapshot(self) -> list:
        with self._lock:
            return list(self._items)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


class ManualConnectivitySource(ConnectivitySource):
    """Connectivity driven by explicit calls; events dispatch synchronously."""

    def __init__(self, available: bool = False):
        self._available = available
        self._listeners = _ListenerSet()

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def is_available(self) -> bool:
        return self._available

    def register(self, listener: ConnectivityListener) -> Registration:
        return self._listeners.add(listener)

    def set_available(self, available: bool) -> None:
        self._available = available
        for listener in self._listeners.snapshot():
            if available:
                listener.on_available()
            else:
                listener.on_unavailable()

    def lose(self) -> None:
        self._available = False
        for listener in self._listeners.snapshot():
            listener.on_lost()


class ManualLifecycleSource(LifecycleSource):
    """Foreground state driven by explicit calls."""

    def __init__(self):
        self.active = False
        self._callbacks = _ListenerSet()

    @property
    def listener_count(self) -> int:
        return len(self._callbacks)

    def register(self, callback: Callable[[bool], None]) -> Registration:
        return self._callbacks.add(callback)

    def set_active(self, active: bool) -> None:
        self.active = active
        for callback in self._callbacks.snapshot():
            callback(active)


class StaticLifecycleSource(LifecycleSource):
    """
    Fixed lifecycle state for headless processes (daemons, CLIs) that
    have no foreground/background notion. Reports once on registration.
    """

    def __init__(self, active: bool = True):
        self.active = active

    def register(self, callback: Callable[[bool], None]) -> Registration:
        callback(self.active)
        return Registration(lambda: None)


# ============================================================
# Route polling source (headless hosts)
# ============================================================

def has_route(host: str = "8.8.8.8", port: int = 53) -> bool:
    """
    Return True if the OS has a usable route towards `host`.

    Connecting a UDP socket sends no packets; the kernel only resolves a
    route and a source address, failing with OSError when none exists.
    """
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect((host, port))
            return sock.getsockname()[0] not in ("0.0.0.0", "")
    except OSError:
        return False


class RouteConnectivitySource(ConnectivitySource):
    """
    Connectivity derived from periodic route lookups.

    A background thread polls `has_route()` while at least one listener
    is registered and emits `on_available()` / `on_lost()` on change.
    """

    def __init__(self, host: str = "8.8.8.8", interval_s: float = 2.0):
        self.host = host
        self.interval_s = interval_s
        self._listeners = _ListenerSet()
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._last: bool | None = None

    def is_available(self) -> bool:
        available = has_route(self.host)
        with self._lock:
            if self._last is None:
                self._last = available
        return available

    def register(self, listener: ConnectivityListener) -> Registration:
        registration = self._listeners.add(listener)
        with self._lock:
            if self._thread is None or not self._thread.is_alive():
                self._stop_event = threading.Event()
                self._thread = threading.Thread(
                    target=self._poll_loop,
                    args=(self._stop_event,),
                    name="RouteConnectivitySource",
                    daemon=True,
                )
                self._thread.start()
        return Registration(lambda: self._release(registration))

    def _release(self, registration: Registration) -> None:
        registration.release()
        if len(self._listeners) == 0:
            with self._lock:
                self._stop_event.set()
                self._thread = None

    def _poll_loop(self, stop_event: threading.Event) -> None:
        logger.debug(f"Route polling started ({self.host}, every {self.interval_s}s)")
        while not stop_event.wait(timeout=self.interval_s):
            available = has_route(self.host)
            with self._lock:
                changed = available != self._last
                self._last = available
            if not changed:
                continue

            logger.info(f"Route to {self.host} {'available' if available else 'lost'}")
            for listener in self._listeners.snapshot():
                try:
                    if available:
                        listener.on_available()
                    else:
                        listener.on_lost()
                except Exception:
                    logger.exception("Connectivity listener failed")
        logger.debug("Route polling stopped")
