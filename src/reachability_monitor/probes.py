# --- Standard library imports ---
import socket
from abc import ABC, abstractmethod

# --- Third-party imports ---
import requests

# --- Project imports ---
from .logger import get_logger


# Define the logger once for the entire module
logger = get_logger("probes")

class ReachabilityProbe(ABC):
    """
    Strategy that answers "is the target host reachable right now?".

    Contract:
    • `probe()` may block on network I/O and enforces its own timeout
    • Returns True only on a positive confirmation from the host
    • Never raises: every network-layer failure maps to False
    • Holds no state shared with the monitor
    """

    @abstractmethod
    def probe(self) -> bool:
        ...

    def close(self) -> None:
        """Release any resources held by the strategy."""


class SocketProbe(ReachabilityProbe):
    """
    TCP connect (Layer 4) to host:port, avoiding ICMP so no admin
    privileges are required.
    """

    def __init__(self, host: str, port: int = 80, timeout_s: float = 2.0):
        self.host = host
        self.port = port
        self.timeout_s = timeout_s

    def probe(self) -> bool:
        try:
            with socket.create_connection((self.host, self.port), timeout=self.timeout_s):
                return True
        except OSError as e:
            logger.debug(f"TCP probe {self.host}:{self.port} failed ({e.__class__.__name__})")
            return False

    def __repr__(self) -> str:
        return f"SocketProbe({self.host}:{self.port}, timeout={self.timeout_s}s)"


class HttpHeadProbe(ReachabilityProbe):
    """
    HTTP HEAD (Layer 7) against the host root.

    Redirects are followed; only a final 2xx status counts as reachable.
    """

    def __init__(self, host: str, timeout_s: float = 5.0, scheme: str = "https"):
        self.host = host
        self.timeout_s = timeout_s
        self.url = f"{scheme}://{host}"
        self.session = requests.Session()

    def probe(self) -> bool:
        try:
            resp = self.session.head(self.url, timeout=self.timeout_s, allow_redirects=True)
            with resp:
                if 200 <= resp.status_code < 300:
                    return True
                logger.debug(f"HTTP probe {self.url} → HTTP {resp.status_code}")
                return False
        except requests.RequestException as e:
            logger.debug(f"HTTP probe {self.url} failed ({e.__class__.__name__})")
            return False

    def close(self) -> None:
        self.session.close()

    def __repr__(self) -> str:
        return f"HttpHeadProbe({self.url}, timeout={self.timeout_s}s)"


PROBE_STRATEGIES = ("socket", "http")

def build_probe(strategy: str, host: str, port: int = 80, timeout_s: float = 2.0) -> ReachabilityProbe:
    """
    Map a configured strategy name to a probe instance.

    Raises:
        ValueError: unknown strategy name.
    """
    match strategy.lower():
        case "socket":
            return SocketProbe(host, port=port, timeout_s=timeout_s)
        case "http":
            return HttpHeadProbe(host, timeout_s=timeout_s)
        case _:
            raise ValueError(
                f"Unknown probe strategy {strategy!r} (expected one of {', '.join(PROBE_STRATEGIES)})"
            )
