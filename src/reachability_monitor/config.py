# --- Future imports ---
from __future__ import annotations

# --- Standard library imports ---
import os
from dataclasses import dataclass, field

# --- Third-party imports ---
from dotenv import load_dotenv

# --- Project imports ---
from .errors import DEFAULT_NETWORK_ERROR_TYPES
from .logger import LogSink
from .probes import ReachabilityProbe


# Load .env once
load_dotenv()

class Config:
    """Centralized config for probe target, scheduling and observability"""

    # --- Probe Target ---
    TARGET_HOST = os.getenv("TARGET_HOST", "www.google.com")

    try:
        TARGET_PORT = int(os.getenv("TARGET_PORT", 80))
    except ValueError:
        TARGET_PORT = 80

    PROBE_STRATEGY = os.getenv("PROBE_STRATEGY", "socket").lower()

    # --- Scheduling Policy ---
    try:
        PROBE_INTERVAL_S = float(os.getenv("PROBE_INTERVAL_S", 5.0))
    except ValueError:
        PROBE_INTERVAL_S = 5.0

    # --- Network Policy ---
    try:
        PROBE_TIMEOUT_S = float(os.getenv("PROBE_TIMEOUT_S", 2.0))
    except ValueError:
        PROBE_TIMEOUT_S = 2.0

    # --- Connectivity Source (headless route polling) ---
    ROUTE_CHECK_HOST = os.getenv("ROUTE_CHECK_HOST", "8.8.8.8")

    try:
        ROUTE_CHECK_INTERVAL_S = float(os.getenv("ROUTE_CHECK_INTERVAL_S", 2.0))
    except ValueError:
        ROUTE_CHECK_INTERVAL_S = 2.0

    # --- Observability Policy ---
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_TIMING = os.getenv("LOG_TIMING", "false").lower() == "true"


@dataclass(frozen=True)
class MonitorConfiguration:
    """
    Immutable settings owned by a single MonitorController.

    • probe               — reachability strategy instance
    • interval_s          — pause after each probe while probing
    • log_sink            — optional leveled sink; None means silent
    • owns_probe          — close the probe when the controller stops
    • network_error_types — causes that trigger a fast-path re-probe

    Rebuilding a monitor with different settings means constructing a
    new controller from a new configuration.
    """

    probe: ReachabilityProbe
    interval_s: float = 5.0
    log_sink: LogSink | None = None
    owns_probe: bool = True
    network_error_types: tuple[type[BaseException], ...] = field(
        default=DEFAULT_NETWORK_ERROR_TYPES
    )

    def __post_init__(self) -> None:
        if self.interval_s <= 0:
            raise ValueError(
                f"interval_s must be positive (got {self.interval_s})"
            )

    @classmethod
    def from_config(
        cls,
        probe: ReachabilityProbe,
        log_sink: LogSink | None = None,
    ) -> "MonitorConfiguration":
        """Build a configuration using the environment-driven Config values."""
        return cls(
            probe=probe,
            interval_s=Config.PROBE_INTERVAL_S,
            log_sink=log_sink,
        )
