# --- Standard library imports ---
import sys
import logging
import threading

# --- Project imports ---
from .config import Config, MonitorConfiguration
from .controller import MonitorController
from .errors import SignalSourceError
from .logger import StdLogSink, get_logger, setup_logging
from .probes import build_probe
from .signals import RouteConnectivitySource, StaticLifecycleSource
from .verdict import VERDICT_EMOJI


def watch_loop(monitor: MonitorController, stop_event: threading.Event) -> None:
    """
    Log every published verdict until the monitor stops or the
    stop event is set.

    Args:
        monitor: Started MonitorController instance.
        stop_event: Set by the caller to end the watch loop.
    """
    logger = get_logger("watch_loop")
    subscription = monitor.subscribe(conflate=True)

    try:
        while not stop_event.is_set():
            verdict = subscription.get(timeout=0.5)
            if verdict is not None:
                logger.info(f"{VERDICT_EMOJI[verdict]} Reachability [{verdict}]")
            elif subscription.closed:
                break
    finally:
        subscription.close()

def main() -> int:
    """
    Entry point for the reachability monitor CLI.

    Configures logging, builds the probe strategy from the environment
    and watches the target host until interrupted.
    """

    # Setup logging policy
    setup_logging(level=getattr(logging, Config.LOG_LEVEL, logging.INFO))
    logger = get_logger("main")
    logger.info(f"🚀 Starting Reachability Monitor [{Config.TARGET_HOST}]")
    logger.debug(f"Python version: {sys.version}")

    try:
        probe = build_probe(
            Config.PROBE_STRATEGY,
            Config.TARGET_HOST,
            port=Config.TARGET_PORT,
            timeout_s=Config.PROBE_TIMEOUT_S,
        )
        config = MonitorConfiguration.from_config(probe, log_sink=StdLogSink())
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    # Headless process: always "foreground"; network path from route lookups
    monitor = MonitorController(
        config,
        lifecycle=StaticLifecycleSource(active=True),
        connectivity=RouteConnectivitySource(
            host=Config.ROUTE_CHECK_HOST,
            interval_s=Config.ROUTE_CHECK_INTERVAL_S,
        ),
    )

    stop_event = threading.Event()
    try:
        monitor.start()
    except SignalSourceError as e:
        logger.critical(f"Cannot start monitor: {e}")
        return 1

    try:
        watch_loop(monitor, stop_event)
    except KeyboardInterrupt:
        logger.info("Interrupted; shutting down")
        stop_event.set()
    finally:
        monitor.stop()
    return 0

if __name__ == "__main__":
    sys.exit(main())
