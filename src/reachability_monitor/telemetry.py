# --- Project imports ---
from .logger import LogSink, get_logger


logger = get_logger("telemetry")

def tlog(
    sink: LogSink,
    tag: str,
    emoji: str,
    subsystem: str,
    state: str,
    primary: str = "—--",
    meta: str | None = None,
) -> None:
    """
    Emit a standardized telemetry log "tlog" line.

    Format:
        SUBSYSTEM STATE PRIMARY | meta data

    A sink that raises is reported through stdlib logging instead of
    failing the state transition being logged.
    """
    msg = f"{subsystem:<12} {state:<20} {primary:<16}"
    if meta:
        msg += f" | {meta}"

    try:
        sink.info(tag, f"{emoji} {msg}")
    except Exception:
        logger.exception(f"Log sink {type(sink).__name__} failed on: {msg.strip()}")
