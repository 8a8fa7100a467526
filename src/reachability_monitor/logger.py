# --- Standard library imports ---
import sys
import logging
from typing import Protocol


# --- Custom log levels ---
TIMING = 25   # Between INFO (20) and WARNING (30)
logging.addLevelName(TIMING, "TIME")

def timing(self, message, *args, **kwargs):
    """Add `timing` method to Logger for TIMING-level logs."""
    if self.isEnabledFor(TIMING):
        self._log(TIMING, message, args, stacklevel=2, **kwargs)

logging.Logger.timing = timing

# --- Filters ---
class TimingFilter(logging.Filter):
    """Filter out TIMING logs unless explicitly enabled."""
    def __init__(self, enabled: bool):
        super().__init__()
        self.enabled = enabled

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno == TIMING:
            return self.enabled
        return True

# --- Format configuration constants ---
LOG_LEVEL_EMOJIS = {
    logging.DEBUG: "🧱",
    logging.INFO: "🟢",
    TIMING: "⚡️",
    logging.WARNING: "⚠️ ",
    logging.ERROR: "❌",
    logging.CRITICAL: "🔥",
}

LEVEL_NAME_MAP = {
    "WARNING": "WARN",
    "CRITICAL": "FATAL",
}

# --- Formatters ---
class EmojiFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        """
        Formatter that prepends an emoji per 
        log level and shortens log level names.
        """
        record.levelemoji = LOG_LEVEL_EMOJIS.get(record.levelno, "")
        record.levelname = LEVEL_NAME_MAP.get(record.levelname, record.levelname)
        return super().format(record)

# --- Public logging setup API ---
def setup_logging(level=logging.INFO, log_timing: bool | None = None) -> None:
    """
    Configure global logging with emoji decorations and optional TIMING logs.

    When `log_timing` is None the LOG_TIMING environment setting is used.
    """
    if log_timing is None:
        from .config import Config
        log_timing = Config.LOG_TIMING

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = EmojiFormatter(
        fmt="%(asctime)s %(levelemoji)s %(name)s:%(funcName)s → %(message)s",
        datefmt="%H:%M:%S",
    )
    handler.setFormatter(formatter)

    handler.addFilter(TimingFilter(enabled=log_timing))
    root.addHandler(handler)

def get_logger(name: str) -> logging.Logger:
    """
    Return a namespaced logger for any module.
    """
    return logging.getLogger(f"reachability_monitor.{name}")


# ============================================================
# Log sinks (leveled tag/message/cause records)
# ============================================================

class LogSink(Protocol):
    """
    Leveled `(tag, message[, cause])` record consumer.

    A monitor works identically with or without a sink; only
    observability changes.
    """

    def debug(self, tag: str, message: str) -> None: ...

    def info(self, tag: str, message: str) -> None: ...

    def warning(self, tag: str, message: str, cause: BaseException | None = None) -> None: ...

    def error(self, tag: str, message: str, cause: BaseException | None = None) -> None: ...


class StdLogSink:
    """Route sink records to stdlib loggers named after the tag."""

    def debug(self, tag: str, message: str) -> None:
        get_logger(tag).debug(message, stacklevel=2)

    def info(self, tag: str, message: str) -> None:
        get_logger(tag).info(message, stacklevel=2)

    def warning(self, tag: str, message: str, cause: BaseException | None = None) -> None:
        get_logger(tag).warning(message, exc_info=cause, stacklevel=2)

    def error(self, tag: str, message: str, cause: BaseException | None = None) -> None:
        get_logger(tag).error(message, exc_info=cause, stacklevel=2)


class NullLogSink:
    """Discard every record."""

    def debug(self, tag: str, message: str) -> None:
        pass

    def info(self, tag: str, message: str) -> None:
        pass

    def warning(self, tag: str, message: str, cause: BaseException | None = None) -> None:
        pass

    def error(self, tag: str, message: str, cause: BaseException | None = None) -> None:
        pass


class GuardedLogSink:
    """
    Forward to another sink, reporting its failures through stdlib logging
    instead of raising into the caller.
    """

    def __init__(self, inner: LogSink):
        self.inner = inner

    def _forward(self, level: str, tag: str, message: str, *args) -> None:
        try:
            getattr(self.inner, level)(tag, message, *args)
        except Exception:
            get_logger(tag).exception(f"Log sink {type(self.inner).__name__} failed on {level}: {message}")

    def debug(self, tag: str, message: str) -> None:
        self._forward("debug", tag, message)

    def info(self, tag: str, message: str) -> None:
        self._forward("info", tag, message)

    def warning(self, tag: str, message: str, cause: BaseException | None = None) -> None:
        self._forward("warning", tag, message, cause)

    def error(self, tag: str, message: str, cause: BaseException | None = None) -> None:
        self._forward("error", tag, message, cause)
