# ─── Standard library imports ───
import socket

# ─── Third-party imports ───
import requests


class MonitorError(Exception):
    """Base class for reachability monitor failures."""


class SignalSourceError(MonitorError):
    """A platform signal source could not be registered with."""


class MonitorStateError(MonitorError):
    """A controller operation was called in the wrong lifecycle state."""


# Timeouts and name-resolution failures. socket.timeout is an alias of
# TimeoutError on current interpreters.
DEFAULT_NETWORK_ERROR_TYPES: tuple[type[BaseException], ...] = (
    TimeoutError,
    socket.gaierror,
    requests.Timeout,
)


class ErrorClassifier:
    """
    Decide whether a reported fault is network-related.

    The classification set is open: callers extend it with `with_types()`
    rather than relying on a fixed pair of fault kinds. Chained causes are
    inspected too, so a name-resolution failure wrapped inside a
    `requests.ConnectionError` still classifies as network-related.
    """

    MAX_CHAIN_DEPTH = 16

    def __init__(self, network_types: tuple[type[BaseException], ...] = DEFAULT_NETWORK_ERROR_TYPES):
        self.network_types = tuple(network_types)

    def with_types(self, *extra: type[BaseException]) -> "ErrorClassifier":
        return ErrorClassifier(self.network_types + tuple(extra))

    def is_network_error(self, cause: BaseException | None) -> bool:
        seen: set[int] = set()
        depth = 0
        while cause is not None and id(cause) not in seen and depth < self.MAX_CHAIN_DEPTH:
            if isinstance(cause, self.network_types):
                return True
            seen.add(id(cause))
            depth += 1
            cause = cause.__cause__ or cause.__context__
        return False
