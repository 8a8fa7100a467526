# --- Standard library imports ---
from typing import Callable

# --- Third-party imports ---
import requests
from requests.adapters import HTTPAdapter

# --- Project imports ---
from .logger import get_logger


logger = get_logger("interceptor")

class ErrorReportingAdapter(HTTPAdapter):
    """
    Transport adapter that reports request failures to a monitor.

    Every `requests.RequestException` raised while sending is handed to
    `on_error` (typically `MonitorController.notify_error`) and then
    re-raised, so callers still see the original failure. Non-success
    HTTP statuses are logged but not reported: the server answered.
    """

    def __init__(self, on_error: Callable[[BaseException], object], **kwargs):
        self.on_error = on_error
        super().__init__(**kwargs)

    def send(self, request, *args, **kwargs):
        try:
            response = super().send(request, *args, **kwargs)
        except requests.RequestException as e:
            logger.error(f"{e.__class__.__name__} for {request.url}")
            try:
                self.on_error(e)
            except Exception:
                logger.exception("Error reporter failed")
            raise

        if not response.ok:
            logger.warning(f"HTTP {response.status_code} for {request.url}")
        return response


def reporting_session(on_error: Callable[[BaseException], object]) -> requests.Session:
    """Build a Session whose HTTP(S) traffic reports failures to `on_error`."""
    session = requests.Session()
    adapter = ErrorReportingAdapter(on_error)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session
