import pytest
import logging

from conftest import RaisingSink
from reachability_monitor.logger import (
    GuardedLogSink,
    NullLogSink,
    StdLogSink,
    get_logger,
    setup_logging,
)
from reachability_monitor.telemetry import tlog


# ========
# FIXTURES
# ========
@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo setup_logging() so later tests keep pytest's capture handlers"""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.parametrize(
    "level, message, expected_in_output",
    [
        (logging.DEBUG, "Probe cycle 1 exited", True),
        (logging.INFO, "Route to 8.8.8.8 available", True),
        (logging.WARNING, "Non-network error reported", True),
        (logging.ERROR, "Probe cycle 3 aborted", True),
        (logging.CRITICAL, "Cannot start monitor", True),
    ],
)

def test_logger_configuration(capsys, level, message, expected_in_output):
    """Smoke test to ensure logger setup produces expected formatted output at various levels"""
    setup_logging(level=logging.DEBUG, log_timing=False)
    logger = get_logger("test")

    logger.log(level, message)

    captured = capsys.readouterr()
    assert (message in captured.out) is expected_in_output
    assert "reachability_monitor.test" in captured.out

@pytest.mark.parametrize("log_timing", [True, False])
def test_timing_filter(capsys, log_timing):
    """TIMING records only appear when explicitly enabled"""
    setup_logging(level=logging.DEBUG, log_timing=log_timing)

    get_logger("test").timing("Timing | probe() [   12.0 ms]")

    captured = capsys.readouterr()
    assert ("Timing | probe()" in captured.out) is log_timing

def test_short_level_names(capsys):
    setup_logging(level=logging.DEBUG, log_timing=False)

    get_logger("test").warning("careful")

    assert "⚠️" in capsys.readouterr().out


# ====================
# TEST GROUP: Log Sinks
# ====================
def test_std_sink_routes_by_tag(caplog):
    sink = StdLogSink()
    cause = TimeoutError("slow")

    with caplog.at_level(logging.DEBUG, logger="reachability_monitor"):
        sink.debug("probe_loop", "debug line")
        sink.info("monitor", "info line")
        sink.error("monitor", "error line", cause)

    names = [record.name for record in caplog.records]
    assert names == [
        "reachability_monitor.probe_loop",
        "reachability_monitor.monitor",
        "reachability_monitor.monitor",
    ]
    assert caplog.records[-1].exc_info[1] is cause

def test_null_sink_is_silent(caplog):
    sink = NullLogSink()

    with caplog.at_level(logging.DEBUG):
        sink.debug("t", "m")
        sink.info("t", "m")
        sink.warning("t", "m", ValueError())
        sink.error("t", "m", ValueError())

    assert [r for r in caplog.records if r.name == "reachability_monitor.t"] == []

def test_tlog_fixed_columns(caplog):
    with caplog.at_level(logging.INFO, logger="reachability_monitor"):
        tlog(StdLogSink(), "monitor", "🟢", "PROBE LOOP", "STARTED", primary="cycle=1", meta="interval=5.0s")

    message = caplog.records[0].getMessage()
    assert message.startswith("🟢 PROBE LOOP   STARTED")
    assert message.endswith("| interval=5.0s")

def test_guarded_sink_absorbs_failures(caplog):
    """A broken sink is reported via stdlib logging, never raised"""
    inner = RaisingSink()
    sink = GuardedLogSink(inner)

    with caplog.at_level(logging.ERROR, logger="reachability_monitor"):
        sink.debug("monitor", "debug line")
        sink.error("monitor", "error line", TimeoutError("slow"))

    assert inner.calls == 2
    failures = [r for r in caplog.records if r.name == "reachability_monitor.monitor"]
    assert len(failures) == 2
    assert "failed on error: error line" in failures[-1].getMessage()
    assert isinstance(failures[-1].exc_info[1], RuntimeError)

def test_guarded_sink_forwards_records(caplog):
    sink = GuardedLogSink(StdLogSink())

    with caplog.at_level(logging.INFO, logger="reachability_monitor"):
        sink.info("monitor", "info line")

    assert [r.getMessage() for r in caplog.records] == ["info line"]

def test_tlog_survives_raising_sink(caplog):
    with caplog.at_level(logging.ERROR, logger="reachability_monitor"):
        tlog(RaisingSink(), "monitor", "🟢", "PROBE LOOP", "STARTED")

    assert any("PROBE LOOP" in r.getMessage() for r in caplog.records)
