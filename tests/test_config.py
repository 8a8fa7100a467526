import dataclasses

import pytest

from conftest import ScriptedProbe
from reachability_monitor.config import Config, MonitorConfiguration
from reachability_monitor.errors import DEFAULT_NETWORK_ERROR_TYPES


# ==================================
# TEST GROUP: Monitor Configuration
# ==================================
def test_defaults():
    probe = ScriptedProbe(True)
    config = MonitorConfiguration(probe=probe)

    assert config.interval_s == 5.0
    assert config.log_sink is None
    assert config.owns_probe is True
    assert config.network_error_types == DEFAULT_NETWORK_ERROR_TYPES

@pytest.mark.parametrize("interval_s", [0, -1, -0.5])
def test_interval_must_be_positive(interval_s):
    with pytest.raises(ValueError, match="interval_s"):
        MonitorConfiguration(probe=ScriptedProbe(True), interval_s=interval_s)

def test_configuration_is_immutable():
    config = MonitorConfiguration(probe=ScriptedProbe(True))

    with pytest.raises(dataclasses.FrozenInstanceError):
        config.interval_s = 1.0

def test_from_config_uses_environment_settings(monkeypatch):
    monkeypatch.setattr(Config, "PROBE_INTERVAL_S", 12.5)

    config = MonitorConfiguration.from_config(ScriptedProbe(True))

    assert config.interval_s == 12.5


# ============================
# TEST GROUP: Environment Config
# ============================
def test_config_defaults_are_sane():
    assert Config.PROBE_STRATEGY in ("socket", "http")
    assert Config.PROBE_INTERVAL_S > 0
    assert Config.PROBE_TIMEOUT_S > 0
    assert isinstance(Config.TARGET_PORT, int)
