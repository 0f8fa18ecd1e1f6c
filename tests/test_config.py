import pytest
import yaml

from tradesim.bots import load_strategy_profiles
from tradesim.core import EngineSettings
from tradesim.forex import load_agent_profiles
from tradesim.utils.config import Config


def write_configs(root, main=None, strategies=None):
    config_dir = root / "configs"
    config_dir.mkdir()
    (config_dir / "config.yaml").write_text(yaml.safe_dump(main or {}))
    (config_dir / "strategies.yaml").write_text(yaml.safe_dump(strategies or {}))
    return root


@pytest.fixture(autouse=True)
def clear_sim_env(monkeypatch):
    for key in ("SIM_SEED", "SIM_SPEED", "LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)


def test_dot_notation_get(tmp_path):
    root = write_configs(tmp_path, {"engine": {"seed": 7, "speed": 2.5}, "logging": {"level": "DEBUG"}})
    config = Config(project_root=root)

    assert config.get("engine.seed") == 7
    assert config.get("engine.missing", "fallback") == "fallback"
    assert config.sim_seed == 7
    assert config.sim_speed == 2.5
    assert config.log_level == "DEBUG"


def test_environment_overrides(tmp_path, monkeypatch):
    root = write_configs(tmp_path, {"engine": {"seed": 7, "speed": 1.0}})
    monkeypatch.setenv("SIM_SEED", "99")
    monkeypatch.setenv("SIM_SPEED", "4")
    config = Config(project_root=root)

    assert config.sim_seed == 99
    assert config.sim_speed == 4.0


def test_missing_file_raises(tmp_path):
    (tmp_path / "configs").mkdir()
    with pytest.raises(FileNotFoundError):
        Config(project_root=tmp_path)


def test_non_positive_speed_rejected(tmp_path):
    root = write_configs(tmp_path, {"engine": {"speed": 0}})
    with pytest.raises(ValueError):
        Config(project_root=root).sim_speed


def test_settings_from_config(tmp_path):
    root = write_configs(tmp_path, {"engine": {"seed": None, "speed": 3}})
    settings = EngineSettings.from_config(Config(project_root=root))
    assert settings == EngineSettings(seed=None, speed=3.0)


def test_strategy_overrides(tmp_path):
    root = write_configs(tmp_path, strategies={
        "aggressive-01": {"trade_frequency": 0.9, "preferred_pairs": ["BTC/USDT"]},
        "stablefx-01": {"match_rate": 0.5},
    })
    config = Config(project_root=root)

    profiles = {p.id: p for p in load_strategy_profiles(config)}
    assert profiles["aggressive-01"].trade_frequency == 0.9
    assert profiles["aggressive-01"].preferred_pairs == ("BTC/USDT",)
    assert profiles["balanced-01"].trade_frequency == 0.4

    agent, = load_agent_profiles(config)
    assert agent.match_rate == 0.5


def test_unknown_override_field_rejected(tmp_path):
    root = write_configs(tmp_path, strategies={"balanced-01": {"moonshot": True}})
    with pytest.raises(ValueError):
        load_strategy_profiles(Config(project_root=root))


def test_invalid_override_value_rejected(tmp_path):
    root = write_configs(tmp_path, strategies={"balanced-01": {"risk_tolerance": "reckless"}})
    with pytest.raises(ValueError, match="Unknown risk tolerance"):
        load_strategy_profiles(Config(project_root=root))


def test_engine_settings_reject_bad_speed():
    with pytest.raises(ValueError):
        EngineSettings(speed=-1)
