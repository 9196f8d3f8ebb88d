# test_config.py
import pytest
from pydantic import ValidationError

from RogueTrader.config import FireModeConfig, Settings, load_settings
from RogueTrader.rules.targets import FIRE_MODES, FireMode


@pytest.fixture
def in_tmp(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for var in ("ROGUE_TRADER_ROLL_VISIBILITY", "ROGUE_TRADER_USE_FLAME_TEMPLATE"):
        monkeypatch.delenv(var, raising=False)
    return tmp_path


def test_defaults_without_config(in_tmp):
    s = load_settings()
    assert s.roll_visibility == "public"
    assert s.use_flame_template is True
    assert s.fire_modes == {}
    assert s.fire_mode_table() == FIRE_MODES


def test_toml_sections_are_mapped(in_tmp):
    (in_tmp / "config.toml").write_text(
        """
[rolls]
visibility = "selfroll"

[combat]
flame_template = false

[logging]
level = "debug"
console = false

[fire_modes.burst_fire]
modifier = 5
hit_margin = 2
max_hits = "burst"
"""
    )
    s = load_settings()
    assert s.roll_visibility == "selfroll"
    assert s.use_flame_template is False
    assert s.logging_level == "debug"
    assert s.logging_console == "NONE"
    table = s.fire_mode_table()
    assert table["burst_fire"] == FireMode(5, 2, "burst")
    assert table["standard"] == FIRE_MODES["standard"]


def test_env_overrides_toml(in_tmp, monkeypatch):
    (in_tmp / "config.toml").write_text('[rolls]\nvisibility = "selfroll"\n')
    monkeypatch.setenv("ROGUE_TRADER_ROLL_VISIBILITY", "gmroll")
    assert load_settings().roll_visibility == "gmroll"


def test_init_overrides_everything(in_tmp, monkeypatch):
    monkeypatch.setenv("ROGUE_TRADER_USE_FLAME_TEMPLATE", "false")
    assert Settings(use_flame_template=True).use_flame_template is True


def test_fire_mode_config_validation():
    with pytest.raises(ValidationError):
        FireModeConfig(hit_margin=0)
    with pytest.raises(ValidationError):
        FireModeConfig(max_hits="double")
