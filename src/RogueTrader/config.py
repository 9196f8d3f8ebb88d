"""Settings loader for RogueTrader."""

from pathlib import Path
from typing import Any, Literal

import tomllib
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from RogueTrader.rules.targets import FIRE_MODES, FireMode


def _toml_settings_source() -> dict[str, Any]:
    """Load settings from config.toml with keys mapped to Settings fields.

    This source has LOWER priority than env/.env so those can override TOML.
    """
    cfg_path = Path("config.toml")
    if not cfg_path.exists():
        return {}
    with cfg_path.open("rb") as f:
        t = tomllib.load(f)
    out: dict[str, Any] = {
        "env": t.get("app", {}).get("env", "dev"),
        # Host roll modes (gmroll/blindroll/selfroll) are normalized by dispatch
        "roll_visibility": t.get("rolls", {}).get("visibility", "public"),
        # [combat].flame_template gates the cone placement step for flame weapons
        "use_flame_template": bool(t.get("combat", {}).get("flame_template", True)),
        # Logging config
        "logging_enabled": t.get("logging", {}).get("enabled", True),
        "logging_level": t.get("logging", {}).get("level", "INFO"),
        "logging_file_path": t.get("logging", {}).get("file_path", "logs/rogue_trader.jsonl"),
        "logging_max_bytes": t.get("logging", {}).get("max_bytes", 5_000_000),
        "logging_backup_count": t.get("logging", {}).get("backup_count", 5),
    }

    log_cfg = t.get("logging", {}) or {}
    overall = out["logging_level"]

    # Per-handler levels: strings INFO|DEBUG|WARNING|ERROR|CRITICAL|NONE
    # Booleans map True->overall level, False->NONE
    def _norm_level(v, default):
        if isinstance(v, str):
            return v.upper()
        if isinstance(v, bool):
            return default if v else "NONE"
        return default

    out["logging_console"] = _norm_level(log_cfg.get("console"), overall)
    out["logging_file"] = _norm_level(log_cfg.get("to_file"), overall)

    # Example TOML:
    # [fire_modes.semi_auto]
    # modifier = 10
    # hit_margin = 2
    # max_hits = "burst"
    fire_cfg = t.get("fire_modes", {}) or {}
    if fire_cfg:
        out["fire_modes"] = {name: dict(v or {}) for name, v in fire_cfg.items()}

    return out


class FireModeConfig(BaseModel):
    modifier: int = 0
    hit_margin: int = Field(default=1, ge=1)
    max_hits: Literal["one", "burst", "full"] = "one"

    model_config = dict(extra="forbid", frozen=True)


class Settings(BaseSettings):
    env: str = Field(default="dev")

    # --- Rolls ---
    roll_visibility: str = "public"
    use_flame_template: bool = True
    # Entries here replace or extend the built-in fire-mode table
    fire_modes: dict[str, FireModeConfig] = Field(default_factory=dict)

    # --- Logging ---
    logging_enabled: bool = True
    logging_level: str = "INFO"
    logging_console: str = "INFO"
    logging_file: str = "NONE"
    logging_file_path: str = "logs/rogue_trader.jsonl"
    logging_max_bytes: int = 5_000_000
    logging_backup_count: int = 5

    model_config = SettingsConfigDict(
        env_prefix="ROGUE_TRADER_",
        case_sensitive=False,
        env_file=".env",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Precedence (highest to lowest):
        # 1) init_settings (explicit overrides in code/tests)
        # 2) dotenv (.env in cwd)
        # 3) env_settings (OS env)
        # 4) TOML (config.toml)
        # 5) file_secret_settings
        return (
            init_settings,
            dotenv_settings,
            env_settings,
            _toml_settings_source,
            file_secret_settings,
        )

    def fire_mode_table(self) -> dict[str, FireMode]:
        table = dict(FIRE_MODES)
        for name, cfg in self.fire_modes.items():
            table[name] = FireMode(cfg.modifier, cfg.hit_margin, cfg.max_hits)
        return table


def load_settings() -> Settings:
    return Settings()
