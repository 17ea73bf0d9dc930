import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

CONFIG_ENV_VAR = "BROADCASTER_CONFIG"


class ServerConfig(BaseModel):
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8080, ge=1, le=65535)


class LoggingConfig(BaseModel):
    level: str = Field(default="info")
    json_format: bool = Field(default=False, alias="json")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("level")
    @classmethod
    def _validate_level(cls, value: str) -> str:
        allowed = {"debug", "info", "warning", "error"}
        value_lower = value.lower()
        if value_lower not in allowed:
            raise ValueError(f"Unsupported logging level '{value}'. Allowed: {sorted(allowed)}")
        return value_lower


class SourceConfig(BaseModel):
    kind: str = Field(default="ticker")
    interval_sec: float = Field(default=1.0, gt=0)
    limit: int | None = Field(default=None, ge=1)

    @field_validator("kind")
    @classmethod
    def _validate_kind(cls, value: str) -> str:
        allowed = {"ticker"}
        if value not in allowed:
            raise ValueError(f"Unsupported source kind '{value}'. Allowed: {sorted(allowed)}")
        return value


class AppConfig(BaseModel):
    schema_version: int = Field(default=1, alias="schemaVersion")
    server: ServerConfig = ServerConfig()
    logging: LoggingConfig = LoggingConfig()
    source: SourceConfig = SourceConfig()

    model_config = ConfigDict(populate_by_name=True)


def _load_yaml(path: Path) -> dict[str, object]:
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")
    with path.open("r", encoding="utf-8") as stream:
        data = yaml.safe_load(stream) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration root must be a mapping: {path}")
    return data


def load_app_config(path: Path) -> AppConfig:
    raw = _load_yaml(path)
    return AppConfig.model_validate(raw)


# Global config instance
_config: AppConfig | None = None


def get_config() -> AppConfig:
    """Get global config instance, loading it from $BROADCASTER_CONFIG when set."""
    global _config
    if _config is None:
        config_path = os.getenv(CONFIG_ENV_VAR)
        _config = load_app_config(Path(config_path)) if config_path else AppConfig()
    return _config


def set_config(config: AppConfig | None) -> None:
    """Set global config instance"""
    global _config
    _config = config
