import pytest
from pydantic import ValidationError

from async_broadcaster.config import AppConfig, CONFIG_ENV_VAR, get_config, load_app_config


def test_defaults():
    config = AppConfig()

    assert config.schema_version == 1
    assert config.server.port == 8080
    assert config.logging.level == "info"
    assert config.logging.json_format is False
    assert config.source.kind == "ticker"
    assert config.source.limit is None


def test_load_from_yaml(tmp_path):
    path = tmp_path / "broadcaster.yaml"
    path.write_text(
        "schemaVersion: 2\n"
        "server:\n"
        "  port: 9000\n"
        "logging:\n"
        "  level: DEBUG\n"
        "  json: true\n"
        "source:\n"
        "  interval_sec: 0.5\n"
        "  limit: 10\n",
        encoding="utf-8",
    )

    config = load_app_config(path)

    assert config.schema_version == 2
    assert config.server.port == 9000
    assert config.logging.level == "debug"
    assert config.logging.json_format is True
    assert config.source.interval_sec == 0.5
    assert config.source.limit == 10


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_app_config(tmp_path / "missing.yaml")


def test_root_must_be_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_app_config(path)


@pytest.mark.parametrize(
    "raw",
    [
        {"logging": {"level": "verbose"}},
        {"source": {"kind": "kafka"}},
        {"source": {"interval_sec": 0}},
        {"server": {"port": 0}},
    ],
)
def test_invalid_values_rejected(raw):
    with pytest.raises(ValidationError):
        AppConfig.model_validate(raw)


def test_get_config_reads_env(tmp_path, monkeypatch):
    path = tmp_path / "env.yaml"
    path.write_text("server:\n  port: 7001\n", encoding="utf-8")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))

    assert get_config().server.port == 7001
    assert get_config() is get_config()


def test_get_config_without_env(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)

    assert get_config() == AppConfig()
