from __future__ import annotations

from pathlib import Path

import pytest

from ocient_cli.shared import paths
from ocient_cli.shared.config import AppConfig, load_config
from ocient_cli.shared.exceptions import ConfigurationError


def test_load_config_defaults(tmp_path: Path) -> None:
    env = {paths.CONFIG_DIR_ENV: str(tmp_path / "config")}
    cfg = load_config(env=env)
    assert isinstance(cfg, AppConfig)
    assert cfg.source_path == tmp_path / "config" / "config.yaml"
    assert cfg.connection.host == ""
    assert cfg.connection.port == 443
    assert cfg.connection.insecure_skip_verify is True
    assert cfg.connection.timeout == 30.0
    assert cfg.query.strict is False
    assert cfg.browse.page_size == 100


def test_load_config_from_yaml(tmp_path: Path) -> None:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(
        """
        connection:
          host: db.example.com
          port: 4050
          database: analytics
          username: reader
          password: s3cret
          insecure_skip_verify: false
        browse:
          page_size: 25
        """,
        encoding="utf-8",
    )
    cfg = load_config(config_path=cfg_file, env={paths.CONFIG_DIR_ENV: str(tmp_path)})
    assert cfg.connection.host == "db.example.com"
    assert cfg.connection.port == 4050
    assert cfg.connection.database == "analytics"
    assert cfg.connection.insecure_skip_verify is False
    assert cfg.connection.execute_url == "https://db.example.com:4050/v1/execute"
    assert cfg.connection.timeout == 30.0
    assert cfg.browse.page_size == 25


def test_load_config_env_overrides(tmp_path: Path) -> None:
    env = {
        paths.CONFIG_DIR_ENV: str(tmp_path),
        "OCIENT_HOST": "env-host",
        "OCIENT_PORT": "9443",
        "OCIENT_PASSWORD": " padded ",
        "OCIENT_INSECURE_SKIP_VERIFY": "no",
        "OCIENT_TIMEOUT": "2.5",
        "OCIENT_CLI_STRICT": "true",
        "OCIENT_CLI_PAGE_SIZE": "10",
    }
    cfg = load_config(env=env)
    assert cfg.connection.host == "env-host"
    assert cfg.connection.port == 9443
    assert cfg.connection.password == " padded "
    assert cfg.connection.insecure_skip_verify is False
    assert cfg.connection.timeout == 2.5
    assert cfg.query.strict is True
    assert cfg.browse.page_size == 10


def test_zero_port_falls_back_to_default(tmp_path: Path) -> None:
    cfg = load_config(env={paths.CONFIG_DIR_ENV: str(tmp_path), "OCIENT_PORT": "0"})
    assert cfg.connection.port == 443


def test_invalid_env_override_raises_configuration_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="OCIENT_PORT"):
        load_config(env={paths.CONFIG_DIR_ENV: str(tmp_path), "OCIENT_PORT": "abc"})


def test_non_positive_page_size_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="page_size"):
        load_config(env={paths.CONFIG_DIR_ENV: str(tmp_path), "OCIENT_CLI_PAGE_SIZE": "0"})


def test_invalid_yaml_raises_configuration_error(tmp_path: Path) -> None:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text("- just a list", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_config(config_path=cfg_file, env={})


def test_connection_overrides_ignore_empty_values(tmp_path: Path) -> None:
    cfg = load_config(env={paths.CONFIG_DIR_ENV: str(tmp_path), "OCIENT_HOST": "base"})
    updated = cfg.with_connection(host=None, database="other")
    assert updated.connection.host == "base"
    assert updated.connection.database == "other"
    assert cfg.with_connection(host="", database=None) == cfg


def test_describe_never_includes_password(tmp_path: Path) -> None:
    cfg = load_config(env={paths.CONFIG_DIR_ENV: str(tmp_path), "OCIENT_PASSWORD": "hunter2"})
    described = cfg.connection.describe()
    assert "hunter2" not in described.values()
    assert described["has_password"] is True
    assert described["has_username"] is False
