from __future__ import annotations

from pathlib import Path

from ocient_cli.shared import paths


def test_get_config_dir_uses_env_override(tmp_path: Path) -> None:
    env = {paths.CONFIG_DIR_ENV: str(tmp_path / "config")}
    result = paths.get_config_dir(create=True, env=env)
    assert result == tmp_path / "config"
    assert result.exists()


def test_default_config_path_uses_file_override(tmp_path: Path) -> None:
    cfg_path = tmp_path / "nested" / "custom.yaml"
    env = {paths.CONFIG_FILE_ENV: str(cfg_path)}
    resolved = paths.default_config_path(create_parents=True, env=env)
    assert resolved == cfg_path
    assert resolved.parent.exists()


def test_default_config_path_lives_in_config_dir(tmp_path: Path) -> None:
    env = {paths.CONFIG_DIR_ENV: str(tmp_path)}
    assert paths.default_config_path(env=env) == tmp_path / "config.yaml"


def test_resolve_path_expands_user(tmp_path: Path, monkeypatch) -> None:
    fake_home = tmp_path / "home"
    fake_home.mkdir()
    monkeypatch.setenv("HOME", str(fake_home))
    result = paths.resolve_path("~/file.txt")
    assert result == fake_home / "file.txt"


def test_explicit_empty_env_ignores_process_environment(tmp_path: Path, monkeypatch) -> None:
    fake_home = tmp_path / "home"
    fake_home.mkdir()
    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setenv(paths.CONFIG_DIR_ENV, str(tmp_path / "from-process"))

    assert paths.get_config_dir(env={}) == fake_home / ".ocient-cli"
    assert paths.default_config_path(env={}) == fake_home / ".ocient-cli" / "config.yaml"
    assert paths.get_config_dir() == tmp_path / "from-process"


def test_config_file_override_wins_over_directory(tmp_path: Path) -> None:
    env = {
        paths.CONFIG_DIR_ENV: str(tmp_path / "dir"),
        paths.CONFIG_FILE_ENV: str(tmp_path / "elsewhere.yaml"),
    }
    assert paths.default_config_path(env=env) == tmp_path / "elsewhere.yaml"
