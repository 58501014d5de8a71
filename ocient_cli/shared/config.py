"""Configuration loading for the Ocient CLI suite."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping, MutableMapping

import yaml

from . import paths
from .exceptions import ConfigurationError

DEFAULT_PORT = 443
DEFAULT_TIMEOUT = 30.0
DEFAULT_PAGE_SIZE = 100


@dataclass(frozen=True, slots=True)
class ConnectionSettings:
    """Where and how to reach the remote execute endpoint."""

    host: str
    port: int
    database: str
    username: str
    password: str
    insecure_skip_verify: bool
    timeout: float

    @property
    def base_url(self) -> str:
        return f"https://{self.host}:{self.port}"

    @property
    def execute_url(self) -> str:
        return f"{self.base_url}/v1/execute"

    def with_overrides(self, **changes: Any) -> ConnectionSettings:
        """Return a copy with non-empty overrides applied."""
        applied = {key: value for key, value in changes.items() if value not in (None, "")}
        return replace(self, **applied) if applied else self

    def describe(self) -> dict[str, Any]:
        """Loggable view of the settings; never includes the password."""
        return {
            "host": self.host,
            "port": self.port,
            "database": self.database,
            "insecure_skip_verify": self.insecure_skip_verify,
            "has_username": bool(self.username),
            "has_password": bool(self.password),
        }


@dataclass(frozen=True, slots=True)
class QuerySettings:
    """Frame-building behaviour."""

    strict: bool


@dataclass(frozen=True, slots=True)
class BrowseSettings:
    """Distinct-value browsing behaviour."""

    page_size: int


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Top-level application configuration."""

    source_path: Path
    connection: ConnectionSettings
    query: QuerySettings
    browse: BrowseSettings

    def with_connection(self, **changes: Any) -> AppConfig:
        """Return a copy with connection overrides (e.g. from CLI flags)."""
        return replace(self, connection=self.connection.with_overrides(**changes))


def _default_config() -> dict[str, Any]:
    return {
        "connection": {
            "host": "",
            "port": DEFAULT_PORT,
            "database": "",
            "username": "",
            "password": "",
            "insecure_skip_verify": True,
            "timeout": DEFAULT_TIMEOUT,
        },
        "query": {"strict": False},
        "browse": {"page_size": DEFAULT_PAGE_SIZE},
    }


ENV_OVERRIDE_SPEC: dict[str, tuple[str, type]] = {
    "connection.host": ("OCIENT_HOST", str),
    "connection.port": ("OCIENT_PORT", int),
    "connection.database": ("OCIENT_DATABASE", str),
    "connection.username": ("OCIENT_USERNAME", str),
    "connection.password": ("OCIENT_PASSWORD", str),
    "connection.insecure_skip_verify": ("OCIENT_INSECURE_SKIP_VERIFY", bool),
    "connection.timeout": ("OCIENT_TIMEOUT", float),
    "query.strict": ("OCIENT_CLI_STRICT", bool),
    "browse.page_size": ("OCIENT_CLI_PAGE_SIZE", int),
}


def load_config(
    config_path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> AppConfig:
    """Load configuration from defaults, YAML file, and env overrides."""
    env = dict(os.environ if env is None else env)
    resolved_config_path = _resolve_config_path(config_path, env)
    file_data = _load_yaml(resolved_config_path)
    merged: dict[str, Any] = _deep_merge(_default_config(), file_data)
    merged = _apply_env_overrides(merged, env)
    return _build_config(merged, resolved_config_path)


def _resolve_config_path(config_path: str | Path | None, env: Mapping[str, str]) -> Path:
    if config_path:
        return paths.resolve_path(config_path)
    return paths.default_config_path(env=env)


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Config file at {path} is not valid YAML: {exc}") from exc
        if not isinstance(data, MutableMapping):
            raise ConfigurationError(f"Config file at {path} must define a mapping root object.")
        return dict(data)


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], Mapping) and isinstance(value, Mapping):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _apply_env_overrides(config: dict[str, Any], env: Mapping[str, str]) -> dict[str, Any]:
    config_copy = _deep_merge(config, {})
    for dotted_key, (env_key, expected_type) in ENV_OVERRIDE_SPEC.items():
        if env_key not in env:
            continue
        raw_value = env[env_key]
        try:
            value = _coerce_env_value(raw_value, expected_type)
        except ValueError as exc:
            raise ConfigurationError(
                f"Environment override {env_key} has invalid value '{raw_value}': {exc}"
            ) from exc
        _assign_nested(config_copy, dotted_key.split("."), value)
    return config_copy


def _coerce_env_value(raw: str, expected_type: type) -> Any:
    cleaned = raw.strip()
    if expected_type is bool:
        lowered = cleaned.lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
        raise ValueError("expected boolean (true/false)")
    if expected_type is int:
        return int(cleaned)
    if expected_type is float:
        return float(cleaned)
    # Secrets may legitimately carry surrounding whitespace.
    return raw


def _assign_nested(target: MutableMapping[str, Any], keys: list[str], value: Any) -> None:
    current = target
    for key in keys[:-1]:
        if key not in current or not isinstance(current[key], MutableMapping):
            current[key] = {}
        current = current[key]  # type: ignore[assignment]
    current[keys[-1]] = value


def _build_config(data: Mapping[str, Any], source_path: Path) -> AppConfig:
    try:
        conn_cfg = data["connection"]
        port = int(conn_cfg["port"] or 0) or DEFAULT_PORT
        connection = ConnectionSettings(
            host=str(conn_cfg["host"] or "").strip(),
            port=port,
            database=str(conn_cfg["database"] or ""),
            username=str(conn_cfg["username"] or ""),
            password=str(conn_cfg["password"] or ""),
            insecure_skip_verify=bool(conn_cfg["insecure_skip_verify"]),
            timeout=float(conn_cfg["timeout"]),
        )
        query = QuerySettings(strict=bool(data["query"]["strict"]))
        page_size = int(data["browse"]["page_size"])
    except (KeyError, TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid configuration structure: {exc}") from exc

    if page_size <= 0:
        raise ConfigurationError("browse.page_size must be a positive integer.")

    return AppConfig(
        source_path=source_path,
        connection=connection,
        query=query,
        browse=BrowseSettings(page_size=page_size),
    )
