"""
Configuration helpers for peerstats runs.

The config loader prefers deterministic defaults, then merges user provided JSON
configuration files and environment overrides prefixed with ``PEERSTATS_``.
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from .addrdb.peers import NETWORK_MAGIC


class ConfigError(Exception):
    """Raised when configuration validation fails."""


_PATH_FIELDS = frozenset({"peers_file", "corpus_dir", "timestamps_file", "output_dir", "log_file"})


def _expand_path(value: str) -> Path:
    return Path(os.path.expandvars(os.path.expanduser(value))).resolve()


def _optional_path(value: Path | None) -> str | None:
    return None if value is None else str(value)


@dataclass(slots=True)
class InputConfig:
    peers_file: Path | None = None
    corpus_dir: Path | None = None
    timestamps_file: Path | None = None

    def validate(self) -> None:
        for name in ("peers_file", "corpus_dir", "timestamps_file"):
            value = getattr(self, name)
            if value is None:
                raise ConfigError(f"input.{name} must be set")
            if not isinstance(value, Path):
                raise ConfigError(f"input.{name} must be a Path")


@dataclass(slots=True)
class DecoderConfig:
    networks: tuple[str, ...] = tuple(NETWORK_MAGIC.values())

    def validate(self) -> None:
        if not self.networks:
            raise ConfigError("decoder.networks must name at least one network")
        known = set(NETWORK_MAGIC.values())
        for name in self.networks:
            if name not in known:
                raise ConfigError(f"Unknown network {name!r}")


@dataclass(slots=True)
class OutputConfig:
    output_dir: Path | None = None
    new_table_file: str = "new-table-stats.txt"
    tried_table_file: str = "tried-table-stats.txt"

    def validate(self) -> None:
        if not self.new_table_file or not self.tried_table_file:
            raise ConfigError("Output file names must be set")
        if self.new_table_file == self.tried_table_file:
            raise ConfigError("new_table_file and tried_table_file must differ")


@dataclass(slots=True)
class StatsConfig:
    input: InputConfig = field(default_factory=InputConfig)
    decoder: DecoderConfig = field(default_factory=DecoderConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    log_file: Path | None = None

    def resolve_defaults(self) -> None:
        peers_file = self.input.peers_file
        if peers_file is not None and peers_file.is_dir():
            peers_file = peers_file / "peers.dat"
            self.input.peers_file = peers_file
        if self.output.output_dir is None and peers_file is not None:
            self.output.output_dir = peers_file.parent

    def validate(self) -> None:
        self.input.validate()
        self.decoder.validate()
        self.output.validate()

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        for section, name in (
            ("input", "peers_file"),
            ("input", "corpus_dir"),
            ("input", "timestamps_file"),
            ("output", "output_dir"),
        ):
            data[section][name] = _optional_path(data[section][name])
        data["decoder"]["networks"] = list(self.decoder.networks)
        data["log_file"] = _optional_path(self.log_file)
        return data


def load_config(path: Path | None = None, *, overrides: dict[str, Any] | None = None) -> StatsConfig:
    """Load configuration from disk and environment overrides."""

    def _merge(base: dict[str, Any], extra: dict[str, Any]) -> dict[str, Any]:
        for key, value in extra.items():
            if isinstance(value, dict) and isinstance(base.get(key), dict):
                base[key] = _merge(dict(base[key]), value)
            else:
                base[key] = value
        return base

    cfg_path = path or os.getenv("PEERSTATS_CONFIG")
    base: dict[str, Any] = {}
    if path is not None and not Path(path).exists():
        raise ConfigError(f"Config file {path} does not exist")
    if cfg_path and Path(cfg_path).exists():
        with open(cfg_path, "rb") as fh:
            try:
                base = json.load(fh)
            except json.JSONDecodeError as exc:
                raise ConfigError(f"Invalid JSON in {cfg_path}") from exc
        if not isinstance(base, dict):
            raise ConfigError(f"{cfg_path} must contain a JSON object")

    env_overrides: dict[str, Any] = {}
    prefix = "PEERSTATS_"
    for key, value in os.environ.items():
        if not key.startswith(prefix) or key == "PEERSTATS_CONFIG":
            continue
        trimmed = key[len(prefix) :]
        parts = trimmed.lower().split("__")
        target = env_overrides
        for part in parts[:-1]:
            target = target.setdefault(part, {})
        target[parts[-1]] = value

    if overrides:
        env_overrides = _merge(env_overrides, overrides)

    merged = _merge(base, env_overrides)
    config = StatsConfig()
    _apply_dict(config, merged)
    config.resolve_defaults()
    config.validate()
    return config


def _apply_dict(obj: Any, data: dict[str, Any]) -> None:
    for key, value in data.items():
        if not hasattr(obj, key):
            raise ConfigError(f"Unknown config field {key}")
        current = getattr(obj, key)
        if isinstance(current, (InputConfig, DecoderConfig, OutputConfig)):
            if not isinstance(value, dict):
                raise ConfigError(f"{key} must be a mapping")
            _apply_dict(current, value)
        elif value is None:
            setattr(obj, key, None)
        elif key in _PATH_FIELDS:
            if not isinstance(value, (str, os.PathLike)):
                raise ConfigError(f"{key} must be a path")
            setattr(obj, key, _expand_path(str(value)))
        else:
            setattr(obj, key, _coerce_value(current, value))


def _coerce_value(current: Any, value: Any) -> Any:
    if isinstance(current, str):
        return str(value)
    if isinstance(current, tuple):
        if isinstance(value, str):
            items = [item.strip() for item in value.split(",") if item.strip()]
        else:
            items = list(value)
        return tuple(items)
    return value
