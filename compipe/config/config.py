"""
Configuration loading for the compile driver.

Configuration comes from a YAML file (if any) with environment variable
overrides applied on top, then is validated into an immutable DriverConfig.

Environment Variable Override Format:
    COMPIPE_<SECTION>_<KEY>=value

Examples:
    COMPIPE_LOGGING_LEVEL=debug
    COMPIPE_ARTIFACT_PATH=build/out.wat
    COMPIPE_COMPILER_COMMAND=node,compiler.js
"""

from __future__ import annotations

import copy
import os
import shlex
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

from ..exceptions import ConfigError
from ..log import LogConfig
from ..log.exceptions import InvalidLogLevelError
from .constants import (
    CONFIG_ENV_VAR,
    DEFAULT_ARTIFACT,
    DEFAULT_COMMAND,
    DEFAULT_CONFIG_FILENAME,
    ENV_PREFIX,
    MAX_CONFIG_SIZE_BYTES,
)

_DEFAULTS: dict[str, Any] = {
    "compiler": {"command": list(DEFAULT_COMMAND), "cwd": None},
    "artifact": {"path": DEFAULT_ARTIFACT, "isolate": False},
    "logging": {"level": "warning", "micros": False, "colors": True},
}


def _check_file_size(path: Path) -> None:
    """Reject oversized configuration files."""
    file_size = os.path.getsize(path)
    if file_size > MAX_CONFIG_SIZE_BYTES:
        raise ConfigError(
            f"Configuration file '{path}' is {file_size} bytes, "
            f"exceeding maximum size of {MAX_CONFIG_SIZE_BYTES} bytes",
            path=str(path),
        )


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML mapping from file."""
    try:
        _check_file_size(path)
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(
            f"cannot read config file: {e.strerror}", path=str(path)
        ) from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML: {e}", path=str(path)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("config root must be a mapping", path=str(path))
    return data


def _merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge override into a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _convert_env_value(value: str) -> bool | int | float | str | list | None:
    """
    Convert environment variable string to appropriate type.

    Args:
        value: Environment variable value as string

    Returns:
        Converted value with appropriate type
    """
    if value.lower() in ("null", "none", ""):
        return None

    if value.lower() in ("true", "false"):
        return value.lower() == "true"

    # Comma-separated lists
    if "," in value:
        return [_convert_env_value(v.strip()) for v in value.split(",")]

    try:
        if "." in value:
            return float(value)
        return int(value)
    except ValueError:
        pass

    return value


def collect_env_overrides(
    environ: Mapping[str, str], prefix: str = ENV_PREFIX
) -> dict[str, Any]:
    """
    Build a nested override mapping from prefixed environment variables.

    COMPIPE_LOGGING_LEVEL=debug becomes {"logging": {"level": "debug"}}.
    """
    overrides: dict[str, Any] = {}
    for key, raw in environ.items():
        if not key.startswith(prefix) or key == CONFIG_ENV_VAR:
            continue
        path = key[len(prefix) :].lower().split("_")
        current = overrides
        for part in path[:-1]:
            current = current.setdefault(part, {})
            if not isinstance(current, dict):
                break
        else:
            current[path[-1]] = _convert_env_value(raw)
    return overrides


def find_config_file(
    environ: Mapping[str, str], cwd: Path | None = None
) -> Path | None:
    """
    Locate the configuration file.

    COMPIPE_CONFIG wins; otherwise compipe.yaml in the current directory is
    used when present.
    """
    explicit = environ.get(CONFIG_ENV_VAR)
    if explicit:
        return Path(explicit)
    candidate = (cwd or Path.cwd()) / DEFAULT_CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def _parse_command(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        parts = shlex.split(value)
    elif isinstance(value, (list, tuple)):
        parts = [str(v) for v in value if v is not None]
    else:
        raise ConfigError("compiler.command must be a string or a list", value=value)
    if not parts:
        raise ConfigError("compiler.command must not be empty")
    return tuple(parts)


def _parse_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    raise ConfigError(f"{key} must be a boolean", value=value)


@dataclass(frozen=True)
class DriverConfig:
    """
    Validated driver configuration.

    Attributes:
        command: Compiler command; the input path is appended as last argument
        cwd: Working directory for the compiler (None means current directory)
        artifact: Artifact path, relative to the compiler's working directory
        isolate: Run each invocation in its own temporary directory
        log: Logger configuration
        source: File the configuration was loaded from, if any
    """

    command: tuple[str, ...] = DEFAULT_COMMAND
    cwd: Path | None = None
    artifact: str = DEFAULT_ARTIFACT
    isolate: bool = False
    log: LogConfig = field(default_factory=LogConfig)
    source: Path | None = None

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], source: Path | None = None
    ) -> DriverConfig:
        """
        Validate a configuration mapping (defaults are merged in first).

        Raises:
            ConfigError: If a value has the wrong type or is out of range
        """
        merged = _merge(_DEFAULTS, data)
        for section in ("compiler", "artifact", "logging"):
            if not isinstance(merged[section], dict):
                raise ConfigError(f"'{section}' must be a mapping")

        compiler = merged["compiler"]
        artifact = merged["artifact"]

        path = artifact.get("path")
        if not isinstance(path, str) or not path.strip():
            raise ConfigError("artifact.path must be a non-empty string", value=path)

        cwd = compiler.get("cwd")
        if cwd is not None and not isinstance(cwd, str):
            raise ConfigError("compiler.cwd must be a string", value=cwd)

        try:
            log = LogConfig.from_config(merged, "logging")
        except InvalidLogLevelError as e:
            raise ConfigError(str(e)) from e

        return cls(
            command=_parse_command(compiler.get("command")),
            cwd=Path(cwd) if cwd else None,
            artifact=path,
            isolate=_parse_bool(artifact.get("isolate"), "artifact.isolate"),
            log=log,
            source=source,
        )

    @classmethod
    def load(
        cls,
        path: str | Path | None = None,
        environ: Mapping[str, str] | None = None,
        enable_env_overrides: bool = True,
    ) -> DriverConfig:
        """
        Load configuration from file and environment.

        Args:
            path: Config file; discovered via find_config_file() when None
            environ: Environment mapping (defaults to os.environ)
            enable_env_overrides: Whether to apply COMPIPE_* overrides

        Raises:
            ConfigError: If the file cannot be read or holds invalid values
        """
        if environ is None:
            environ = os.environ

        source = Path(path) if path is not None else find_config_file(environ)
        data = _load_yaml(source) if source is not None else {}

        if enable_env_overrides:
            data = _merge(data, collect_env_overrides(environ))

        return cls.from_dict(data, source=source)
