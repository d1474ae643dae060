"""Audit configuration: built-in defaults plus optional YAML overrides."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import yaml

from . import log
from .errors import ConfigError

# Searched when no --config is given.
DEFAULT_CONFIG_PATHS = (
    Path("/etc/check-broken-packages.yaml"),
)

# Executables here usually ship their own libraries and rpaths that ldd
# cannot see, so their misses are noise.
DEFAULT_BLACKLIST = ("/opt/", "/usr/share/")

DEFAULT_UNIT_GLOBS = (
    "/etc/systemd/system/*.target.*",
    "/etc/systemd/user/*.target.*",
)


@dataclass(frozen=True)
class AuditConfig:
    """Knobs for one audit run."""
    pacman: str = "pacman"
    ldd: str = "ldd"
    patchelf: str = "patchelf"
    blacklist: Tuple[str, ...] = DEFAULT_BLACKLIST
    unit_globs: Tuple[str, ...] = DEFAULT_UNIT_GLOBS
    python_lib_root: str = "/usr/lib"
    python_package: str = "python"
    jobs: int = 0


_STR_KEYS = {"pacman", "ldd", "patchelf", "python_lib_root", "python_package"}
_LIST_KEYS = {"blacklist", "unit_globs"}
_INT_KEYS = {"jobs"}


def _coerce(key, value):
    if key in _STR_KEYS:
        if not isinstance(value, str) or not value:
            raise ConfigError(f"{key}: expected a non-empty string, got {value!r}")
        return value
    if key in _LIST_KEYS:
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ConfigError(f"{key}: expected a list of strings, got {value!r}")
        return tuple(value)
    if key in _INT_KEYS:
        # bool is an int subclass; reject "jobs: yes"
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            raise ConfigError(f"{key}: expected a non-negative integer, got {value!r}")
        return value
    raise ConfigError(f"unknown configuration key: {key}")


def config_from_mapping(data) -> AuditConfig:
    """Build an AuditConfig from a parsed YAML mapping."""
    if data is None:
        return AuditConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"configuration must be a mapping, got {type(data).__name__}")
    overrides = {}
    for key, value in data.items():
        overrides[key] = _coerce(key, value)
    if overrides.get("blacklist") == ():
        log.warning("empty blacklist: bundled-library trees will be audited too")
    return dataclasses.replace(AuditConfig(), **overrides)


def load_config(path: Optional[Path] = None) -> AuditConfig:
    """Load configuration from *path*, or from the first default path present.

    Returns the built-in defaults when no file is given and none of the
    default locations exist.
    """
    if path is None:
        path = next((p for p in DEFAULT_CONFIG_PATHS if p.exists()), None)
        if path is None:
            return AuditConfig()

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"failed to parse {path}: {e}") from e

    try:
        return config_from_mapping(data)
    except ConfigError as e:
        raise ConfigError(f"{path}: {e}") from e
