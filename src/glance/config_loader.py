"""Load PreviewConfig from glance.yaml / glance.toml, the environment and CLI.

Precedence, lowest first: config file next to the template, ``--addr``, the
``PORT`` environment variable, the remaining explicit overrides.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path

from glance._errors import ConfigError
from glance.config import CONFIG_FILE_NAMES, PreviewConfig

_KNOWN_KEYS = frozenset({"host", "port", "data", "editor", "debounce_ms"})

PORT_ENV = "PORT"


def load_config(template: str | Path, **overrides: object) -> PreviewConfig:
    """Build a PreviewConfig for *template*.

    Looks for glance.yaml, glance.yml, or glance.toml in the template's
    directory. ``None`` overrides are ignored so CLI defaults don't mask
    file values.

    Raises:
        ConfigError: If the config file or the listen address is malformed.

    """
    template = Path(template)
    merged: dict[str, object] = dict(_read_glance_config(template.resolve().parent))

    addr = overrides.pop("addr", None)
    if addr:
        merged.update(_addr_fields(str(addr)))

    env_addr = os.environ.get(PORT_ENV)
    if env_addr:
        merged.update(_addr_fields(env_addr))

    merged.update({k: v for k, v in overrides.items() if v is not None})
    if "port" in merged:
        merged["port"] = _coerce_port(merged["port"])
    return PreviewConfig(template=template, **merged)


def parse_addr(addr: str) -> tuple[str | None, int]:
    """Split ``host:port`` (or a bare port) into its parts.

    Returns ``(None, port)`` when no host is given.

    Raises:
        ConfigError: If the port is not a valid TCP port.

    """
    host, sep, port = addr.rpartition(":")
    if not sep:
        return None, _coerce_port(addr)
    return (host or None), _coerce_port(port)


def _addr_fields(addr: str) -> dict[str, object]:
    host, port = parse_addr(addr)
    if host is None:
        return {"port": port}
    return {"host": host, "port": port}


def _coerce_port(value: object) -> int:
    try:
        port = int(str(value))
    except ValueError:
        msg = f"invalid port: {value!r}"
        raise ConfigError(msg) from None
    if not 0 <= port <= 65535:
        msg = f"port out of range: {port}"
        raise ConfigError(msg)
    return port


def _read_glance_config(directory: Path) -> dict[str, object]:
    """Read glance config from yaml/toml if present. Returns empty dict otherwise."""
    for name in CONFIG_FILE_NAMES:
        path = directory / name
        if path.is_file():
            if path.suffix == ".toml":
                return _parse_toml(path)
            return _parse_yaml(path)
    return {}


def _parse_yaml(path: Path) -> dict[str, object]:
    import yaml

    try:
        data = yaml.safe_load(path.read_text()) or {}
    except (OSError, yaml.YAMLError) as exc:
        msg = f"could not read {path}: {exc}"
        raise ConfigError(msg) from exc
    return _flatten_glance_section(data, path)


def _parse_toml(path: Path) -> dict[str, object]:
    try:
        data = tomllib.loads(path.read_text())
    except (OSError, tomllib.TOMLDecodeError) as exc:
        msg = f"could not read {path}: {exc}"
        raise ConfigError(msg) from exc
    return _flatten_glance_section(data, path)


def _flatten_glance_section(data: object, path: Path) -> dict[str, object]:
    """Extract glance.* keys and known top-level keys into one mapping."""
    if not isinstance(data, dict):
        msg = f"{path} must contain a mapping"
        raise ConfigError(msg)
    result: dict[str, object] = {}
    for k, v in data.items():
        if k in _KNOWN_KEYS:
            result[k] = v
    section = data.get("glance")
    if isinstance(section, dict):
        for k, v in section.items():
            if k in _KNOWN_KEYS:
                result[k] = v
    return result
