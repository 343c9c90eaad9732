"""Settings management with XDG paths, atomic writes, and precedence resolution.

This module handles the persistent settings of the ``distmatrix`` CLI:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.distmatrix/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_cache_dir`.
* **Global config** -- a single :class:`~distmatrix.models.GlobalConfig`
  JSON file with request defaults, cache settings, and credential sources.
* **Credential resolution** -- :func:`resolve_credential` reads secrets
  from environment variables or files.
* **Precedence resolution** -- :func:`build_configuration` merges explicit
  overrides, environment variables, and the global config into a
  :class:`~distmatrix.models.Configuration`.

Library users never need this module; they construct a
:class:`~distmatrix.models.Configuration` directly.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from distmatrix.exceptions import ConfigError
from distmatrix.models import Configuration, GlobalConfig

_APP_NAME = "distmatrix"
_CONFIG_FILENAME = "config.json"

ENV_API_KEY = "DISTMATRIX_API_KEY"
ENV_CLIENT_ID = "DISTMATRIX_CLIENT_ID"
ENV_PRIVATE_KEY = "DISTMATRIX_PRIVATE_KEY"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/distmatrix/`` (default ``~/.config/distmatrix/``).
    On macOS/Windows: ``~/.distmatrix/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_cache_dir() -> Path:
    """Return the cache directory, creating it if necessary.

    Cached responses can be deleted at any time.

    On Linux/BSD: ``$XDG_CACHE_HOME/distmatrix/`` (default ``~/.cache/distmatrix/``).
    On macOS/Windows: ``~/.distmatrix/cache/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CACHE_HOME", (".cache",)) / _APP_NAME
    else:
        path = _fallback_base_dir() / "cache"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temp file lives next to *path* so that ``os.replace`` is an atomic
    rename on POSIX. On failure the temp file is removed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration.

    Returns:
        The stored :class:`~distmatrix.models.GlobalConfig`, or a default
        instance if no file exists.

    Raises:
        ConfigError: If the file contains invalid JSON or fails validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically."""
    data = config.model_dump(mode="json")
    _atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace

    Raises:
        ConfigError: If the source can't be resolved.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    raise ConfigError(f"Unknown credential source format: {source}")


# --- Precedence resolution ---


def build_configuration(
    overrides: Optional[dict[str, Any]] = None,
    global_config: Optional[GlobalConfig] = None,
) -> Configuration:
    """Assemble a :class:`~distmatrix.models.Configuration`.

    Precedence (high to low):
        1. *overrides* (``None`` values are ignored)
        2. Environment variables (``DISTMATRIX_API_KEY``,
           ``DISTMATRIX_CLIENT_ID``, ``DISTMATRIX_PRIVATE_KEY``)
        3. Global config (request defaults and credential sources)
        4. :class:`~distmatrix.models.Configuration` defaults

    Raises:
        ConfigError: If a configured credential source cannot be resolved.
    """
    settings = global_config or load_global_config()
    values: dict[str, Any] = settings.defaults.model_dump(exclude_none=True)

    credentials = (
        ("google_api_key", settings.api_key_source, ENV_API_KEY),
        ("google_business_api_client_id", settings.client_id_source, ENV_CLIENT_ID),
        ("google_business_api_private_key", settings.private_key_source, ENV_PRIVATE_KEY),
    )
    for name, source, env_var in credentials:
        env_value = os.environ.get(env_var)
        if env_value:
            values[name] = env_value
        elif source:
            values[name] = resolve_credential(source)

    for name, value in (overrides or {}).items():
        if value is not None:
            values[name] = value

    return Configuration(**values)
