"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for reqclient:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.reqclient/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single :class:`~reqclient.models.GlobalConfig`
  JSON file storing client defaults and the output format.
* **Project config** -- An optional ``./reqclient.json`` whose ``client``
  section overrides the global defaults for one working directory.
* **Precedence resolution** -- :func:`resolve_client_config` merges CLI
  flags, environment variables, project-local config, and global config into
  the effective :class:`~reqclient.models.ClientConfig`.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from reqclient.exceptions import ConfigError
from reqclient.models import ClientConfig, GlobalConfig

_APP_NAME = "reqclient"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "reqclient.json"

# Environment variable -> ClientConfig field
_ENV_FIELDS = {
    "REQCLIENT_BASE_URL": "base_url",
    "REQCLIENT_TIMEOUT": "timeout",
    "REQCLIENT_RETRY_ATTEMPTS": "retry_attempts",
    "REQCLIENT_RETRY_DELAY": "retry_delay",
}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
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

    On Linux/BSD: ``$XDG_CONFIG_HOME/reqclient/`` (default ``~/.config/reqclient/``).
    On macOS/Windows: ``~/.reqclient/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/reqclient/`` (default ``~/.local/share/reqclient/``).
    On macOS/Windows: ``~/.reqclient/data/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "data"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed and the original exception re-raised.
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
        fd = None  # prevent double-close below
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
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the XDG config directory.

    Returns:
        The deserialised :class:`~reqclient.models.GlobalConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
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
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./reqclient.json``.

    Only the ``client`` section is consulted during resolution; other keys
    are ignored.

    Returns:
        The parsed JSON as a dict, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Precedence resolution ---


def _env_overrides() -> dict[str, Any]:
    """Collect ``REQCLIENT_*`` overrides from the environment."""
    overrides: dict[str, Any] = {}
    for env_var, field_name in _ENV_FIELDS.items():
        value = os.environ.get(env_var)
        if value:
            overrides[field_name] = value
    return overrides


def _layer(target: dict[str, Any], overrides: dict[str, Any]) -> None:
    """Apply *overrides* onto *target*; ``headers`` are merged, not replaced."""
    for key, value in overrides.items():
        if value is None:
            continue
        if key == "headers":
            target["headers"] = {**target.get("headers", {}), **value}
        else:
            target[key] = value


def resolve_client_config(
    cli_base_url: Optional[str] = None,
    cli_headers: Optional[dict[str, str]] = None,
    cli_timeout: Optional[int] = None,
    cli_retry_attempts: Optional[int] = None,
    cli_retry_delay: Optional[int] = None,
) -> ClientConfig:
    """Resolve the effective client configuration.

    Precedence (high to low):
        1. CLI flags (``cli_*`` arguments)
        2. Environment variables (``REQCLIENT_BASE_URL``, ``REQCLIENT_TIMEOUT``,
           ``REQCLIENT_RETRY_ATTEMPTS``, ``REQCLIENT_RETRY_DELAY``)
        3. Project config (``./reqclient.json``, ``client`` section)
        4. User config (``~/.config/reqclient/config.json``)
        5. Defaults

    Headers are merged across every layer instead of being replaced.

    Raises:
        ConfigError: If any layer holds an invalid value (for example a
            non-numeric ``REQCLIENT_TIMEOUT``).
    """
    # 5 + 4. Global config (fills in defaults automatically)
    resolved = load_global_config().client.model_dump()

    # 3. Project-local config
    project = load_project_config()
    if project is not None:
        section = project.get("client") or {}
        if not isinstance(section, dict):
            raise ConfigError("Invalid project config: 'client' must be an object")
        _layer(resolved, section)

    # 2. Environment variables
    _layer(resolved, _env_overrides())

    # 1. CLI flags (highest precedence)
    _layer(
        resolved,
        {
            "base_url": cli_base_url,
            "headers": cli_headers,
            "timeout": cli_timeout,
            "retry_attempts": cli_retry_attempts,
            "retry_delay": cli_retry_delay,
        },
    )

    try:
        return ClientConfig.model_validate(resolved)
    except ValidationError as exc:
        raise ConfigError(f"Invalid client configuration: {exc}") from exc
