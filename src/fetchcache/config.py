"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles persistent configuration for fetchcache:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.fetchcache/`` on macOS and Windows. See :func:`get_config_dir`.
* **Global config** -- A single :class:`~fetchcache.models.GlobalConfig`
  JSON file storing cache and request defaults.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, and the global config into the effective
  configuration.
* **Wiring** -- :func:`build_fetcher` turns a resolved config into a
  ready-to-use :class:`~fetchcache.client.CachingFetcher`.

Config writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) so a crash never leaves a half-written file.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ValidationError

from fetchcache.cache import KeyedFileCache
from fetchcache.client import CachingFetcher
from fetchcache.exceptions import ConfigError
from fetchcache.models import GlobalConfig

_APP_NAME = "fetchcache"
_CONFIG_FILENAME = "config.json"

ENV_CACHE_TTL = "FETCHCACHE_CACHE_TTL"
ENV_CACHE_DIR = "FETCHCACHE_CACHE_DIR"
ENV_TIMEOUT = "FETCHCACHE_TIMEOUT"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform uses XDG Base Directory paths (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/fetchcache/`` (default ``~/.config/fetchcache/``).
    On macOS/Windows: ``~/.fetchcache/``.

    Returns:
        Absolute path to the configuration directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_CONFIG_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".config"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems.
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
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the config directory.

    Returns:
        The deserialised :class:`~fetchcache.models.GlobalConfig`. If the
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


# --- Precedence resolution ---


def _env_number(name: str, kind: type) -> Optional[float]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return None
    try:
        return kind(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc


def _assign(section: BaseModel, field: str, value: object, source: str) -> None:
    """Set *field* on a validating config section, naming *source* on failure."""
    try:
        setattr(section, field, value)
    except ValidationError as exc:
        reason = exc.errors()[0]["msg"]
        raise ConfigError(f"{source} is invalid ({value!r}): {reason}") from exc


def resolve_config(
    cli_ttl: Optional[int] = None,
    cli_timeout: Optional[float] = None,
    cli_cache_dir: Optional[str] = None,
) -> GlobalConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_ttl``, ``cli_timeout``, ``cli_cache_dir``)
        2. Environment variables (``FETCHCACHE_CACHE_TTL``,
           ``FETCHCACHE_TIMEOUT``, ``FETCHCACHE_CACHE_DIR``)
        3. User config (``~/.config/fetchcache/config.json``)
        4. Defaults

    Every override is validated against the model constraints, so a zero
    timeout or a negative TTL is rejected wherever it comes from.

    Raises:
        ConfigError: If the config file is invalid or an override is not
            an acceptable number.
    """
    config = load_global_config()

    env_ttl = _env_number(ENV_CACHE_TTL, int)
    if env_ttl is not None:
        _assign(config.cache, "ttl_seconds", env_ttl, ENV_CACHE_TTL)
    env_timeout = _env_number(ENV_TIMEOUT, float)
    if env_timeout is not None:
        _assign(config.request, "timeout", env_timeout, ENV_TIMEOUT)
    env_dir = os.environ.get(ENV_CACHE_DIR)
    if env_dir:
        config.cache.directory = env_dir

    if cli_ttl is not None:
        _assign(config.cache, "ttl_seconds", cli_ttl, "--ttl")
    if cli_timeout is not None:
        _assign(config.request, "timeout", cli_timeout, "--timeout")
    if cli_cache_dir is not None:
        config.cache.directory = cli_cache_dir

    return config


def build_cache(config: GlobalConfig) -> KeyedFileCache:
    """Create the response cache described by *config*."""
    return KeyedFileCache(
        config.cache.namespace,
        lifespan=config.cache.lifespan,
        directory=config.cache.directory,
    )


def build_fetcher(config: GlobalConfig) -> CachingFetcher:
    """Create a :class:`CachingFetcher` wired from *config*."""
    return CachingFetcher(
        cache=build_cache(config),
        timeout=config.request.timeout,
        headers=config.request.headers,
        verify_ssl=config.request.verify_ssl,
    )
