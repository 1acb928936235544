"""YAML configuration loader with environment variable overrides.

# ─── CONFIGURATION HIERARCHY ──────────────────────────────────────────
#
# Layers (later layers override earlier):
#
#   1. config/config.yaml  -- Static defaults checked into the repo
#                            (TTLs per data kind, breaker cooldown)
#   2. .env file           -- Local developer overrides (not committed)
#   3. Environment vars    -- Set at deploy time
#
# Only settings that were explicitly provided through the environment or
# .env override YAML values; pydantic defaults never clobber the YAML file.
# ──────────────────────────────────────────────────────────────────────
"""

from pathlib import Path

import yaml

from src.config.settings import Settings
from src.utils.errors import ConfigurationError


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.
        settings: Pre-built settings; read from the environment when omitted.

    Returns:
        Fully resolved configuration dictionary.

    Raises:
        ConfigurationError: If any TTL or the cooldown is not a positive number.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    settings = settings or Settings()
    defaults = {
        "app": {"env": settings.app_env},
        "backend": {
            "url": settings.backend_url,
            "api_key": settings.backend_api_key,
            "timeout_seconds": settings.backend_timeout_seconds,
        },
        "breaker": {"cooldown_seconds": settings.breaker_cooldown_seconds},
        "cache": {
            "ttl": {
                "list": settings.cache_list_ttl,
                "detail": settings.cache_detail_ttl,
                "static": settings.cache_static_ttl,
            },
        },
        "logging": {"level": settings.log_level},
    }
    env_overrides = _only_set_fields(defaults, settings)

    config: dict = {}
    _deep_merge(config, defaults)
    _deep_merge(config, yaml_config)
    _deep_merge(config, env_overrides)
    _validate(config)
    return config


# Settings field behind each leaf of the defaults tree.
_FIELD_PATHS: dict[tuple[str, ...], str] = {
    ("app", "env"): "app_env",
    ("backend", "url"): "backend_url",
    ("backend", "api_key"): "backend_api_key",
    ("backend", "timeout_seconds"): "backend_timeout_seconds",
    ("breaker", "cooldown_seconds"): "breaker_cooldown_seconds",
    ("cache", "ttl", "list"): "cache_list_ttl",
    ("cache", "ttl", "detail"): "cache_detail_ttl",
    ("cache", "ttl", "static"): "cache_static_ttl",
    ("logging", "level"): "log_level",
}


def _only_set_fields(tree: dict, settings: Settings) -> dict:
    """Keep only leaves whose Settings field was explicitly provided."""
    provided = settings.model_fields_set
    result: dict = {}
    for path, field_name in _FIELD_PATHS.items():
        if field_name not in provided:
            continue
        node = result
        for part in path[:-1]:
            node = node.setdefault(part, {})
        value = tree
        for part in path:
            value = value[part]
        node[path[-1]] = value
    return result


def _validate(config: dict) -> None:
    durations = {f"cache.ttl.{name}": value for name, value in config["cache"]["ttl"].items()}
    for name, value in (config["cache"].get("overrides") or {}).items():
        durations[f"cache.overrides.{name}"] = value
    durations["breaker.cooldown_seconds"] = config["breaker"]["cooldown_seconds"]
    for name, value in durations.items():
        if not isinstance(value, (int, float)) or isinstance(value, bool) or value <= 0:
            raise ConfigurationError(f"{name} must be a positive number of seconds, got {value!r}")


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
