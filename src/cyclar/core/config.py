"""
Configuration loader with environment variable support.

Loads configuration from YAML files with hierarchical overrides:
1. config/default.yaml (base configuration)
2. config/{CYCLAR_ENV}.yaml (environment-specific)
3. Environment variables (CYCLAR_*)
"""

import os
from pathlib import Path
from typing import Any

import yaml


class Config:
    """
    Hierarchical configuration loader.

    Load order (later overrides earlier):
    1. default.yaml
    2. {CYCLAR_ENV}.yaml (development, production, etc.)
    3. Environment variables (CYCLAR_*)

    Usage:
        config = Config()
        interval = config.get('live.interval', 4)
        # or
        interval = config['live']['interval']
    """

    ENV_PREFIX = "CYCLAR_"

    def __init__(self, config_dir: Path | None = None):
        """
        Initialize configuration loader.

        Args:
            config_dir: Path to configuration directory. Defaults to project config/
        """
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent.parent / "config"
        self.config_dir = Path(config_dir)
        self.env = os.getenv("CYCLAR_ENV", "development")
        self._config = self._load_config()

    def _load_config(self) -> dict[str, Any]:
        """Load and merge configuration files."""
        config: dict[str, Any] = {}

        default_path = self.config_dir / "default.yaml"
        if default_path.exists():
            with open(default_path, encoding="utf-8") as f:
                config = yaml.safe_load(f) or {}

        env_path = self.config_dir / f"{self.env}.yaml"
        if env_path.exists():
            with open(env_path, encoding="utf-8") as f:
                env_config = yaml.safe_load(f) or {}
                config = self._deep_merge(config, env_config)

        config = self._apply_env_overrides(config)

        return config

    def _deep_merge(self, base: dict, override: dict) -> dict:
        """Deep merge two dictionaries."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    def _apply_env_overrides(self, config: dict) -> dict:
        """
        Apply CYCLAR_* environment variables.

        Example: CYCLAR_LIVE_INTERVAL=2 -> config['live']['interval'] = 2
                 CYCLAR_LIVE_STEP_LIMIT=3 -> config['live']['step_limit'] = 3
        """
        for key, value in os.environ.items():
            if key.startswith(self.ENV_PREFIX) and key != "CYCLAR_ENV":
                parts = key[len(self.ENV_PREFIX) :].lower().split("_")
                path = self._resolve_path(config, parts)
                self._set_nested(config, path, self._parse_value(value))
        return config

    def _resolve_path(self, config: dict, parts: list[str]) -> list[str]:
        """
        Group underscore-separated parts into existing keys where possible.

        Keys that already exist in the config win over a deeper split, so
        'directions_api_key_env' maps onto directions.api_key_env.
        """
        path: list[str] = []
        node: Any = config
        i = 0
        while i < len(parts):
            match = None
            if isinstance(node, dict):
                for j in range(len(parts), i, -1):
                    candidate = "_".join(parts[i:j])
                    if candidate in node:
                        match = (candidate, j)
                        break
            if match is None:
                path.append(parts[i])
                node = None
                i += 1
            else:
                path.append(match[0])
                node = node[match[0]]
                i = match[1]
        return path

    def _set_nested(self, d: dict, keys: list, value: Any) -> None:
        """Set a nested dictionary value."""
        for key in keys[:-1]:
            if not isinstance(d.get(key), dict):
                d[key] = {}
            d = d[key]
        d[keys[-1]] = value

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        if value.lower() in ("true", "false"):
            return value.lower() == "true"
        if value.lower() in ("null", "none"):
            return None
        try:
            return int(value)
        except ValueError:
            pass
        try:
            return float(value)
        except ValueError:
            pass
        return value

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key: Dot-separated path like 'live.interval' or 'device.url'
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key.split(".")
        value: Any = self._config
        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default
            if value is None:
                return default
        return value

    def __getitem__(self, key: str) -> Any:
        """Get top-level configuration section."""
        return self._config.get(key) or {}

    @property
    def as_dict(self) -> dict[str, Any]:
        """Return configuration as dictionary."""
        return self._config.copy()

    def reload(self) -> None:
        """Reload configuration from files."""
        self._config = self._load_config()
