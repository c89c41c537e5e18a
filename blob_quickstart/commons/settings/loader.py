"""Settings loader with hierarchical configuration support."""

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from blob_quickstart.commons.settings.models import Settings


class SettingsLoader:
    """Loads and merges configuration from multiple sources.

    Configuration precedence (highest to lowest):
    1. Environment variables
    2. Environment-specific config (appsettings.{env}.json)
    3. Base config (appsettings.json)

    The storage connection string is never read from files; it comes from
    the environment variable named by ``storage.connection_string_env``.
    """

    ENV_PREFIX = "BLOB_QUICKSTART__"

    def __init__(
        self,
        config_dir: Path | None = None,
        environment: str | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the settings loader.

        Args:
            config_dir: Directory containing configuration files.
                       Defaults to 'config' in current working directory.
            environment: Environment name (dev, staging, prod).
                        Defaults to BLOB_QUICKSTART__APP__ENVIRONMENT or 'dev'.
            environ: Environment mapping to read. Defaults to os.environ.
        """
        self.environ = os.environ if environ is None else environ
        self.config_dir = config_dir or Path("config")
        self.environment = environment or self.environ.get(
            "BLOB_QUICKSTART__APP__ENVIRONMENT", "dev"
        )

    def load(self) -> Settings:
        """Load settings with proper precedence.

        Returns:
            Fully resolved Settings instance.
        """
        config = self._load_json("appsettings.json")

        env_config = self._load_json(f"appsettings.{self.environment}.json")
        config = self._deep_merge(config, env_config)

        env_overrides = self._load_env_vars()
        config = self._deep_merge(config, env_overrides)

        # Never trust a credential that slipped into a config file
        config.get("storage", {}).pop("connection_string", None)

        settings = Settings(**config)
        connection_string = self.environ.get(settings.storage.connection_string_env)
        if connection_string:
            settings.storage.connection_string = connection_string
        return settings

    def _load_env_vars(self) -> dict[str, Any]:
        """Load environment variables with the BLOB_QUICKSTART__ prefix.

        Parses env vars like BLOB_QUICKSTART__STORAGE__PROVIDER into nested
        dicts: {"storage": {"provider": "value"}}

        Returns:
            Nested dictionary of environment variable overrides.
        """
        result: dict[str, Any] = {}

        for key, value in self.environ.items():
            if not key.upper().startswith(self.ENV_PREFIX):
                continue

            key_path = key[len(self.ENV_PREFIX) :].lower().split("__")

            current = result
            for part in key_path[:-1]:
                if part not in current:
                    current[part] = {}
                current = current[part]

            # Strings are validated against the model field types
            current[key_path[-1]] = value

        return result

    def _load_json(self, filename: str) -> dict[str, Any]:
        """Load JSON config file.

        Args:
            filename: Name of the config file.

        Returns:
            Parsed JSON as dictionary, or empty dict if file doesn't exist.
        """
        path = self.config_dir / filename
        if path.exists():
            with path.open(encoding="utf-8") as f:
                return dict(json.load(f))
        return {}

    def _deep_merge(
        self,
        base: dict[str, Any],
        override: dict[str, Any],
    ) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()
        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result


def load_settings(
    config_dir: Path | None = None,
    environment: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Load a fresh Settings instance.

    Args:
        config_dir: Optional config directory override.
        environment: Optional environment override.
        environ: Optional environment mapping (defaults to os.environ).

    Returns:
        Settings instance.
    """
    return SettingsLoader(
        config_dir=config_dir, environment=environment, environ=environ
    ).load()
