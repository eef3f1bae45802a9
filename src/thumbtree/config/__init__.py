"""Configuration management for thumbtree."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import CLIOptions, GenerationOptions, LoggingSettings, ThumbtreeConfig
from .resolver import ENV_PREFIX, flatten_for_env, resolve_with_precedence

DEFAULT_CONFIG_PATH = Path("~/.thumbtree/config.yaml")
_HEADER_LINES = (
    "# thumbtree configuration file",
    "# Change values with `thumbtree config set KEY --value VALUE` or `thumbtree config edit`.",
    "# Environment variables named THUMBTREE__SECTION__KEY override this file.",
)


class ConfigManager:
    """YAML-backed settings store layered under environment and CLI overrides.

    The file holds only the keys a user chose to persist; missing keys fall back
    to the model defaults when the layers are resolved.
    """

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._path = Path(config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._environ = os.environ if env is None else env

    @property
    def config_path(self) -> Path:
        """Location of the YAML file after ``~`` expansion."""
        return self._path

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        ensure_file: bool = True,
        env_overrides: Mapping[str, str] | None = None,
    ) -> ThumbtreeConfig:
        """Return the effective configuration after applying every layer.

        Args:
            cli_overrides: Dotted-key overrides taken from command-line options.
            include_env: Whether ``THUMBTREE__`` variables participate.
            ensure_file: Create the file with defaults when it does not exist yet.
            env_overrides: Explicit environment mapping used instead of ``os.environ``.

        Returns:
            ThumbtreeConfig: Validated configuration.

        Raises:
            ConfigError: If the file or any override layer is invalid.
        """
        if ensure_file:
            self.ensure_exists()

        env_layer: dict[str, Any] = {}
        if include_env:
            source = self._environ if env_overrides is None else env_overrides
            env_layer = _env_layer(source)

        return resolve_with_precedence(
            defaults=ThumbtreeConfig(),
            file_overrides=self._parse(),
            env_overrides=env_layer or None,
            cli_overrides=cli_overrides,
        )

    def load_file_overrides(self) -> dict[str, Any]:
        """Return the mapping stored in the YAML file, or ``{}`` when absent."""
        return self._parse()

    def save(self, config: ThumbtreeConfig | Mapping[str, Any]) -> None:
        """Overwrite the file with ``config`` (a model or a raw override mapping)."""
        if isinstance(config, ThumbtreeConfig):
            self._dump(config.model_dump(mode="python"))
        else:
            self._dump(dict(config))

    def ensure_exists(self) -> Path:
        """Write the default configuration unless the file is already present."""
        if not self._path.exists():
            self._dump(ThumbtreeConfig().model_dump(mode="python"))
        return self._path

    def read_text(self) -> str:
        """Return the raw file contents (empty when the file is missing)."""
        try:
            return self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ""

    def _parse(self) -> dict[str, Any]:
        text = self.read_text()
        try:
            data = yaml.safe_load(text) if text else None
        except yaml.YAMLError as exc:
            raise ConfigError(f"Cannot parse {self._path}: {exc}") from exc

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"{self._path} must contain a mapping at the top level.")
        return data

    def _dump(self, data: Mapping[str, Any]) -> None:
        stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        lines = [*_HEADER_LINES, f"# Last updated: {stamp}"]
        document = "\n".join(lines) + "\n" + yaml.safe_dump(dict(data), sort_keys=False)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(document, encoding="utf-8")


def _env_layer(environ: Mapping[str, str]) -> dict[str, Any]:
    """Translate ``THUMBTREE__SECTION__KEY`` variables into dotted overrides.

    Values are parsed as YAML so lists and numbers survive the round trip;
    anything that does not parse is kept as the raw string.
    """
    layer: dict[str, Any] = {}
    for name, raw in environ.items():
        suffix = name[len(ENV_PREFIX) :] if name.startswith(ENV_PREFIX) else ""
        if not suffix:
            continue
        dotted = suffix.lower().replace("__", ".")
        try:
            layer[dotted] = yaml.safe_load(raw)
        except yaml.YAMLError:
            layer[dotted] = raw
    return layer


__all__ = [
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "ThumbtreeConfig",
    "GenerationOptions",
    "LoggingSettings",
    "CLIOptions",
    "resolve_with_precedence",
    "flatten_for_env",
    "ConfigError",
]
