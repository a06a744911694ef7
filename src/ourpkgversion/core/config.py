"""Configuration resolver with 5-level priority.

Priority (highest to lowest):
1. CLI arguments
2. Environment variables (OURPKGVERSION_*)
3. Project config (<root>/.ourpkgversion.yaml)
4. User config (~/.config/ourpkgversion/config.yaml)
5. Defaults
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from ourpkgversion.core.errors import ConfigError
from ourpkgversion.core.finder import DEFAULT_EXEC_DIRS, KNOWN_FINDERS
from ourpkgversion.core.model import ModeFlags
from ourpkgversion.core.versions import validate_version

ALLOWED_LOGGING_LEVELS = frozenset({"quiet", "normal", "verbose", "debug"})
DEFAULT_LOGGING_LEVEL = "normal"
PROJECT_CONFIG_NAME = ".ourpkgversion.yaml"
ENV_PREFIX = "OURPKGVERSION_"

_TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
_FALSE_STRINGS = frozenset({"0", "false", "no", "off", ""})


@dataclass
class ConfigSource:
    """Represents where a config value came from."""

    value: Any
    source: str  # 'cli' | 'env' | 'project_config' | 'user_config' | 'default'


@dataclass(frozen=True)
class MungeSettings:
    """Everything one run needs, resolved once and never mutated."""

    mode: ModeFlags
    root: Path
    finders: tuple[str, ...] = KNOWN_FINDERS
    exec_dirs: tuple[str, ...] = DEFAULT_EXEC_DIRS
    skip_main_module: bool = False
    main_module: str | None = None
    dist_name: str | None = None
    dry_run: bool = False
    jobs: int = 1
    logging_level: str = DEFAULT_LOGGING_LEVEL
    color: bool = True


class ConfigResolver:
    """Resolve configuration with strict priority.

    Example:
        resolver = ConfigResolver(
            cli_args={'version': '1.02'},
            root=Path('My-Dist'),
        )

        version, source = resolver.resolve('version')
        # version = '1.02', source = 'cli'
    """

    def __init__(
        self,
        cli_args: dict[str, Any] | None = None,
        root: Path | None = None,
        project_config_path: Path | None = None,
        user_config_path: Path | None = None,
        defaults: dict[str, Any] | None = None,
    ) -> None:
        """Initialize config resolver.

        Args:
            cli_args: Arguments from CLI (highest priority); None values are ignored
            root: Distribution root
            project_config_path: Overrides <root>/.ourpkgversion.yaml
            user_config_path: Path to user config file
            defaults: Default values (lowest priority)
        """
        self.cli_args = {k: v for k, v in (cli_args or {}).items() if v is not None}
        self.root = root or Path.cwd()
        self.project_config_path = project_config_path or self.root / PROJECT_CONFIG_NAME
        self.user_config_path = user_config_path or Path.home() / ".config/ourpkgversion/config.yaml"
        self.defaults = self._default_config() if defaults is None else defaults

        self._project_config: dict[str, Any] | None = None
        self._user_config: dict[str, Any] | None = None

    def resolve(self, key: str) -> tuple[Any, str]:
        """Resolve config value with priority.

        Args:
            key: Config key (supports dot notation: 'logging.level')

        Returns:
            (value, source) tuple

        Raises:
            ConfigError: If key not found in any source
        """
        value = self._get_nested(self.cli_args, key)
        if value is not None:
            return value, "cli"

        value = self._from_env(key)
        if value is not None:
            return value, "env"

        value = self._get_nested(self._get_project_config(), key)
        if value is not None:
            return value, "project_config"

        value = self._get_nested(self._get_user_config(), key)
        if value is not None:
            return value, "user_config"

        value = self._get_nested(self.defaults, key)
        if value is not None:
            return value, "default"

        raise ConfigError(f"Config key '{key}' not found in any source")

    def resolve_all(self) -> dict[str, ConfigSource]:
        """Resolve every key that any source provides."""
        keys = set(_flatten_keys(self.defaults))
        keys.update(_flatten_keys(self.cli_args))
        keys.update(_flatten_keys(self._get_project_config()))
        keys.update(_flatten_keys(self._get_user_config()))

        result: dict[str, ConfigSource] = {}
        for key in sorted(keys):
            try:
                value, source = self.resolve(key)
            except ConfigError:
                continue
            result[key] = ConfigSource(value=value, source=source)
        return result

    # -- typed accessors --------------------------------------------------

    def resolve_optional(self, key: str) -> Any | None:
        try:
            value, _src = self.resolve(key)
        except ConfigError as e:
            if "not found in any source" in str(e):
                return None
            raise
        return value

    def resolve_bool(self, key: str) -> bool:
        value = self.resolve_optional(key)
        if value is None:
            return False
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            return value != 0
        if isinstance(value, str):
            norm = value.strip().lower()
            if norm in _TRUE_STRINGS:
                return True
            if norm in _FALSE_STRINGS:
                return False
        raise ConfigError(f"Config key '{key}' must be a bool, got {value!r}")

    def resolve_str(self, key: str) -> str | None:
        value = self.resolve_optional(key)
        if value is None:
            return None
        if isinstance(value, float):
            raise ConfigError(
                f"Config key '{key}' must be a string, got {value!r}",
                "Quote version numbers in YAML: version: \"1.10\"",
            )
        if isinstance(value, bool) or not isinstance(value, (str, int)):
            raise ConfigError(f"Config key '{key}' must be a string, got {type(value).__name__}")
        value = str(value).strip()
        return value or None

    def resolve_list(self, key: str) -> tuple[str, ...]:
        value = self.resolve_optional(key)
        if value is None:
            return ()
        if isinstance(value, str):
            return tuple(part.strip() for part in value.split(",") if part.strip())
        if isinstance(value, (list, tuple)):
            return tuple(str(v) for v in value)
        raise ConfigError(f"Config key '{key}' must be a list, got {type(value).__name__}")

    def resolve_int(self, key: str, default: int = 1) -> int:
        value = self.resolve_optional(key)
        if value is None:
            return default
        if isinstance(value, bool):
            raise ConfigError(f"Config key '{key}' must be an int")
        if isinstance(value, int):
            result = value
        elif isinstance(value, str) and value.strip().isdigit():
            result = int(value.strip())
        else:
            raise ConfigError(f"Config key '{key}' must be an int, got {value!r}")
        if result < 1:
            raise ConfigError(f"Config key '{key}' must be at least 1")
        return result

    def resolve_logging_level(self) -> str:
        """Resolve and validate logging.level (alias: verbosity).

        Raises:
            ConfigError: If the resolved value is invalid.
        """
        value = self.resolve_optional("logging.level")
        if value is None:
            value = self.resolve_optional("verbosity")
        if value is None:
            return DEFAULT_LOGGING_LEVEL
        if not isinstance(value, str):
            raise ConfigError(f"Config key 'logging.level' must be a string, got {type(value).__name__}")

        norm = value.strip().lower()
        if norm not in ALLOWED_LOGGING_LEVELS:
            allowed = ", ".join(sorted(ALLOWED_LOGGING_LEVELS))
            raise ConfigError(f"Invalid 'logging.level': {value!r}. Allowed values: {allowed}")
        return norm

    def resolve_settings(self) -> MungeSettings:
        """Build the immutable settings for one run.

        Raises:
            ConfigError: On a missing or invalid version, or any invalid value
        """
        version = self.resolve_str("version")
        if version is None:
            raise ConfigError(
                "No version to write",
                "Pass --dist-version or set 'version' in .ourpkgversion.yaml",
            )
        validate_version(version)

        mode = ModeFlags(
            version=version,
            is_trial=self.resolve_bool("is_trial"),
            overwrite=self.resolve_bool("overwrite"),
            underscore_eval_version=self.resolve_bool("underscore_eval_version"),
        )

        finders = self.resolve_list("finders") or KNOWN_FINDERS
        unknown = [f for f in finders if f not in KNOWN_FINDERS]
        if unknown:
            allowed = ", ".join(KNOWN_FINDERS)
            raise ConfigError(f"Unknown finder(s): {', '.join(unknown)}", f"Allowed finders: {allowed}")

        return MungeSettings(
            mode=mode,
            root=self.root,
            finders=finders,
            exec_dirs=self.resolve_list("exec_dirs") or DEFAULT_EXEC_DIRS,
            skip_main_module=self.resolve_bool("skip_main_module"),
            main_module=self.resolve_str("main_module"),
            dist_name=self.resolve_str("dist_name"),
            dry_run=self.resolve_bool("dry_run"),
            jobs=self.resolve_int("jobs"),
            logging_level=self.resolve_logging_level(),
            color=self.resolve_bool("logging.color"),
        )

    # -- sources ----------------------------------------------------------

    def _from_env(self, key: str) -> Any | None:
        """Environment variable format: OURPKGVERSION_KEY_NAME.

        Example: OURPKGVERSION_VERSION, OURPKGVERSION_LOGGING_LEVEL
        """
        env_key = f"{ENV_PREFIX}{key.upper().replace('.', '_')}"
        return os.environ.get(env_key)

    def _get_project_config(self) -> dict[str, Any]:
        if self._project_config is None:
            self._project_config = self._load_yaml(self.project_config_path)
        return self._project_config

    def _get_user_config(self) -> dict[str, Any]:
        if self._user_config is None:
            self._user_config = self._load_yaml(self.user_config_path)
        return self._user_config

    def _load_yaml(self, path: Path) -> dict[str, Any]:
        if not path.exists():
            return {}

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load config from {path}: {e}") from e
        return data if isinstance(data, dict) else {}

    def _get_nested(self, data: dict[str, Any], key: str) -> Any | None:
        """Get nested value using dot notation.

        Example:
            data = {'logging': {'level': 'debug'}}
            _get_nested(data, 'logging.level') -> 'debug'
        """
        current: Any = data
        for part in key.split("."):
            if not isinstance(current, dict):
                return None
            current = current.get(part)
            if current is None:
                return None
        return current

    @staticmethod
    def _default_config() -> dict[str, Any]:
        return {
            "is_trial": False,
            "overwrite": False,
            "underscore_eval_version": False,
            "skip_main_module": False,
            "finders": list(KNOWN_FINDERS),
            "exec_dirs": list(DEFAULT_EXEC_DIRS),
            "dry_run": False,
            "jobs": 1,
            "logging": {
                "level": DEFAULT_LOGGING_LEVEL,
                "color": True,
            },
        }


def _flatten_keys(data: dict[str, Any], prefix: str = "") -> set[str]:
    keys: set[str] = set()
    for key, value in data.items():
        key_path = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, dict):
            keys.update(_flatten_keys(value, key_path))
        else:
            keys.add(key_path)
    return keys
