"""errtrap configuration loader."""

import os
import re
import typing
from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml

from errtrap_core.errors import create_error
from errtrap_core.types import LogFormat, LogLevel, ValidationIssue, ValidationResult

from .models import EngineConfig, ErrtrapConfig, LoggingConfig

CONFIG_PATH_ENV = "ERRTRAP_CONFIG_PATH"


def resolve_env_vars(value: str) -> str:
    """Resolve environment variable references in string.

    Supports:
    - ${VAR} - Required, error if not set
    - ${VAR:-default} - With default value
    - ${VAR:?error message} - Required with custom error

    Args:
        value: String with potential env var references

    Returns:
        String with env vars resolved

    Raises:
        ConfigError: If a required variable is not set
    """
    pattern = r"\$\{([^}:]+)(?::([?-])([^}]*))?\}"

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        operator = match.group(2)  # '-' or '?' or None
        operand = match.group(3)

        env_value = os.environ.get(var_name)
        if env_value is not None:
            return env_value

        if operator == "-":
            return operand or ""
        if operator == "?":
            error_msg = operand or f"Required environment variable {var_name} not set"
            raise create_error("CONFIG_INVALID", detail=error_msg)
        raise create_error(
            "CONFIG_INVALID",
            detail=f"Required environment variable {var_name} not set",
        )

    return re.sub(pattern, replacer, value)


def _resolve_env_vars_recursive(data: Any) -> Any:
    if isinstance(data, dict):
        return {k: _resolve_env_vars_recursive(v) for k, v in data.items()}
    if isinstance(data, list):
        return [_resolve_env_vars_recursive(item) for item in data]
    if isinstance(data, str):
        return resolve_env_vars(data)
    return data


def _coerce_bool(value: Any) -> Any:
    """Accept the usual string spellings produced by env var substitution."""
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "yes", "1", "on"):
            return True
        if lowered in ("false", "no", "0", "off"):
            return False
    return value


def _coerce_int(value: Any) -> Any:
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return value


class ConfigLoader:
    """Load and validate errtrap configuration."""

    _SECTIONS = {"engine": EngineConfig, "logging": LoggingConfig}

    def __init__(self) -> None:
        self._config: ErrtrapConfig | None = None
        self._config_path: Path | None = None

    @property
    def config_path(self) -> Path | None:
        """Path of the last loaded file, if any."""
        return self._config_path

    def load(self, path: str | Path | None = None, use_defaults: bool = True) -> ErrtrapConfig:
        """Load configuration from file.

        Resolution order if path not specified:
        1. ERRTRAP_CONFIG_PATH environment variable
        2. ./errtrap.yaml
        3. ~/.errtrap/config.yaml
        4. If use_defaults=True and no file found, use default configuration

        Args:
            path: Optional path to config file
            use_defaults: If True, use default config when no file found

        Returns:
            Loaded ErrtrapConfig instance

        Raises:
            ConfigError: If file not found (when use_defaults=False) or invalid
        """
        if path is None:
            path = self._resolve_config_path()

        config_path = Path(path)

        if not config_path.exists():
            if use_defaults:
                return self.load_defaults()
            raise create_error(
                "CONFIG_INVALID",
                detail=f"Configuration file not found: {config_path}",
            )

        try:
            with config_path.open() as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise create_error(
                "CONFIG_INVALID",
                detail=f"Invalid YAML in config file: {e}",
            ) from e

        if not isinstance(data, dict):
            raise create_error("CONFIG_INVALID", detail="Configuration must be a mapping")

        data = _resolve_env_vars_recursive(data)
        return self.load_from_dict(data, config_path)

    def load_defaults(self) -> ErrtrapConfig:
        """Load default configuration without a file."""
        return self.load_from_dict({})

    def load_from_dict(self, data: dict[str, Any], config_path: Path | None = None) -> ErrtrapConfig:
        """Load configuration from dictionary.

        Args:
            data: Configuration dictionary
            config_path: Optional path to config file (for tracking)

        Returns:
            Loaded ErrtrapConfig instance

        Raises:
            ConfigError: If configuration is invalid
        """
        data = self._normalize(data)
        validation = self.validate(data)
        if not validation.valid:
            error_messages = [f"- {line}" for line in validation.messages()]
            raise create_error(
                "CONFIG_INVALID",
                detail="Configuration validation failed:\n" + "\n".join(error_messages),
            )

        config = self._dict_to_config(data)
        self._config = config
        self._config_path = config_path
        return config

    def validate(self, data: dict[str, Any]) -> ValidationResult:
        """Validate config data without loading.

        Args:
            data: Configuration dictionary

        Returns:
            ValidationResult with errors and warnings
        """
        errors: list[ValidationIssue] = []
        warnings: list[ValidationIssue] = []

        for key in data:
            if key not in self._SECTIONS:
                warnings.append(
                    ValidationIssue(
                        path=key,
                        message=f"Unknown configuration key: {key}",
                        severity="warning",
                    )
                )

        for section in self._SECTIONS:
            if section in data and not isinstance(data[section], dict):
                errors.append(ValidationIssue(path=section, message=f"{section} must be a dictionary"))

        engine = data.get("engine")
        if isinstance(engine, dict):
            sentinel = engine.get("sentinel_context")
            if sentinel is not None and (not isinstance(sentinel, str) or not sentinel):
                errors.append(
                    ValidationIssue(
                        path="engine.sentinel_context",
                        message="sentinel_context must be a non-empty string",
                    )
                )
            code = engine.get("default_exit_code")
            if code is not None and (isinstance(code, bool) or not isinstance(code, int) or code <= 0):
                errors.append(
                    ValidationIssue(
                        path="engine.default_exit_code",
                        message="default_exit_code must be a positive integer",
                    )
                )
            for flag in ("propagate_capture_failures", "shell"):
                if flag in engine and not isinstance(engine[flag], bool):
                    errors.append(
                        ValidationIssue(path=f"engine.{flag}", message=f"{flag} must be a boolean")
                    )

        logging_data = data.get("logging")
        if isinstance(logging_data, dict):
            level = logging_data.get("level")
            if level is not None and level not in {lv.value for lv in LogLevel}:
                errors.append(
                    ValidationIssue(path="logging.level", message=f"Unknown log level: {level}")
                )
            fmt = logging_data.get("format")
            if fmt is not None and fmt not in {f.value for f in LogFormat}:
                errors.append(
                    ValidationIssue(path="logging.format", message=f"Unknown log format: {fmt}")
                )

        return ValidationResult(valid=True, errors=errors, warnings=warnings)

    def get(self) -> ErrtrapConfig:
        """Get current configuration.

        Raises:
            ConfigError: If configuration not loaded
        """
        if self._config is None:
            raise create_error("CONFIG_INVALID", detail="Configuration not loaded")
        return self._config

    def _resolve_config_path(self) -> Path:
        env_path = os.environ.get(CONFIG_PATH_ENV)
        if env_path:
            return Path(env_path)

        local_path = Path("errtrap.yaml")
        if local_path.exists():
            return local_path

        home_path = Path.home() / ".errtrap" / "config.yaml"
        if home_path.exists():
            return home_path

        # Not found - use local path as default
        return local_path

    def _normalize(self, data: dict[str, Any]) -> dict[str, Any]:
        """Coerce string scalars coming from env var substitution."""
        result = dict(data)
        engine = result.get("engine")
        if isinstance(engine, dict):
            engine = dict(engine)
            for flag in ("propagate_capture_failures", "shell"):
                if flag in engine:
                    engine[flag] = _coerce_bool(engine[flag])
            if "default_exit_code" in engine:
                engine["default_exit_code"] = _coerce_int(engine["default_exit_code"])
            result["engine"] = engine
        logging_data = result.get("logging")
        if isinstance(logging_data, dict):
            logging_data = dict(logging_data)
            for flag in ("enabled", "show_args"):
                if flag in logging_data:
                    logging_data[flag] = _coerce_bool(logging_data[flag])
            if isinstance(logging_data.get("level"), str):
                logging_data["level"] = logging_data["level"].upper()
            result["logging"] = logging_data
        return result

    def _dict_to_config(self, data: dict[str, Any]) -> ErrtrapConfig:
        kwargs: dict[str, Any] = {}
        for name, section_type in self._SECTIONS.items():
            if name in data:
                kwargs[name] = self._convert_section(section_type, data[name])
        return ErrtrapConfig(**kwargs)

    def _convert_section(self, section_type: type, value: dict[str, Any]) -> Any:
        hints = typing.get_type_hints(section_type)
        kwargs = {}
        for f in fields(section_type):
            if f.name not in value:
                continue
            field_type = hints.get(f.name)
            item = value[f.name]
            # Enums are stored as their str value
            if isinstance(field_type, type) and issubclass(field_type, LogLevel | LogFormat):
                item = field_type(item)
            kwargs[f.name] = item
        return section_type(**kwargs)


# Convenience singleton
_default_loader: ConfigLoader | None = None


def get_config_loader() -> ConfigLoader:
    """Get default config loader singleton."""
    global _default_loader  # noqa: PLW0603
    if _default_loader is None:
        _default_loader = ConfigLoader()
    return _default_loader


def load_config(path: str | Path | None = None) -> ErrtrapConfig:
    """Convenience function to load config.

    Args:
        path: Optional path to config file

    Returns:
        Loaded ErrtrapConfig instance
    """
    return get_config_loader().load(path)
