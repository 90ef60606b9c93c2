"""errtrap configuration data models."""

from dataclasses import dataclass, field

from errtrap_core.types import LogFormat, LogLevel

SENTINEL_CONTEXT = "DEFAULT"


@dataclass
class EngineConfig:
    """Dispatch engine configuration."""

    sentinel_context: str = SENTINEL_CONTEXT
    default_exit_code: int = 1
    # Whether capture() failures are intercepted automatically. When False,
    # callers must raise_() after a failed capture themselves.
    propagate_capture_failures: bool = True
    shell: bool = True  # run()/capture() commands go through the shell


@dataclass
class LoggingConfig:
    """Event logging configuration."""

    enabled: bool = True
    level: LogLevel = LogLevel.WARN
    format: LogFormat = LogFormat.COLORED
    show_args: bool = True
    truncate_at: int = 200


@dataclass
class ErrtrapConfig:
    """Top-level configuration."""

    engine: EngineConfig = field(default_factory=EngineConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
