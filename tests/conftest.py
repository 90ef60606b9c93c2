"""
Pytest configuration and shared fixtures for errtrap tests.
"""

import sys
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from errtrap_core.config import ErrtrapConfig, LoggingConfig  # noqa: E402
from errtrap_core.engine import TrapEngine, set_engine  # noqa: E402


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def handler_namespace() -> dict[str, Any]:
    """Namespace used to resolve bare handler names."""
    return {}


@pytest.fixture
def quiet_config() -> ErrtrapConfig:
    """Default configuration with event logging switched off."""
    return ErrtrapConfig(logging=LoggingConfig(enabled=False))


@pytest.fixture
def engine(quiet_config: ErrtrapConfig, handler_namespace: dict[str, Any]) -> TrapEngine:
    """A fresh engine. Diagnostics go to sys.stderr so capsys sees them."""
    return TrapEngine(quiet_config, namespace=handler_namespace)


class HandlerSpy:
    """Handler that records each invocation and returns a fixed status."""

    def __init__(self, status: Any = 0, name: str = "spy_handler"):
        self.status = status
        self.calls: list[tuple[Any, ...]] = []
        self.__name__ = name

    def __call__(self, context: str, exit_code: int, failed_command: str, *args: str) -> Any:
        self.calls.append((context, exit_code, failed_command, *args))
        return self.status

    @property
    def last(self) -> tuple[Any, ...]:
        return self.calls[-1]


@pytest.fixture
def make_spy() -> Callable[..., HandlerSpy]:
    """Factory for recording handlers."""
    return HandlerSpy


@pytest.fixture(autouse=True)
def reset_default_engine() -> Generator[None, None, None]:
    """Drop the default engine singleton around each test."""
    set_engine(None)
    yield
    set_engine(None)


@pytest.fixture
def handler_module(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[str, None, None]:
    """An importable module with handlers, returned by module name."""
    module_name = "errtrap_test_handlers"
    (tmp_path / f"{module_name}.py").write_text(
        "calls = []\n"
        "\n"
        "def resume(context, exit_code, command, *args):\n"
        "    calls.append((context, exit_code, command, *args))\n"
        "    return 0\n"
        "\n"
        "def fatal(context, exit_code, command, *args):\n"
        "    return 9\n"
        "\n"
        "class Fixes:\n"
        "    @staticmethod\n"
        "    def nested(context, exit_code, command, *args):\n"
        "        return 0\n"
        "\n"
        "NOT_CALLABLE = 42\n"
    )
    monkeypatch.syspath_prepend(str(tmp_path))
    yield module_name
    sys.modules.pop(module_name, None)


# =============================================================================
# Markers Configuration
# =============================================================================


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "property: Property-based tests")
