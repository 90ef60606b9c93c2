"""Unit tests for HandlerRegistry."""

import pytest

from errtrap_core.errors import RegistrationError
from errtrap_core.registry import HandlerRegistry, handler_display_name


def default_handler(context, exit_code, command, *args):
    return exit_code


def fix_one(context, exit_code, command, *args):
    return 0


def fix_two(context, exit_code, command, *args):
    return 0


@pytest.fixture
def namespace():
    return {"fix_one": fix_one, "not_callable": "just a string"}


@pytest.fixture
def registry(namespace):
    return HandlerRegistry(default_handler, namespace=namespace)


class TestRegister:
    """Registration rules."""

    def test_register_callable(self, registry):
        ref = registry.register("JSON_FIX", fix_one)

        assert ref.context == "JSON_FIX"
        assert ref.name == "fix_one"
        assert ref.target is fix_one
        assert registry.contains("JSON_FIX")

    def test_register_bare_name_from_namespace(self, registry):
        ref = registry.register("JSON_FIX", "fix_one")

        assert ref.late_bound
        assert registry.lookup(ref.target) is fix_one

    def test_empty_context_rejected(self, registry):
        with pytest.raises(RegistrationError) as exc_info:
            registry.register("", fix_one)

        assert exc_info.value.code == "EMPTY_KEY"
        assert len(registry) == 0

    @pytest.mark.parametrize("handler", ["", None])
    def test_empty_handler_rejected(self, registry, handler):
        with pytest.raises(RegistrationError) as exc_info:
            registry.register("JSON_FIX", handler)

        assert exc_info.value.code == "EMPTY_KEY"
        assert "JSON_FIX" not in registry

    def test_duplicate_without_force_keeps_original(self, registry):
        registry.register("JSON_FIX", fix_one)

        with pytest.raises(RegistrationError) as exc_info:
            registry.register("JSON_FIX", fix_two)

        assert exc_info.value.code == "DUPLICATE_CONTEXT"
        assert exc_info.value.context == "JSON_FIX"
        assert registry.get("JSON_FIX").target is fix_one

    def test_duplicate_with_force_replaces(self, registry):
        registry.register("JSON_FIX", fix_one)
        registry.register("JSON_FIX", fix_two, force=True)

        assert registry.get("JSON_FIX").target is fix_two

    def test_force_on_new_context(self, registry):
        registry.register("JSON_FIX", fix_two, force=True)

        assert registry.get("JSON_FIX").target is fix_two

    @pytest.mark.parametrize("handler", ["missing_function", "not_callable", 42])
    def test_unresolvable_handler_rejected(self, registry, handler):
        with pytest.raises(RegistrationError) as exc_info:
            registry.register("JSON_FIX", handler)

        assert exc_info.value.code == "UNRESOLVABLE_HANDLER"
        assert "JSON_FIX" not in registry

    def test_failed_forced_registration_keeps_original(self, registry):
        registry.register("JSON_FIX", fix_one)

        with pytest.raises(RegistrationError):
            registry.register("JSON_FIX", "missing_function", force=True)

        assert registry.get("JSON_FIX").target is fix_one

    def test_on_register_callback(self, namespace):
        seen = []
        registry = HandlerRegistry(
            default_handler,
            namespace=namespace,
            on_register=lambda ref, replaced: seen.append((ref.context, replaced)),
        )

        registry.register("A", fix_one)
        registry.register("A", fix_two, force=True)

        assert seen == [("A", False), ("A", True)]

    def test_list_contexts_in_order(self, registry):
        registry.register("B", fix_one)
        registry.register("A", fix_two)

        assert registry.list_contexts() == ["B", "A"]


class TestImportPaths:
    """Import-path handler references."""

    def test_colon_path(self, registry, handler_module):
        ref = registry.register("X", f"{handler_module}:resume")

        assert callable(registry.lookup(ref.target))

    def test_colon_path_nested_attribute(self, registry, handler_module):
        registry.register("X", f"{handler_module}:Fixes.nested")

        assert "X" in registry

    def test_dotted_path(self, registry, handler_module):
        registry.register("X", f"{handler_module}.fatal")

        assert "X" in registry

    def test_missing_module(self, registry):
        with pytest.raises(RegistrationError) as exc_info:
            registry.register("X", "no_such_module_xyz:handler")

        assert exc_info.value.code == "UNRESOLVABLE_HANDLER"

    def test_non_callable_attribute(self, registry, handler_module):
        with pytest.raises(RegistrationError):
            registry.register("X", f"{handler_module}:NOT_CALLABLE")

    def test_relative_path(self, registry):
        with pytest.raises(RegistrationError) as exc_info:
            registry.register("X", ".relative_mod:handler")

        assert exc_info.value.code == "UNRESOLVABLE_HANDLER"
        assert "X" not in registry

    def test_module_failing_at_import(self, registry, tmp_path, monkeypatch):
        (tmp_path / "errtrap_broken_handlers.py").write_text(
            "raise RuntimeError('boom at import')\n"
        )
        monkeypatch.syspath_prepend(str(tmp_path))

        with pytest.raises(RegistrationError) as exc_info:
            registry.register("X", "errtrap_broken_handlers:fix")

        assert exc_info.value.code == "UNRESOLVABLE_HANDLER"
        assert "X" not in registry


class TestResolve:
    """Lookup with default fallback."""

    def test_resolve_registered(self, registry):
        registry.register("JSON_FIX", fix_one)

        assert registry.resolve("JSON_FIX").target is fix_one

    def test_resolve_unknown_falls_back(self, registry):
        ref = registry.resolve("unknown_context")

        assert ref is registry.default
        assert ref.builtin
        assert ref.target is default_handler

    def test_resolve_is_exact_match(self, registry):
        registry.register("JSON_FIX", fix_one)

        assert registry.resolve("json_fix") is registry.default
        assert registry.resolve("JSON") is registry.default


class TestDisplayName:
    def test_function(self):
        assert handler_display_name(fix_one) == "fix_one"

    def test_string(self):
        assert handler_display_name("pkg.mod:func") == "pkg.mod:func"

    def test_callable_instance(self):
        class Repair:
            def __call__(self, *args):
                return 0

        assert handler_display_name(Repair()) == "Repair"
