"""Context-to-handler registry."""

import importlib
import logging
import sys
from collections.abc import Callable, Mapping
from typing import Any

from errtrap_core.errors import create_error

from .types import Handler, HandlerRef

logger = logging.getLogger(__name__)


def _main_namespace() -> Mapping[str, Any]:
    main = sys.modules.get("__main__")
    return vars(main) if main is not None else {}


def handler_display_name(handler: Handler | str) -> str:
    """Readable name for a handler reference."""
    if isinstance(handler, str):
        return handler
    name = getattr(handler, "__qualname__", None) or getattr(handler, "__name__", None)
    if name:
        return name
    return type(handler).__name__


class HandlerRegistry:
    """Maps context names to repair handlers.

    Handlers may be given as callables, bare names looked up in a namespace
    (by default the ``__main__`` module globals), or import paths in the form
    ``package.module:function`` or ``package.module.function``.

    Registrations are validated eagerly and are never removed. A context that
    has no registration resolves to the default handler.
    """

    def __init__(
        self,
        default_handler: Handler,
        namespace: Mapping[str, Any] | Callable[[], Mapping[str, Any]] | None = None,
        on_register: Callable[[HandlerRef, bool], None] | None = None,
    ):
        """Initialize the registry.

        Args:
            default_handler: Fallback used for unregistered contexts
            namespace: Mapping (or zero-argument callable returning one) for
                bare-name lookups. Defaults to the ``__main__`` globals.
            on_register: Called with (ref, replaced) after each registration
        """
        self._handlers: dict[str, HandlerRef] = {}
        self._namespace = namespace if namespace is not None else _main_namespace
        self._on_register = on_register
        self.default = HandlerRef(
            context="",
            name=handler_display_name(default_handler),
            target=default_handler,
            builtin=True,
        )

    def register(self, context: str, handler: Handler | str | None, force: bool = False) -> HandlerRef:
        """Register a handler for a context.

        Args:
            context: Context name
            handler: Callable or string reference
            force: Overwrite an existing registration

        Returns:
            The stored HandlerRef

        Raises:
            RegistrationError: EMPTY_KEY, DUPLICATE_CONTEXT or UNRESOLVABLE_HANDLER.
                The registry is left unchanged on failure.
        """
        if not context or handler is None or handler == "":
            raise create_error("EMPTY_KEY", context=context or None)

        existing = self._handlers.get(context)
        if existing is not None and not force:
            raise create_error(
                "DUPLICATE_CONTEXT",
                context=context,
                existing=existing.name,
            )

        name = handler_display_name(handler)
        if self.lookup(handler) is None:
            raise create_error("UNRESOLVABLE_HANDLER", context=context, handler=name)

        ref = HandlerRef(context=context, name=name, target=handler)
        self._handlers[context] = ref
        replaced = existing is not None
        logger.debug("Registered %s -> %s%s", context, name, " (forced)" if replaced else "")
        if self._on_register:
            self._on_register(ref, replaced)
        return ref

    def resolve(self, context: str) -> HandlerRef:
        """Resolve a context to its registration, falling back to the default.

        Never fails. Absence of a registration is the documented fallback path.
        """
        return self._handlers.get(context, self.default)

    def get(self, context: str) -> HandlerRef | None:
        """Get an explicit registration, or None."""
        return self._handlers.get(context)

    def contains(self, context: str) -> bool:
        """Check whether a context has an explicit registration."""
        return context in self._handlers

    def __contains__(self, context: object) -> bool:
        return context in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)

    def list_contexts(self) -> list[str]:
        """List registered contexts in registration order."""
        return list(self._handlers.keys())

    def lookup(self, handler: Handler | str) -> Handler | None:
        """Resolve a handler reference to a callable.

        Args:
            handler: Callable or string reference

        Returns:
            The callable, or None when the reference does not resolve
        """
        if not isinstance(handler, str):
            return handler if callable(handler) else None

        target = self._lookup_name(handler.strip())
        return target if callable(target) else None

    def _lookup_name(self, name: str) -> Any:
        if not name:
            return None

        if ":" in name:
            module_name, _, attr_path = name.partition(":")
            return self._import_attr(module_name, attr_path)

        namespace = self._namespace() if callable(self._namespace) else self._namespace
        if name in namespace:
            return namespace[name]

        if "." in name:
            module_name, _, attr = name.rpartition(".")
            return self._import_attr(module_name, attr)

        return None

    def _import_attr(self, module_name: str, attr_path: str) -> Any:
        if not module_name or not attr_path:
            return None
        try:
            obj: Any = importlib.import_module(module_name)
        except Exception as e:
            # Any import failure makes the reference unresolvable.
            logger.debug("Cannot import handler module %s: %s", module_name, e)
            return None
        for part in attr_path.split("."):
            obj = getattr(obj, part, None)
            if obj is None:
                return None
        return obj
