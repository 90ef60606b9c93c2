"""Handler registry - context name to repair handler mapping."""

from .registry import HandlerRegistry, handler_display_name
from .types import Handler, HandlerRef

__all__ = ["HandlerRegistry", "HandlerRef", "Handler", "handler_display_name"]
