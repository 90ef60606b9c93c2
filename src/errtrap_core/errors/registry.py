"""Error registry for creating errors from templates."""

from typing import Any

from .errors import (
    ConfigError,
    DispatchError,
    ErrorCategory,
    ErrorTemplate,
    ErrtrapError,
    RaiseError,
    RegistrationError,
    ScriptError,
)

_CATEGORY_CLASSES: dict[ErrorCategory, type[ErrtrapError]] = {
    ErrorCategory.REGISTRATION: RegistrationError,
    ErrorCategory.RAISE: RaiseError,
    ErrorCategory.DISPATCH: DispatchError,
    ErrorCategory.CONFIG: ConfigError,
    ErrorCategory.SCRIPT: ScriptError,
}


class ErrorRegistry:
    """Registry of error templates. Creates errors from templates + context."""

    def __init__(self) -> None:
        """Initialize error registry with built-in templates."""
        self._templates: dict[str, ErrorTemplate] = {}
        self._load_builtin_templates()

    def get_template(self, code: str) -> ErrorTemplate | None:
        """Get template by error code.

        Args:
            code: Error code to look up

        Returns:
            ErrorTemplate if found, None otherwise
        """
        return self._templates.get(code)

    def list_codes(self) -> list[str]:
        """List all registered error codes."""
        return list(self._templates.keys())

    def create(self, code: str, context: dict[str, Any] | None = None) -> ErrtrapError:
        """Create error instance from template + context.

        The concrete exception class follows the template's category, so
        ``create("DUPLICATE_CONTEXT")`` returns a RegistrationError.

        Args:
            code: Error code
            context: Variables for template interpolation. ``detail``,
                ``context`` and ``handler`` are also copied onto the error.

        Returns:
            ErrtrapError subclass instance

        Raises:
            ValueError: If error code not found
        """
        template = self.get_template(code)
        if not template:
            msg = f"Unknown error code: {code}"
            raise ValueError(msg)

        context = context or {}

        message = self._interpolate(template.message_template, context) or f"Error {code}"
        detail = context.get("detail") or self._interpolate(template.detail_template, context)
        suggestion = self._interpolate(template.suggestion_template, context)

        error_class = _CATEGORY_CLASSES.get(template.category, ErrtrapError)
        return error_class(
            code=template.code,
            category=template.category,
            message=message,
            detail=detail,
            suggestion=suggestion,
            context=context.get("context"),
            handler=context.get("handler"),
        )

    def _interpolate(self, template: str | None, context: dict[str, Any]) -> str | None:
        """Safe string interpolation.

        Args:
            template: Template string with {var} placeholders
            context: Context variables

        Returns:
            Interpolated string or None if template is None
        """
        if template is None:
            return None

        try:
            return template.format(**context)
        except KeyError:
            # Missing context variable - return template as-is
            return template

    def _load_builtin_templates(self) -> None:
        """Load hardcoded built-in templates."""
        # REGISTRATION errors
        self._templates["EMPTY_KEY"] = ErrorTemplate(
            code="EMPTY_KEY",
            category=ErrorCategory.REGISTRATION,
            message_template="Context and handler must both be non-empty",
            suggestion_template="Pass a context name and a handler callable or name",
        )

        self._templates["DUPLICATE_CONTEXT"] = ErrorTemplate(
            code="DUPLICATE_CONTEXT",
            category=ErrorCategory.REGISTRATION,
            message_template="Context '{context}' is already registered",
            detail_template="Existing handler: {existing}",
            suggestion_template="Pass force=True to overwrite the existing registration",
        )

        self._templates["UNRESOLVABLE_HANDLER"] = ErrorTemplate(
            code="UNRESOLVABLE_HANDLER",
            category=ErrorCategory.REGISTRATION,
            message_template="Handler '{handler}' for context '{context}' is not callable",
            suggestion_template=(
                "Use a callable, a name defined in the handler namespace, "
                "or an import path such as 'package.module:function'"
            ),
        )

        # RAISE errors
        self._templates["EMPTY_CONTEXT"] = ErrorTemplate(
            code="EMPTY_CONTEXT",
            category=ErrorCategory.RAISE,
            message_template="Context name required",
        )

        # DISPATCH errors
        self._templates["HANDLER_UNRESOLVED"] = ErrorTemplate(
            code="HANDLER_UNRESOLVED",
            category=ErrorCategory.DISPATCH,
            message_template="Handler '{handler}' for context '{context}' could not be resolved",
            detail_template="The handler resolved at registration time but not at dispatch time",
        )

        # CONFIG errors
        self._templates["CONFIG_INVALID"] = ErrorTemplate(
            code="CONFIG_INVALID",
            category=ErrorCategory.CONFIG,
            message_template="Configuration is invalid",
            suggestion_template="Check the configuration file against the documented keys",
        )

        # SCRIPT errors
        self._templates["SCRIPT_INVALID"] = ErrorTemplate(
            code="SCRIPT_INVALID",
            category=ErrorCategory.SCRIPT,
            message_template="Script definition is invalid",
        )
