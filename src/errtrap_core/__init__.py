"""errtrap core - context-keyed error interception for sequential scripts.

Register repair handlers against named contexts, raise failures with a
payload, and either resume right after the failure or terminate with a
diagnostic and call-stack trace.

    from errtrap_core import raise_, register

    register("JSON_FIX", fix_json)
    raise_("JSON_FIX", 4, "some_key")
"""

from errtrap_core.engine import (
    Outcome,
    TrapEngine,
    call,
    capture,
    get_engine,
    raise_,
    register,
    run,
    set_engine,
)
from errtrap_core.errors import RaiseError, RegistrationError

__version__ = "0.1.0"
__all__ = [
    "__version__",
    "TrapEngine",
    "Outcome",
    "RegistrationError",
    "RaiseError",
    "get_engine",
    "set_engine",
    "register",
    "raise_",
    "run",
    "capture",
    "call",
]
