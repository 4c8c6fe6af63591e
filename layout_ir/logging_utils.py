"""DEBUG call tracing for the translation and expansion modules.

Arguments are rendered compactly: positional constraints by their printer
description, linear rows by their ``expr <= 0`` form, disjunctions by source
and size, and numpy arrays by shape. Long sequences keep only a prefix.
"""

from __future__ import annotations

import inspect
import logging
import reprlib
from functools import wraps
from typing import Any, Callable, MutableMapping, Optional, TypeVar, cast

import numpy as np

from .constraints import POSITIONAL_CONSTRAINT_TYPES, Disjunction
from .printer import describe_constraint

F = TypeVar("F", bound=Callable[..., Any])

_repr = reprlib.Repr()
_repr.maxstring = 80
_repr.maxother = 80

# Constraint sets grow to thousands of entries; only a prefix is ever logged.
MAX_ITEMS = 5


def summarize(value: Any, max_items: int = MAX_ITEMS) -> str:
    """Return a short, size-bounded rendering of ``value`` for DEBUG logs."""

    if isinstance(value, POSITIONAL_CONSTRAINT_TYPES):
        return f"<{describe_constraint(value)}>"
    if isinstance(value, Disjunction):
        return f"<disjunction {value.source!r}: {len(value)} alternatives>"
    if hasattr(value, "expression") and hasattr(value, "relation"):
        return f"<{value}>"
    if isinstance(value, np.ndarray):
        return f"ndarray(shape={tuple(value.shape)})"
    if isinstance(value, (list, tuple)):
        shown = ", ".join(summarize(item, max_items) for item in value[:max_items])
        if len(value) > max_items:
            shown += f", ... ({len(value)} items)"
        return f"[{shown}]"
    return _repr.repr(value)


def trace_calls(logger: logging.Logger, name: str) -> Callable[[F], F]:
    """Decorator logging entry, result and failure of ``name`` at DEBUG."""

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            if not logger.isEnabledFor(logging.DEBUG):
                return func(*args, **kwargs)
            rendered = [summarize(arg) for arg in args]
            rendered += [f"{key}={summarize(val)}" for key, val in kwargs.items()]
            logger.debug("%s(%s)", name, ", ".join(rendered))
            try:
                result = func(*args, **kwargs)
            except Exception:
                logger.debug("%s raised", name, exc_info=True)
                raise
            logger.debug("%s -> %s", name, summarize(result))
            return result

        return cast(F, wrapper)

    return decorator


def apply_debug_logging(namespace: MutableMapping[str, Any], *, logger: Optional[logging.Logger] = None) -> None:
    """Trace every function and method defined in the module owning ``namespace``."""

    module_name = namespace["__name__"]
    logger = logger or logging.getLogger(module_name)

    for name, value in list(namespace.items()):
        if getattr(value, "__module__", None) != module_name:
            continue
        if inspect.isfunction(value):
            namespace[name] = trace_calls(logger, name)(value)
        elif inspect.isclass(value):
            for attr, member in list(vars(value).items()):
                if inspect.isfunction(member) and not attr.startswith("__"):
                    setattr(value, attr, trace_calls(logger, f"{value.__name__}.{attr}")(member))
