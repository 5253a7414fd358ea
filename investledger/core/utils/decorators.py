"""
Utility decorators for operation logging.
"""

import functools
import inspect
import time
import uuid
from collections.abc import Callable
from typing import Any, TypeVar

from loguru import logger

_CONTEXT_PARAMS = (
    "holding_id",
    "divestment_id",
    "dividend_id",
    "kind",
    "divested_amount",
    "gross_amount",
    "taxes_withheld",
    "new_value",
)


def _serialize_parameter_value(value: Any) -> Any:
    """Serialize parameter value for logging."""
    if hasattr(value, "value") and hasattr(value, "name"):
        return str(value.value)  # Handle enum values
    return value


def _extract_operation_context(bound_args: inspect.BoundArguments) -> dict[str, Any]:
    """Extract the loggable parameters of a ledger operation."""
    context: dict[str, Any] = {}
    self_obj = bound_args.arguments.get("self")
    user_id = getattr(self_obj, "user_id", None)
    if user_id is not None:
        context["user_id"] = user_id
    for param_name, value in bound_args.arguments.items():
        if param_name in _CONTEXT_PARAMS and value is not None:
            context[param_name] = _serialize_parameter_value(value)
    return context


def _setup_logging_context(
    func: Callable[..., Any], args: tuple[Any, ...], kwargs: dict[str, Any]
) -> dict[str, Any]:
    """Build logging context with a short correlation id."""
    bound_args = inspect.signature(func).bind(*args, **kwargs)
    bound_args.apply_defaults()
    return {
        "correlation_id": str(uuid.uuid4())[:8],
        **_extract_operation_context(bound_args),
    }


F = TypeVar("F", bound=Callable[..., Any])


def log_operation(func: F) -> F:
    """Decorator to log ledger operations with correlation IDs."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        context = _setup_logging_context(func, args, kwargs)
        func_name = func.__name__
        log = logger.bind(**context)

        log.debug(f"Ledger operation started: {func_name}")
        start_time = time.perf_counter()
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            execution_time_ms = round((time.perf_counter() - start_time) * 1000, 2)
            log.bind(error_type=type(e).__name__, execution_time_ms=execution_time_ms).warning(
                f"Ledger operation failed: {func_name}: {e}"
            )
            raise
        execution_time_ms = round((time.perf_counter() - start_time) * 1000, 2)
        log.bind(execution_time_ms=execution_time_ms).success(
            f"Ledger operation completed: {func_name}"
        )
        return result

    return wrapper  # type: ignore
