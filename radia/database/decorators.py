#!/usr/bin/env python3
"""
decorators.py
--------------------
Shared decorators for store operations.
"""
from functools import wraps
from typing import Callable
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from radia.core.exceptions import StoreIOError


def log_store_operation(operation_name: str):
    """
    Decorator to log store operations with timing and context.

    The wrapped method's instance must expose a ``logger`` attribute
    (RadiaLogger or None).

    Args:
        operation_name: Name of the operation being logged

    Returns:
        Decorator function
    """

    def decorator(function: Callable) -> Callable:
        @wraps(function)
        def wrapper(self, *args, **kwargs):
            start_time = datetime.now()
            operation_id = f"{operation_name}_{start_time.strftime('%Y%m%d_%H%M%S_%f')}"

            if getattr(self, "logger", None):
                self.logger.log_debug(
                    f"Starting {operation_name}",
                    {
                        "operation_id": operation_id,
                        "args_count": len(args),
                        "kwargs_keys": list(kwargs.keys()),
                    },
                )

            try:
                result = function(self, *args, **kwargs)

                duration = (datetime.now() - start_time).total_seconds()
                if getattr(self, "logger", None):
                    self.logger.log_operation(
                        f"{operation_name}_completed",
                        {
                            "operation_id": operation_id,
                            "duration_seconds": duration,
                        },
                    )

                return result

            except Exception as e:
                duration = (datetime.now() - start_time).total_seconds()
                if getattr(self, "logger", None):
                    self.logger.log_error(
                        e,
                        {
                            "operation": operation_name,
                            "operation_id": operation_id,
                            "duration_seconds": duration,
                        },
                    )
                raise

        return wrapper

    return decorator


def handle_store_errors(function: Callable) -> Callable:
    """
    Decorator translating SQLAlchemy failures into StoreIOError.

    Args:
        function: Function to wrap

    Returns:
        Wrapped function with error handling
    """

    @wraps(function)
    def wrapper(*args, **kwargs):
        try:
            return function(*args, **kwargs)
        except SQLAlchemyError as e:
            raise StoreIOError(f"Key-value operation failed: {e}") from e

    return wrapper
