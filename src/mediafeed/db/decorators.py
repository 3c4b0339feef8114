"""Database operation decorators for consistent error handling."""

from collections.abc import Awaitable, Callable
from functools import wraps
import inspect
from typing import ParamSpec, TypeVar

from sqlalchemy.exc import SQLAlchemyError

from ..exceptions import DatabaseOperationError

P = ParamSpec("P")
T = TypeVar("T")


def handle_db_errors(
    operation: str,
    item_id_from: str | None = None,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Wrap an async database method in SQLAlchemyError handling.

    Args:
        operation: Description of the operation for error messages.
        item_id_from: Name of the parameter holding the catalog item id, which
            is attached to the raised error.

    Returns:
        A decorator raising DatabaseOperationError on SQLAlchemy failures.

    Raises:
        TypeError: At decoration time, if ``item_id_from`` names a parameter
            the function does not have.
    """

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        sig = inspect.signature(func)
        if item_id_from is not None and item_id_from not in sig.parameters:
            raise TypeError(
                f"Decorator on '{func.__name__}' names parameter "
                f"'{item_id_from}', but the function has no such parameter."
            )

        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            try:
                return await func(*args, **kwargs)
            except SQLAlchemyError as e:
                item_id: str | None = None
                if item_id_from is not None:
                    bound_args = sig.bind_partial(*args, **kwargs)
                    item_id = bound_args.arguments.get(item_id_from)
                raise DatabaseOperationError(
                    f"Failed to {operation}", item_id=item_id
                ) from e

        return wrapper

    return decorator
