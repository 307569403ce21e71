"""
Translation of client library exceptions into relay exceptions.
"""

import logging
from functools import wraps
from typing import Callable, Tuple, Type, TypeVar

from dynamo_search_relay.exceptions import GatewayError

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., object])


def handle_gateway_errors(
    operation_name: str,
    catch: Tuple[Type[BaseException], ...],
    wrap_as: Type[GatewayError],
) -> Callable[[F], F]:
    """
    Decorator to translate client errors consistently across adapter
    operations.

    Args:
        operation_name: Name of the operation for error context
        catch: Client library exception types to translate
        wrap_as: Relay exception raised in their place
    """

    def decorator(func):
        @wraps(func)
        def wrapper(self, *args, **kwargs):
            try:
                return func(self, *args, **kwargs)
            except catch as exc:
                logger.error(
                    "Gateway operation failed",
                    extra={
                        "operation": operation_name,
                        "error_type": type(exc).__name__,
                        "error": str(exc),
                    },
                )
                raise wrap_as(f"{operation_name} failed: {exc}") from exc

        return wrapper

    return decorator


__all__ = ["handle_gateway_errors"]
