# localcooks/services/base.py
"""
Base Service Pattern for the LocalCooks platform.

Provides common functionality for all service classes including:
- Transaction management
- Logging
- Performance monitoring
"""

import asyncio
from contextlib import contextmanager
from functools import wraps
import logging
import time
from typing import Any, Callable, Iterator, TypeVar, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import ServiceException
from ..monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

SLOW_OPERATION_SECONDS = 1.0


class BaseService:
    """
    Base class for all service layer components.

    Subclasses receive a SQLAlchemy session, a class-named logger and the
    ``measure_operation`` decorator for timing.
    """

    def __init__(self, db: Session):
        self.db = db
        self.logger = logging.getLogger(self.__class__.__name__)

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Context manager for database transactions.

        Usage:
            with self.transaction():
                self.db.add(entity)
                # commit is handled automatically
        """
        try:
            yield self.db
            self.db.commit()
            self.logger.debug("Transaction committed successfully")
        except SQLAlchemyError as e:
            self.logger.error(f"Transaction failed: {str(e)}")
            self.db.rollback()
            raise ServiceException(f"Database operation failed: {str(e)}")
        except Exception as e:
            self.logger.error(f"Unexpected error in transaction: {str(e)}")
            self.db.rollback()
            raise

    @staticmethod
    def measure_operation(operation_name: str) -> Callable[[F], F]:
        """
        Decorator to measure operation performance.

        Usage:
            @BaseService.measure_operation("request_checkout")
            def request_checkout(self, ...):
                ...
        """

        def _finish(self: Any, elapsed: float, success: bool, error_type: str | None) -> None:
            if elapsed > SLOW_OPERATION_SECONDS and hasattr(self, "logger"):
                self.logger.warning(
                    f"Slow operation detected: {operation_name} took {elapsed:.2f}s"
                )
            prometheus_metrics.record_service_operation(
                service=self.__class__.__name__,
                operation=operation_name,
                duration=elapsed,
                status="success" if success else "error",
                error_type=error_type,
            )

        def decorator(func: F) -> F:
            if asyncio.iscoroutinefunction(func):

                @wraps(func)
                async def async_wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
                    start_time = time.time()
                    error_type = None
                    try:
                        return await func(self, *args, **kwargs)
                    except Exception as e:
                        error_type = type(e).__name__
                        raise
                    finally:
                        _finish(self, time.time() - start_time, error_type is None, error_type)

                return cast(F, async_wrapper)

            @wraps(func)
            def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
                start_time = time.time()
                error_type = None
                try:
                    return func(self, *args, **kwargs)
                except Exception as e:
                    error_type = type(e).__name__
                    raise
                finally:
                    _finish(self, time.time() - start_time, error_type is None, error_type)

            return cast(F, wrapper)

        return decorator
