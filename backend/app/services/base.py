# backend/app/services/base.py
"""
Base Service Pattern for the trade platform

Provides common functionality for all service classes including:
- Transaction management
- Logging
- Error handling
- Performance monitoring
"""

import asyncio
from contextlib import contextmanager
from functools import wraps
import logging
import time
from typing import Any, Callable, Optional, TypeVar, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import ServiceException
from ..monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

SLOW_OPERATION_SECONDS = 1.0


def _report(
    service: Any, operation_name: str, elapsed: float, success: bool, error_type: Optional[str]
) -> None:
    # Only log if it's actually slow
    if elapsed > SLOW_OPERATION_SECONDS and hasattr(service, "logger"):
        service.logger.warning(f"Slow operation detected: {operation_name} took {elapsed:.2f}s")

    try:
        prometheus_metrics.record_service_operation(
            service=service.__class__.__name__,
            operation=operation_name,
            duration=elapsed,
            status="success" if success else "error",
            error_type=error_type,
        )
    except ValueError as exc:
        # Don't let metrics collection break the operation
        logger.debug("Failed to record metrics for %s: %s", operation_name, exc)


class BaseService:
    """
    Base class for all service layer components.

    Provides common patterns for:
    - Database session management
    - Logging
    - Transaction handling
    - Performance monitoring
    """

    def __init__(self, db: Session):
        """
        Initialize base service.

        Args:
            db: Database session
        """
        self.db = db
        self.logger = logging.getLogger(self.__class__.__name__)

    @contextmanager
    def transaction(self):
        """
        Context manager for database transactions.

        Usage:
            with self.transaction():
                # Do multiple operations
                self.post_repository.transition_status(...)
                # Note: commit is handled automatically

        Helpers invoked by another service's operation (mark_trading,
        open_room, ...) never open their own transaction; they only flush
        so the caller commits or rolls back everything as a unit.
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
            self.logger.info(f"Transaction rolled back: {type(e).__name__}: {str(e)}")
            self.db.rollback()
            raise

    @staticmethod
    def measure_operation(operation_name: str) -> Callable[[F], F]:
        """
        Decorator to measure operation performance.

        Usage:
            @BaseService.measure_operation("accept_offer")
            def accept_offer(self, ...):
                # Method implementation

        Works for both sync and async methods.

        Args:
            operation_name: Name of the operation for metrics

        Returns:
            Decorator function
        """

        def decorator(func: F) -> F:
            func._operation_name = operation_name  # type: ignore[attr-defined]
            func._is_measured = True  # type: ignore[attr-defined]

            if not asyncio.iscoroutinefunction(func):

                @wraps(func)
                def wrapper(self, *args, **kwargs):
                    start_time = time.time()
                    success = False
                    error_type = None

                    try:
                        result = func(self, *args, **kwargs)
                        success = True
                        return result
                    except Exception as e:
                        error_type = type(e).__name__
                        raise
                    finally:
                        _report(self, operation_name, time.time() - start_time, success, error_type)

                return cast(F, wrapper)

            @wraps(func)
            async def async_wrapper(self, *args, **kwargs):
                start_time = time.time()
                success = False
                error_type = None

                try:
                    result = await func(self, *args, **kwargs)
                    success = True
                    return result
                except Exception as e:
                    error_type = type(e).__name__
                    raise
                finally:
                    _report(self, operation_name, time.time() - start_time, success, error_type)

            return cast(F, async_wrapper)

        return decorator


class BaseAsyncWorkflow:
    """
    Base for client-side async workflows that have no database session.

    Coroutine methods are timed with the same decorator as the server
    services, so their durations and errors land in the same Prometheus
    series, labelled with the workflow class name:

        @BaseAsyncWorkflow.measure_operation("event_match_search")
        async def search(self, ...):
            ...

    The decorator only needs ``self.logger``; nothing here touches a session.
    """

    measure_operation = staticmethod(BaseService.measure_operation)

    def __init__(self) -> None:
        self.logger = logging.getLogger(self.__class__.__name__)
