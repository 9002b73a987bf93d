# tokenauth/services/_shared/base.py
from __future__ import annotations

from collections.abc import Callable

from tokenauth.core import errors as api_errors
from tokenauth.services._shared.errors import (
    AuthenticationError,
    ConflictError,
    InvalidTokenError,
    NotFoundError,
    ServiceError,
    UserServiceError,
)
from tokenauth.uow.base import UnitOfWork
from tokenauth.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide a helper to open a read-write unit of work.
    * Centralize error translation.

    Notes
    -----
    - Services must never touch the global session; always use a Unit of Work.
    - The unit-of-work factory is injectable so the same service runs over
      SQLAlchemy or the in-memory stores.
    """

    def __init__(self, *, uow_factory: Callable[[], UnitOfWork] | None = None) -> None:
        """
        Initialize the base service.

        :param uow_factory: Zero-argument callable returning a fresh UoW.
                            Defaults to :class:`SQLAlchemyUnitOfWork`.
        :type uow_factory: Callable[[], UnitOfWork] | None
        """
        self._uow_factory = uow_factory or SQLAlchemyUnitOfWork

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> UnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Read-write UoW instance.
        :rtype: UnitOfWork
        """
        return self._uow_factory()

    # -------------------------- Error handling ------------------------------

    @staticmethod
    def translate_exceptions(exc: Exception) -> Exception:
        """
        Map domain/service-level errors to API-level (HTTP) errors.

        :param exc: Exception raised within the service.
        :type exc: Exception
        :returns: Translated exception ready to be re-raised.
        :rtype: Exception
        """
        if isinstance(exc, AuthenticationError):
            # → 401 Unauthorized
            return api_errors.Unauthorized(str(exc), code="invalid_credentials")

        if isinstance(exc, InvalidTokenError):
            # → 401 Unauthorized
            return api_errors.Unauthorized(str(exc), code="invalid_token")

        if isinstance(exc, NotFoundError):
            # → 404 Not Found
            return api_errors.NotFound(str(exc))

        if isinstance(exc, ConflictError):
            # → 409 Conflict
            return api_errors.Conflict(str(exc))

        if isinstance(exc, UserServiceError):
            # → 502 Bad Gateway
            return api_errors.BadGateway(str(exc))

        # Any other ServiceError subclass → 400 Bad Request
        if isinstance(exc, ServiceError):
            return api_errors.APIError(
                message=str(exc),
                status_code=400,
                code="bad_request",
            )

        # Fallback: return untouched (will bubble up to Flask handler)
        return exc
