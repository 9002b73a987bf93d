"""Unit of Work abstractions and concrete implementations.

This package re-exports the SQLAlchemy-backed and in-memory units of work
used by the auth service, alongside the abstract contract it depends on.
"""

from .base import UnitOfWork
from .memory_uow import InMemoryUnitOfWork
from .sqlalchemy_uow import SQLAlchemyUnitOfWork

__all__ = [
    "UnitOfWork",
    "InMemoryUnitOfWork",
    "SQLAlchemyUnitOfWork",
]
