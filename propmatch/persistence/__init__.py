"""Persistence layer for the CRM data the matching engine reads.

This module provides the public API for database operations including:
- Database initialization and connection management
- Repository classes for properties, clients and contact history
- The SQL-backed candidate source for MatchingService
- Custom exceptions for error handling

Example usage:
    >>> from propmatch.persistence import init_database, get_session, ClientRepository
    >>>
    >>> init_database("sqlite:///./data/propmatch.db")
    >>>
    >>> with get_session() as session:
    ...     repo = ClientRepository(session, agent_id="agent-1")
    ...     criteria = repo.get_search_criteria("client-42")
"""

from .database import close_database, get_engine, get_session, init_database
from .exceptions import (
    DatabaseConnectionError,
    DataIntegrityError,
    PersistenceError,
    RecordNotFoundError,
)
from .repositories import (
    ClientRepository,
    ContactHistoryRepository,
    PropertyRepository,
    SqlCandidateRepository,
)

__all__ = [
    # Database functions
    "init_database",
    "get_session",
    "close_database",
    "get_engine",
    # Repositories
    "PropertyRepository",
    "ClientRepository",
    "ContactHistoryRepository",
    "SqlCandidateRepository",
    # Exceptions
    "PersistenceError",
    "DatabaseConnectionError",
    "RecordNotFoundError",
    "DataIntegrityError",
]
