"""Repository layer - data access abstraction.

Repositories handle all database queries, providing a clean interface
for services. They add, flush and update rows; committing is left to the
caller so that one request is one transaction.

Dependency direction: Services -> Repositories -> Models
"""

from .exceptions import DuplicateError, ImmutableFieldError, NotFoundError, RepositoryError
from .session_repository import SessionRepository
from .user_repository import UserRepository

__all__ = [
    "DuplicateError",
    "ImmutableFieldError",
    "NotFoundError",
    "RepositoryError",
    "SessionRepository",
    "UserRepository",
]
