"""Repository-specific exceptions.

These exceptions provide semantic meaning for data access errors,
separating them from general database errors.
"""


class RepositoryError(Exception):
    """Base exception for repository operations."""


class NotFoundError(RepositoryError):
    """Entity not found in database."""

    def __init__(self, entity_type: str, identifier: str | int):
        self.entity_type = entity_type
        self.identifier = identifier
        super().__init__(f"{entity_type} not found: {identifier}")


class DuplicateError(RepositoryError):
    """Entity already exists (unique constraint violation)."""

    def __init__(self, entity_type: str, field: str | None = None):
        self.entity_type = entity_type
        self.field = field
        if field:
            super().__init__(f"{entity_type} with this {field} already exists")
        else:
            super().__init__(f"{entity_type} violates a unique constraint")


class ImmutableFieldError(RepositoryError):
    """Attempt to change a field that may only be set once."""

    def __init__(self, entity_type: str, field: str):
        self.entity_type = entity_type
        self.field = field
        super().__init__(f"{entity_type}.{field} cannot be changed")
