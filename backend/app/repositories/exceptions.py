"""Repository-level failures.

The repository never lets a driver or SQLAlchemy exception escape: a
missing row becomes ``RecordNotFoundError`` and any storage fault becomes
``DatabaseError`` chained to the original cause.
"""


class RepositoryError(Exception):
    """Base class for repository-related errors."""


class RecordNotFoundError(RepositoryError):
    """Raised when a write statement matched no row."""

    def __init__(self, entity_id: int):
        super().__init__(f"No entity row with id {entity_id}")
        self.entity_id = entity_id


class DatabaseError(RepositoryError):
    """Raised when the storage layer fails."""

    def __init__(self, operation: str):
        super().__init__(f"Database failure during {operation}")
        self.operation = operation
