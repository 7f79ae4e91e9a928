"""
Repository error taxonomy shared by every storage backend.
"""


class RepositoryError(Exception):
    """Base class for failures reported by a repository."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(RepositoryError):
    """No row matches the requested id."""

    def __init__(self, entity: str, entity_id):
        super().__init__(f"{entity} with id {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class ValidationError(RepositoryError):
    """A caller-level precondition was violated before reaching storage."""


class StorageError(RepositoryError):
    """The underlying storage failed; the message is all the caller gets."""
