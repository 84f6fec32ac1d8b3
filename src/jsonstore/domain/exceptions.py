"""Domain exceptions."""


class JSONStoreError(Exception):
    """Base exception for jsonstore."""

    code = "INTERNAL_ERROR"


class InvalidRequest(JSONStoreError):
    """Request shape is invalid (empty batch, batch over the cap)."""

    code = "INVALID_REQUEST"


class InvalidDocument(InvalidRequest):
    """Content is not a valid JSON document or exceeds size/shape limits."""

    code = "INVALID_JSON"


class NotFound(JSONStoreError):
    """Requested document was not found."""

    code = "NOT_FOUND"

    def __init__(self, kind: str, key: str) -> None:
        super().__init__(f"{kind} not found: {key}")
        self.kind = kind
        self.key = key


class StorageError(JSONStoreError):
    """Backend rejected or failed the operation."""

    code = "STORAGE_ERROR"


class Unavailable(StorageError):
    """Backend could not be reached."""

    code = "DATABASE_UNAVAILABLE"


class Timeout(StorageError):
    """Operation deadline exceeded."""

    code = "TIMEOUT"


class MigrationError(StorageError):
    """Schema setup failed."""

    code = "MIGRATION_ERROR"
