"""Error types raised or returned by the data layer.

Not-found is never an error: lookups return ``None`` and listings return an
empty list. Uniqueness and other constraint violations are not pre-validated
here; the store's ``IntegrityError`` reaches the caller unchanged.
"""


class DataLayerError(Exception):
    """Base class for data layer failures."""

    def __init__(self, message: str, operation: str | None = None):
        super().__init__(message)
        self.operation = operation


class ConnectivityError(DataLayerError):
    """The relational store is not configured or cannot be reached."""


class QueryError(DataLayerError):
    """A statement failed for a reason other than connectivity."""


class NothingToUpdateError(DataLayerError, ValueError):
    """A partial update was requested without any fields."""

    def __init__(self, entity: str):
        super().__init__(f"No fields to update for {entity}", f"update {entity}")
        self.entity = entity
