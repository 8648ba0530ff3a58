"""Custom exceptions for the Mini-BI dashboard service."""


class MiniBIError(Exception):
    """Base exception for Mini-BI."""

    pass


class NotFoundError(MiniBIError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: int | str):
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(f"{resource_type} with id {resource_id} not found")


class ValidationError(MiniBIError):
    """Raised when validation fails."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)
