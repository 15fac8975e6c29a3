"""
Domain error taxonomy for the ingestion pipeline.

ParseError aborts a batch. ReconciliationError (and ExternalServiceError)
are confined to one chunk. PreconditionError marks a programmer error,
such as an oversized chunk, and is fatal to that chunk only.
"""

from typing import Any


class DomainError(Exception):
    """Base class carrying a machine-readable code and optional details."""

    code = "DOMAIN_ERROR"

    def __init__(self, message: str, code: str | None = None, details: Any = None):
        self.message = message
        if code is not None:
            self.code = code
        self.details = details
        super().__init__(message)


class ParseError(DomainError):
    """Raw input could not be decoded into valid rows."""

    code = "PARSE_ERROR"


class ValidationError(DomainError):
    """A single field failed a validation rule."""

    code = "VALIDATION_ERROR"

    def __init__(self, rule_name: str, field_name: str, message: str):
        self.rule_name = rule_name
        self.field_name = field_name
        super().__init__(
            f"[{rule_name}] {field_name}: {message}",
            details={"rule_name": rule_name, "field_name": field_name},
        )
        self.message = message


class ReconciliationError(DomainError):
    """Lookup, create or update against the catalog failed."""

    code = "RECONCILIATION_ERROR"


class ExternalServiceError(ReconciliationError):
    code = "EXTERNAL_SERVICE_ERROR"

    def __init__(self, service: str, message: str, details: Any = None):
        self.service = service
        super().__init__(f"{service} error: {message}", details=details)


class PreconditionError(DomainError):
    code = "PRECONDITION_FAILED"


class NotFoundError(DomainError):
    code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: str):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} not found: {resource_id}")


class InvalidTransitionError(DomainError):
    """A batch was asked to leave a terminal state."""

    code = "INVALID_TRANSITION"
