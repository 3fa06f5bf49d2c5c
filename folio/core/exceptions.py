"""Folio CRM Exception Hierarchy.

All custom exceptions inherit from FolioError.

Exception Hierarchy:
    FolioError (base)
    ├── ConfigurationError
    ├── ValidationError
    ├── DatabaseError
    └── PipelineError
        ├── ContactNotFoundError
        └── InvalidActionError
"""


class FolioError(Exception):
    """Base exception for all Folio errors.

    Allows broad exception handling at the command-line boundary.
    """

    pass


class ConfigurationError(FolioError):
    """Configuration is invalid or missing.

    Raised when:
        - Configuration file is malformed
        - A numeric setting cannot be parsed
        - Staleness thresholds are out of order
    """

    pass


class ValidationError(FolioError):
    """Contact payload failed validation.

    Raised when:
        - Required field is missing
        - Field value is invalid format
        - Email duplicates an existing contact
    """

    pass


class DatabaseError(FolioError):
    """Database operation failed.

    Raised when:
        - Database file cannot be opened
        - Query execution fails
    """

    pass


class PipelineError(FolioError):
    """Pipeline operation failed."""

    pass


class ContactNotFoundError(PipelineError):
    """Requested contact id does not exist.

    Raised by repository lookups before any evaluation runs.
    """

    def __init__(self, contact_id: int):
        super().__init__(f"Contact not found: {contact_id}")
        self.contact_id = contact_id


class InvalidActionError(PipelineError):
    """Agent action type is not recognised.

    The executor reports unknown types as a failed result. This exception
    is only raised by callers that ask for a hard failure instead.
    """

    pass
