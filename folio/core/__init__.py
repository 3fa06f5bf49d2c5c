"""Core package - Configuration, logging, exceptions, clock.

This package provides foundational infrastructure used by all other layers.

Modules:
    - config: Environment and configuration management
    - logging: Structured JSON logging
    - exceptions: Custom exception hierarchy
    - clock: Injectable source of the current date and time
"""

from folio.core.exceptions import (
    ConfigurationError,
    ContactNotFoundError,
    DatabaseError,
    FolioError,
    InvalidActionError,
    PipelineError,
    ValidationError,
)

__all__ = [
    "FolioError",
    "ConfigurationError",
    "ValidationError",
    "DatabaseError",
    "PipelineError",
    "ContactNotFoundError",
    "InvalidActionError",
]
