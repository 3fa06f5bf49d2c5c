"""Database package - models, repositories, intake.

Modules:
    - models: Dataclasses and enumerations
    - repository: ContactRepository contract and in-memory implementation
    - database: SQLite-backed repository
    - intake: Validation and normalization of incoming contacts
"""

from folio.db.models import (
    ActionResult,
    ActionType,
    AgentAction,
    Contact,
    FollowUpEntry,
    FollowUpGuidance,
    Impact,
    Notification,
    NotificationType,
    Priority,
    Stage,
    StalenessLevel,
)
from folio.db.repository import ContactRepository, InMemoryContactRepository

__all__ = [
    # Enums
    "Stage",
    "StalenessLevel",
    "Priority",
    "ActionType",
    "Impact",
    "NotificationType",
    # Dataclasses
    "Contact",
    "FollowUpGuidance",
    "FollowUpEntry",
    "Notification",
    "AgentAction",
    "ActionResult",
    # Repositories
    "ContactRepository",
    "InMemoryContactRepository",
]
