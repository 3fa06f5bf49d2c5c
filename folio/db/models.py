"""Data models and enumerations for Folio CRM.

All enums are str-valued so they serialize as plain strings.
Dataclasses use frozen=False for mutability during processing.

This module defines:
    - Enumerations for stage, staleness, priority, and agent actions
    - The Contact record and the derived records computed from it
    - Utility functions (date parsing, days-since, score clamping)
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional, Union

# =============================================================================
# ENUMERATIONS
# =============================================================================


class Stage(str, Enum):
    """Where a contact lives in the pipeline funnel.

    Values:
        PROSPECT: Sourced, not yet introduced
        INTRO: Introduction made, first meetings
        DILIGENCE: Active evaluation
        PORTFOLIO: Invested
        PASSED: Declined - terminal, absorbing
    """

    PROSPECT = "prospect"
    INTRO = "intro"
    DILIGENCE = "diligence"
    PORTFOLIO = "portfolio"
    PASSED = "passed"


VALID_STAGES: list[str] = [s.value for s in Stage]


class StalenessLevel(str, Enum):
    """How long since last contact. Derived, never stored."""

    ACTIVE = "active"
    WARNING = "warning"
    CRITICAL = "critical"
    DEAD = "dead"


class Priority(str, Enum):
    """Follow-up urgency. Sorts urgent first."""

    URGENT = "urgent"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Sort rank (urgent=0 ... low=3)."""
        return _PRIORITY_RANK[self]


_PRIORITY_RANK: dict[Priority, int] = {
    Priority.URGENT: 0,
    Priority.HIGH: 1,
    Priority.MEDIUM: 2,
    Priority.LOW: 3,
}


class ActionType(str, Enum):
    """Mutation an agent may propose or execute."""

    FOLLOW_UP = "follow_up"
    STAGE_PROGRESSION = "stage_progression"
    SCORE_UPDATE = "score_update"
    ARCHIVE = "archive"


class Impact(str, Enum):
    """Display severity of a proposed agent action."""

    HIGH = "high"
    MEDIUM = "medium"


class NotificationType(str, Enum):
    DEAD_LEAD = "dead_lead"
    STALE_LEAD = "stale_lead"
    SCORE_DROP = "score_drop"


# =============================================================================
# DATE HANDLING
# =============================================================================

# Days reported when last_contact cannot be parsed: treat as extremely stale.
STALE_SENTINEL_DAYS = 999

DateLike = Union[date, datetime, str, None]


def parse_date(value: DateLike) -> Optional[date]:
    """Parse a calendar date from external input.

    Accepts date, datetime, or an ISO string ("2026-02-01" or a full
    timestamp). Never raises.

    Returns:
        The date, or None if the value cannot be parsed
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def days_since(value: DateLike, today: date, default: int = STALE_SENTINEL_DAYS) -> int:
    """Whole days between a date and today.

    Args:
        value: Date (or raw string) to measure from
        today: Reference date
        default: Returned when value cannot be parsed

    Returns:
        Days elapsed (negative for future dates), or default
    """
    parsed = parse_date(value)
    if parsed is None:
        return default
    return (today - parsed).days


def clamp_score(score: Any) -> int:
    """Coerce a score into the 0-100 range.

    Non-numeric input becomes 0.
    """
    try:
        value = int(score)
    except (TypeError, ValueError):
        value = 0
    return max(0, min(100, value))


# =============================================================================
# DATACLASSES
# =============================================================================


@dataclass
class Contact:
    """Contact record.

    Attributes:
        id: Primary key (assigned by the repository)
        name: Founder or contact name
        company: Company name
        email: Email address
        phone: Phone number (normalized to +digits)
        stage: Pipeline stage
        score: Relationship score 0-100
        last_contact: Last contact date (may be an unparsable raw string)
        created_at: Record creation date
        tags: Free-form tags
        notes: Static context notes
    """

    id: Optional[int] = None
    name: str = ""
    company: str = ""
    email: str = ""
    phone: str = ""
    stage: Stage = Stage.PROSPECT
    score: int = 0
    last_contact: DateLike = None
    created_at: DateLike = None
    tags: list[str] = field(default_factory=list)
    notes: str = ""

    @property
    def is_passed(self) -> bool:
        return self.stage == Stage.PASSED

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "company": self.company,
            "stage": _enum_value(self.stage),
            "tags": list(self.tags),
            "last_contact": _date_str(self.last_contact),
            "score": self.score,
            "notes": self.notes,
            "created_at": _date_str(self.created_at),
        }


@dataclass
class FollowUpGuidance:
    """Suggestion and priority for one contact."""

    suggestion: str
    priority: Priority


@dataclass
class FollowUpEntry:
    """One row of the follow-up queue or stale list.

    Attributes:
        contact_id: Contact ID
        name: Contact name
        company: Company name
        stage: Pipeline stage
        days_since_contact: Days since last contact
        stale_level: Staleness classification
        suggestion: Recommended next step
        priority: Follow-up urgency
        score: Contact score
        last_contact: Raw last-contact value
    """

    contact_id: Optional[int]
    name: str
    company: str
    stage: Stage
    days_since_contact: int
    stale_level: StalenessLevel
    suggestion: str
    priority: Priority
    score: int
    last_contact: DateLike = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "contact_id": self.contact_id,
            "name": self.name,
            "company": self.company,
            "stage": _enum_value(self.stage),
            "days_since_contact": self.days_since_contact,
            "stale_level": self.stale_level.value,
            "suggestion": self.suggestion,
            "priority": self.priority.value,
            "score": self.score,
            "last_contact": _date_str(self.last_contact),
        }


@dataclass
class Notification:
    """In-app notification. Numbered per invocation, starting at 1."""

    id: int
    type: NotificationType
    priority: Priority
    title: str
    contact_id: Optional[int]
    message: str
    created_at: str
    read: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "priority": self.priority.value,
            "read": self.read,
            "title": self.title,
            "contact_id": self.contact_id,
            "message": self.message,
            "created_at": self.created_at,
        }


@dataclass
class AgentAction:
    """Candidate mutation proposed by the agent scan.

    Attributes:
        id: Sequential within one scan, starting at 1
        type: Action type
        contact_id: Target contact
        contact_name: Contact name (display)
        company: Company name (display)
        description: What the action does
        reason: Why it was proposed
        impact: Display severity
        status: Always "proposed" until executed
    """

    id: int
    type: ActionType
    contact_id: Optional[int]
    contact_name: str
    company: str
    description: str
    reason: str
    impact: Impact
    status: str = "proposed"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "contact_id": self.contact_id,
            "contact_name": self.contact_name,
            "company": self.company,
            "description": self.description,
            "reason": self.reason,
            "status": self.status,
            "impact": self.impact.value,
        }


@dataclass
class ActionResult:
    """Outcome of executing one agent action."""

    success: bool
    description: str = ""
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        if self.success:
            return {"success": True, "action": self.description}
        return {"success": False, "error": self.error}


def _enum_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _date_str(value: DateLike) -> Optional[str]:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value
