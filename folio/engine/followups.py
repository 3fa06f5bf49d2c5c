"""Follow-up policy - what to do next, and how urgently.

Two independent ladders per contact:
    1. Suggestion: stage-specific, first match wins
    2. Priority: a single ladder whose early rules are stage-specific

The follow-up queue sorts by priority, then most-stale first.

Usage:
    from folio.engine.followups import build_follow_up_queue, evaluate

    guidance = evaluate(Stage.DILIGENCE, 8)
    queue = build_follow_up_queue(repo.list(), clock.today())
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Optional, Union

from folio.core.logging import get_logger
from folio.db.models import (
    Contact,
    FollowUpEntry,
    FollowUpGuidance,
    Priority,
    Stage,
    days_since,
)
from folio.engine.staleness import DEFAULT_THRESHOLDS, StaleThresholds, classify

logger = get_logger(__name__)


# =============================================================================
# SUGGESTION LADDERS
# =============================================================================

# (exclusive lower bound in days, suggestion), checked in order; last entry is the fallback
SUGGESTION_LADDERS: dict[Stage, list[tuple[int, str]]] = {
    Stage.PORTFOLIO: [
        (14, "Schedule monthly check-in call"),
        (7, "Send portfolio update request"),
        (-1, "Relationship healthy"),
    ],
    Stage.DILIGENCE: [
        (7, "Follow up on outstanding diligence materials"),
        (3, "Schedule technical deep-dive or reference call"),
        (-1, "Continue diligence process"),
    ],
    Stage.INTRO: [
        (14, "Re-engage with warm intro or new angle"),
        (7, "Schedule follow-up meeting"),
        (-1, "Send additional materials or thesis alignment notes"),
    ],
    Stage.PROSPECT: [
        (21, "Cold — consider archiving or re-engaging"),
        (14, "Send personalized outreach with thesis updates"),
        (7, "Follow up on initial outreach"),
        (-1, "Monitor for signals"),
    ],
}

PASSED_SUGGESTION = "Consider revisiting if thesis changes"


def _as_stage(stage: Union[Stage, str]) -> Stage:
    """Coerce to Stage; unknown values fall back to prospect."""
    if isinstance(stage, Stage):
        return stage
    try:
        return Stage(stage)
    except ValueError:
        return Stage.PROSPECT


def suggest(stage: Union[Stage, str], days: int) -> str:
    """Recommended next step for a stage and days since contact."""
    stage = _as_stage(stage)
    if stage == Stage.PASSED:
        return PASSED_SUGGESTION

    ladder = SUGGESTION_LADDERS[stage]
    for min_days, suggestion in ladder[:-1]:
        if days > min_days:
            return suggestion
    return ladder[-1][1]


def prioritize(stage: Union[Stage, str], days: int) -> Priority:
    """Follow-up priority. Rule order matters: first satisfied rule wins."""
    stage = _as_stage(stage)
    if stage == Stage.PASSED:
        return Priority.LOW
    if stage == Stage.DILIGENCE and days > 5:
        return Priority.URGENT
    if stage == Stage.PORTFOLIO and days > 14:
        return Priority.URGENT
    if days > 21:
        return Priority.URGENT
    if days > 14:
        return Priority.HIGH
    if days > 7:
        return Priority.MEDIUM
    return Priority.LOW


def evaluate(stage: Union[Stage, str], days: int) -> FollowUpGuidance:
    """Suggestion and priority for a stage at a given staleness."""
    return FollowUpGuidance(suggestion=suggest(stage, days), priority=prioritize(stage, days))


def evaluate_follow_up(contact: Contact, today: date) -> FollowUpGuidance:
    """Evaluate a contact as of today."""
    return evaluate(contact.stage, days_since(contact.last_contact, today))


# =============================================================================
# QUEUES
# =============================================================================


def make_entry(
    contact: Contact,
    today: date,
    thresholds: StaleThresholds = DEFAULT_THRESHOLDS,
) -> FollowUpEntry:
    """Build the derived follow-up row for one contact."""
    days = days_since(contact.last_contact, today)
    guidance = evaluate(contact.stage, days)
    return FollowUpEntry(
        contact_id=contact.id,
        name=contact.name,
        company=contact.company,
        stage=_as_stage(contact.stage),
        days_since_contact=days,
        stale_level=classify(days, thresholds),
        suggestion=guidance.suggestion,
        priority=guidance.priority,
        score=contact.score,
        last_contact=contact.last_contact,
    )


def sort_queue(entries: Iterable[FollowUpEntry]) -> list[FollowUpEntry]:
    """Priority first (urgent..low), then most days since contact first."""
    return sorted(entries, key=lambda e: (e.priority.rank, -e.days_since_contact))


def build_follow_up_queue(
    contacts: Iterable[Contact],
    today: date,
    thresholds: StaleThresholds = DEFAULT_THRESHOLDS,
) -> list[FollowUpEntry]:
    """Smart follow-up queue over all non-passed contacts.

    Returns:
        Entries sorted by priority, ties broken by staleness descending
    """
    entries = [make_entry(c, today, thresholds) for c in contacts if not c.is_passed]
    queue = sort_queue(entries)
    logger.info(
        "Follow-up queue built",
        extra={
            "context": {
                "entries": len(queue),
                "urgent": sum(1 for e in queue if e.priority == Priority.URGENT),
            }
        },
    )
    return queue


def find_stale(
    contacts: Iterable[Contact],
    today: date,
    threshold: Optional[int] = None,
    thresholds: StaleThresholds = DEFAULT_THRESHOLDS,
) -> list[FollowUpEntry]:
    """Non-passed contacts at least `threshold` days without contact.

    Args:
        contacts: Contacts to scan
        today: Reference date
        threshold: Minimum days; defaults to the warning threshold
        thresholds: Staleness thresholds

    Returns:
        Entries sorted by days since contact, most stale first
    """
    if threshold is None:
        threshold = thresholds.warning

    stale = [
        make_entry(c, today, thresholds)
        for c in contacts
        if not c.is_passed and days_since(c.last_contact, today) >= threshold
    ]
    stale.sort(key=lambda e: -e.days_since_contact)
    return stale


# =============================================================================
# NUDGES
# =============================================================================

NUDGE_MIN_DAYS = 3


@dataclass
class Nudge:
    """Proactive follow-up reminder.

    Attributes:
        contact_id: Contact ID
        message: Reminder text
        priority: high (>14 days), medium (>7), else low
    """

    contact_id: Optional[int]
    message: str
    priority: Priority

    def to_dict(self) -> dict[str, Any]:
        return {
            "contact_id": self.contact_id,
            "message": self.message,
            "priority": self.priority.value,
        }


def _nudge_priority(days: int) -> Priority:
    if days > 14:
        return Priority.HIGH
    if days > 7:
        return Priority.MEDIUM
    return Priority.LOW


def build_nudges(contacts: Iterable[Contact], today: date, limit: int = 5) -> list[Nudge]:
    """Most-stale non-passed contacts untouched for more than three days."""
    candidates = [
        (days_since(c.last_contact, today), c)
        for c in contacts
        if not c.is_passed
    ]
    candidates = [(days, c) for days, c in candidates if days > NUDGE_MIN_DAYS]
    candidates.sort(key=lambda pair: -pair[0])

    return [
        Nudge(
            contact_id=c.id,
            message=f"{c.name} — {days} days since last contact. Follow up on {c.company}.",
            priority=_nudge_priority(days),
        )
        for days, c in candidates[:limit]
    ]
