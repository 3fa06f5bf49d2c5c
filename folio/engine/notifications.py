"""In-app notifications for decaying relationships.

Per non-passed contact, in this order:
    1. At most one staleness notification (dead, critical, or warning)
    2. A low-score notification when score < 50

IDs count from 1 across the whole scan, so one contact can take two.
The final list is sorted by priority only. Python's sort is stable, so
notifications of equal priority keep emission order. Unlike the
follow-up queue there is no staleness tie-break.

Usage:
    from folio.engine.notifications import build_notifications

    notifications = build_notifications(repo.list(), clock)
"""

import itertools
from typing import Iterable, Iterator

from folio.core.clock import Clock
from folio.core.logging import get_logger
from folio.db.models import (
    Contact,
    Notification,
    NotificationType,
    Priority,
    StalenessLevel,
    days_since,
)
from folio.engine.staleness import DEFAULT_THRESHOLDS, StaleThresholds, classify

logger = get_logger(__name__)

LOW_SCORE_THRESHOLD = 50


def _staleness_notification(
    contact: Contact,
    days: int,
    level: StalenessLevel,
    ids: Iterator[int],
    created_at: str,
) -> Notification | None:
    if level == StalenessLevel.DEAD:
        return Notification(
            id=next(ids),
            type=NotificationType.DEAD_LEAD,
            priority=Priority.URGENT,
            title=f"Dead lead: {contact.name}",
            contact_id=contact.id,
            message=f"{contact.name} at {contact.company} — {days} days no contact. Likely lost.",
            created_at=created_at,
        )
    if level == StalenessLevel.CRITICAL:
        return Notification(
            id=next(ids),
            type=NotificationType.STALE_LEAD,
            priority=Priority.HIGH,
            title=f"Critical: {contact.name}",
            contact_id=contact.id,
            message=f"{days} days since last contact. Relationship decaying.",
            created_at=created_at,
        )
    if level == StalenessLevel.WARNING:
        return Notification(
            id=next(ids),
            type=NotificationType.STALE_LEAD,
            priority=Priority.MEDIUM,
            title=f"Warning: {contact.name}",
            contact_id=contact.id,
            message=f"{days} days since last contact. Schedule a touchpoint.",
            created_at=created_at,
        )
    return None


def build_notifications(
    contacts: Iterable[Contact],
    clock: Clock,
    thresholds: StaleThresholds = DEFAULT_THRESHOLDS,
) -> list[Notification]:
    """Synthesize notifications for all non-passed contacts.

    Args:
        contacts: Contact snapshot, in repository order
        clock: Source of today's date and the created_at stamp
        thresholds: Staleness thresholds

    Returns:
        Notifications sorted by priority (stable)
    """
    today = clock.today()
    created_at = clock.now().isoformat()
    ids = itertools.count(1)
    notifications: list[Notification] = []

    for contact in contacts:
        if contact.is_passed:
            continue
        days = days_since(contact.last_contact, today)
        level = classify(days, thresholds)

        stale = _staleness_notification(contact, days, level, ids, created_at)
        if stale is not None:
            notifications.append(stale)

        if contact.score < LOW_SCORE_THRESHOLD:
            notifications.append(
                Notification(
                    id=next(ids),
                    type=NotificationType.SCORE_DROP,
                    priority=Priority.MEDIUM,
                    title=f"Low score: {contact.name}",
                    contact_id=contact.id,
                    message=(
                        f"AI score {contact.score}/100 for {contact.company}. "
                        "Review thesis alignment."
                    ),
                    created_at=created_at,
                )
            )

    notifications.sort(key=lambda n: n.priority.rank)
    logger.info(
        "Notifications built",
        extra={"context": {"count": len(notifications)}},
    )
    return notifications
