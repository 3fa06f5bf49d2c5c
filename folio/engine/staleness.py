"""Staleness classification - how long since we last spoke.

    active   < 14 days
    warning  14-20 days
    critical 21-29 days
    dead     30+ days

Thresholds are inclusive lower bounds; the highest matching level wins.

Usage:
    from folio.engine.staleness import classify, classify_staleness

    level = classify(22)  # StalenessLevel.CRITICAL
"""

from dataclasses import dataclass
from datetime import date

from folio.core.config import Config
from folio.db.models import Contact, StalenessLevel, days_since


@dataclass(frozen=True)
class StaleThresholds:
    """Days without contact before each staleness level applies."""

    warning: int = 14
    critical: int = 21
    dead: int = 30

    @classmethod
    def from_config(cls, config: Config) -> "StaleThresholds":
        return cls(
            warning=config.stale_warning_days,
            critical=config.stale_critical_days,
            dead=config.stale_dead_days,
        )


DEFAULT_THRESHOLDS = StaleThresholds()


def classify(days: int, thresholds: StaleThresholds = DEFAULT_THRESHOLDS) -> StalenessLevel:
    """Map days-since-contact to a staleness level. Total and pure."""
    if days >= thresholds.dead:
        return StalenessLevel.DEAD
    if days >= thresholds.critical:
        return StalenessLevel.CRITICAL
    if days >= thresholds.warning:
        return StalenessLevel.WARNING
    return StalenessLevel.ACTIVE


def classify_staleness(
    contact: Contact,
    today: date,
    thresholds: StaleThresholds = DEFAULT_THRESHOLDS,
) -> StalenessLevel:
    """Classify a contact. An unparsable last_contact reads as dead."""
    return classify(days_since(contact.last_contact, today), thresholds)
