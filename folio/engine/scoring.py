"""Relationship score with time decay.

Not a model. The stored score loses one point per full week without
contact, capped at ten points:

    decay = min(days // 7, 10)
    score = clamp(base - decay)

When an LLM key is configured the result is flagged as live and the
stored score is returned unchanged, pending a real scorer.

Usage:
    from folio.engine.scoring import score_relationship

    result = score_relationship(contact, clock.today())
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from folio.core.config import Config, get_config
from folio.core.logging import get_logger
from folio.db.models import Contact, Stage, clamp_score, days_since

logger = get_logger(__name__)

MAX_DECAY = 10
# Days assumed when last_contact cannot be parsed
UNKNOWN_CONTACT_DAYS = 30


@dataclass
class RelationshipScore:
    """Scored contact with explanation."""

    contact_id: Optional[int]
    score: int
    reasoning: str
    live: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "reasoning": self.reasoning,
            "contact_id": self.contact_id,
        }


def decayed_score(base: int, days: int) -> int:
    """Apply weekly decay to a base score."""
    decay = min(days // 7, MAX_DECAY)
    return clamp_score(base - decay)


def score_relationship(
    contact: Contact,
    today: date,
    config: Optional[Config] = None,
) -> RelationshipScore:
    """Score a contact and explain the number."""
    config = config or get_config()

    if config.ai_available:
        return RelationshipScore(
            contact_id=contact.id,
            score=contact.score,
            reasoning="Live AI scoring — wire API key to enable",
            live=True,
        )

    days = days_since(contact.last_contact, today, default=UNKNOWN_CONTACT_DAYS)
    computed = decayed_score(contact.score, days)
    stage = contact.stage.value if isinstance(contact.stage, Stage) else contact.stage

    reasoning = f"Score {computed}/100. {contact.name} at {contact.company} ({stage}). "
    if days > 0:
        reasoning += f"Last contact {days} days ago. "
    if contact.tags:
        reasoning += f"Tags: {', '.join(contact.tags)}. "
    if days < 7:
        reasoning += "Strong recent engagement."

    logger.debug(
        "Relationship scored",
        extra={"context": {"contact_id": contact.id, "base": contact.score, "score": computed}},
    )
    return RelationshipScore(contact_id=contact.id, score=computed, reasoning=reasoning)
