"""Autonomous pipeline agent - propose, then execute on approval.

Scan (read-only), per non-passed contact, three independent rules:
    - follow_up:          14+ days without contact (high impact at 21+)
    - stage_progression:  prospect scoring 65+
    - score_update:       30+ days without contact and score above 40

Execute (one action, one contact):
    - stage_progression:  prospect -> intro -> diligence -> portfolio
    - follow_up:          last_contact = today
    - score_update:       score += delta (default -15), clamped to 0-100
    - archive:            stage = passed

Execution is NOT idempotent: repeating stage_progression advances again,
repeating score_update applies the delta again.

Usage:
    from folio.engine.agent import AgentExecutor, propose_actions

    actions = propose_actions(repo.list(), clock.today())
    executor = AgentExecutor(repo, clock)
    result = executor.execute(actions[0].contact_id, actions[0].type)
"""

import itertools
from datetime import date
from typing import Any, Iterable, Optional, Union

from folio.core.clock import Clock, SystemClock
from folio.core.exceptions import InvalidActionError
from folio.core.logging import get_logger
from folio.db.models import (
    ActionResult,
    ActionType,
    AgentAction,
    Contact,
    Impact,
    Stage,
    clamp_score,
    days_since,
)
from folio.db.repository import ContactRepository

logger = get_logger(__name__)


# =============================================================================
# PROPOSAL RULES
# =============================================================================

FOLLOW_UP_MIN_DAYS = 14
FOLLOW_UP_HIGH_IMPACT_DAYS = 21
PROGRESSION_MIN_SCORE = 65
DECAY_MIN_DAYS = 30
DECAY_MIN_SCORE = 40
DEFAULT_SCORE_DELTA = -15

NEXT_STAGE: dict[Stage, Stage] = {
    Stage.PROSPECT: Stage.INTRO,
    Stage.INTRO: Stage.DILIGENCE,
    Stage.DILIGENCE: Stage.PORTFOLIO,
}


def _stage_name(stage: Union[Stage, str]) -> str:
    return stage.value if isinstance(stage, Stage) else str(stage)


def propose_actions(contacts: Iterable[Contact], today: date) -> list[AgentAction]:
    """Scan contacts and propose actions. Mutates nothing.

    Returns:
        Actions in contact-then-rule order, ids counting from 1
    """
    ids = itertools.count(1)
    actions: list[AgentAction] = []

    for c in contacts:
        if c.is_passed:
            continue
        days = days_since(c.last_contact, today)

        if days >= FOLLOW_UP_MIN_DAYS:
            actions.append(
                AgentAction(
                    id=next(ids),
                    type=ActionType.FOLLOW_UP,
                    contact_id=c.id,
                    contact_name=c.name,
                    company=c.company,
                    description=f"Schedule follow-up with {c.name}",
                    reason=f"{days} days since last contact ({_stage_name(c.stage)} stage).",
                    impact=Impact.HIGH if days >= FOLLOW_UP_HIGH_IMPACT_DAYS else Impact.MEDIUM,
                )
            )

        if c.stage == Stage.PROSPECT and c.score >= PROGRESSION_MIN_SCORE:
            actions.append(
                AgentAction(
                    id=next(ids),
                    type=ActionType.STAGE_PROGRESSION,
                    contact_id=c.id,
                    contact_name=c.name,
                    company=c.company,
                    description=f"Move {c.name} from Prospect to Intro",
                    reason=f"Score {c.score}/100 suggests readiness.",
                    impact=Impact.HIGH,
                )
            )

        if days >= DECAY_MIN_DAYS and c.score > DECAY_MIN_SCORE:
            actions.append(
                AgentAction(
                    id=next(ids),
                    type=ActionType.SCORE_UPDATE,
                    contact_id=c.id,
                    contact_name=c.name,
                    company=c.company,
                    description=f"Decrease {c.name}'s score by {DEFAULT_SCORE_DELTA}",
                    reason=f"No contact for {days} days.",
                    impact=Impact.MEDIUM,
                )
            )

    logger.info("Agent scan complete", extra={"context": {"proposed": len(actions)}})
    return actions


# =============================================================================
# EXECUTION
# =============================================================================


def execute_action(
    contact: Contact,
    action_type: Union[ActionType, str],
    params: Optional[dict[str, Any]],
    today: date,
) -> ActionResult:
    """Apply one action to one contact in place.

    Unknown action types are reported as a failed result and leave the
    contact untouched.

    Nothing is persisted or locked here; stored contacts go through
    AgentExecutor, which holds the repository's per-contact lock.

    Args:
        contact: Contact to mutate
        action_type: Action to apply
        params: Action parameters ("delta" for score_update)
        today: Date written by follow_up

    Returns:
        ActionResult describing the change
    """
    params = params or {}
    try:
        kind = ActionType(action_type)
    except ValueError:
        logger.warning(
            "Unknown agent action type",
            extra={"context": {"contact_id": contact.id, "action_type": str(action_type)}},
        )
        return ActionResult(success=False, error="Unknown action type")

    if kind == ActionType.STAGE_PROGRESSION:
        new_stage = NEXT_STAGE.get(contact.stage)
        if new_stage is None:
            return ActionResult(
                success=True,
                description=f"No stage change (already {_stage_name(contact.stage)})",
            )
        contact.stage = new_stage
        return ActionResult(success=True, description=f"Moved to {new_stage.value}")

    if kind == ActionType.FOLLOW_UP:
        contact.last_contact = today
        return ActionResult(
            success=True,
            description="Follow-up scheduled and last_contact updated",
        )

    if kind == ActionType.SCORE_UPDATE:
        delta = params.get("delta")
        if delta is None:
            delta = DEFAULT_SCORE_DELTA
        contact.score = clamp_score(contact.score + int(delta))
        return ActionResult(success=True, description=f"Score updated to {contact.score}")

    # ARCHIVE
    contact.stage = Stage.PASSED
    return ActionResult(success=True, description="Archived")


class AgentExecutor:
    """Executes approved actions against a repository.

    The find-mutate-save sequence runs under the repository's lock for
    that contact, so executors sharing a repository serialize writes to
    one contact while different contacts proceed in parallel.
    """

    def __init__(self, repo: ContactRepository, clock: Optional[Clock] = None):
        self.repo = repo
        self.clock = clock or SystemClock()

    def execute(
        self,
        contact_id: int,
        action_type: Union[ActionType, str],
        params: Optional[dict[str, Any]] = None,
    ) -> ActionResult:
        """Execute one action on one stored contact.

        Raises:
            ContactNotFoundError: If the contact does not exist
        """
        with self.repo.lock_for(contact_id):
            contact = self.repo.find(contact_id)
            before = (contact.stage, contact.score, contact.last_contact)
            result = execute_action(contact, action_type, params, self.clock.today())
            if result.success and (contact.stage, contact.score, contact.last_contact) != before:
                self.repo.save(contact)

        if result.success:
            logger.info(
                "Agent action executed",
                extra={
                    "context": {
                        "contact_id": contact_id,
                        "action_type": str(getattr(action_type, "value", action_type)),
                        "result": result.description,
                    }
                },
            )
        return result

    def execute_or_raise(
        self,
        contact_id: int,
        action_type: Union[ActionType, str],
        params: Optional[dict[str, Any]] = None,
    ) -> ActionResult:
        """Like execute(), but an unknown action type raises.

        Raises:
            ContactNotFoundError: If the contact does not exist
            InvalidActionError: If the action type is not recognised
        """
        result = self.execute(contact_id, action_type, params)
        if not result.success:
            raise InvalidActionError(f"{result.error}: {action_type}")
        return result
