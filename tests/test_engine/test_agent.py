"""Tests for agent proposals and execution."""

import threading
import time
from datetime import date

import pytest

from folio.core.clock import FixedClock
from folio.core.exceptions import ContactNotFoundError, InvalidActionError
from folio.db.models import ActionType, Contact, Impact, Stage
from folio.db.repository import InMemoryContactRepository
from folio.engine.agent import AgentExecutor, execute_action, propose_actions


class TestProposeActions:
    def test_follow_up_rule(self, make_contact, today: date):
        contacts = [
            make_contact(days=13, stage=Stage.INTRO, contact_id=1),
            make_contact(days=14, stage=Stage.INTRO, contact_id=2),
            make_contact(days=21, stage=Stage.INTRO, contact_id=3, name="Elena"),
        ]
        actions = propose_actions(contacts, today)
        assert [(a.contact_id, a.impact) for a in actions] == [
            (2, Impact.MEDIUM),
            (3, Impact.HIGH),
        ]
        assert actions[1].description == "Schedule follow-up with Elena"
        assert actions[1].reason == "21 days since last contact (intro stage)."

    def test_stage_progression_rule(self, make_contact, today: date):
        contacts = [
            make_contact(days=1, stage=Stage.PROSPECT, score=65, contact_id=1, name="Raj"),
            make_contact(days=1, stage=Stage.PROSPECT, score=64, contact_id=2),
            make_contact(days=1, stage=Stage.INTRO, score=90, contact_id=3),
        ]
        actions = propose_actions(contacts, today)
        assert len(actions) == 1
        assert actions[0].type == ActionType.STAGE_PROGRESSION
        assert actions[0].description == "Move Raj from Prospect to Intro"
        assert actions[0].reason == "Score 65/100 suggests readiness."
        assert actions[0].impact == Impact.HIGH

    def test_score_update_rule(self, make_contact, today: date):
        contacts = [
            make_contact(days=30, stage=Stage.INTRO, score=41, contact_id=1),
            make_contact(days=30, stage=Stage.INTRO, score=40, contact_id=2),
        ]
        actions = propose_actions(contacts, today)
        decays = [a for a in actions if a.type == ActionType.SCORE_UPDATE]
        assert [a.contact_id for a in decays] == [1]
        assert decays[0].reason == "No contact for 30 days."

    def test_rules_are_independent_and_ordered(self, make_contact, today: date):
        contact = make_contact(days=25, stage=Stage.PROSPECT, score=62, contact_id=3)
        assert [a.type for a in propose_actions([contact], today)] == [ActionType.FOLLOW_UP]

        contact = make_contact(days=35, stage=Stage.PROSPECT, score=70, contact_id=3)
        assert [a.type for a in propose_actions([contact], today)] == [
            ActionType.FOLLOW_UP,
            ActionType.STAGE_PROGRESSION,
            ActionType.SCORE_UPDATE,
        ]

    def test_warm_prospect_gets_follow_up_and_progression(self, make_contact, today: date):
        contact = make_contact(days=25, stage=Stage.PROSPECT, score=70, contact_id=3)
        actions = propose_actions([contact], today)
        assert [(a.type, a.impact) for a in actions] == [
            (ActionType.FOLLOW_UP, Impact.HIGH),
            (ActionType.STAGE_PROGRESSION, Impact.HIGH),
        ]

    def test_passed_contacts_never_proposed(self, make_contact, today: date):
        contact = make_contact(days=90, stage=Stage.PASSED, score=99)
        assert propose_actions([contact], today) == []

    def test_ids_and_status(self, make_contact, today: date):
        contacts = [make_contact(days=20, score=50, contact_id=i) for i in (5, 9)]
        actions = propose_actions(contacts, today)
        assert [a.id for a in actions] == [1, 2]
        assert all(a.to_dict()["status"] == "proposed" for a in actions)

    def test_scan_does_not_mutate(self, make_contact, today: date):
        contact = make_contact(days=40, stage=Stage.PROSPECT, score=80)
        before = contact.to_dict()
        propose_actions([contact], today)
        assert contact.to_dict() == before

    def test_unparsable_last_contact_reads_as_long_silence(self, today: date):
        contact = Contact(
            id=1, name="Ana", company="Kite", stage=Stage.INTRO, score=70, last_contact="??"
        )
        actions = propose_actions([contact], today)
        assert [(a.type, a.impact) for a in actions] == [
            (ActionType.FOLLOW_UP, Impact.HIGH),
            (ActionType.SCORE_UPDATE, Impact.MEDIUM),
        ]
        assert actions[0].reason == "999 days since last contact (intro stage)."
        assert actions[1].reason == "No contact for 999 days."


class TestExecuteAction:
    @pytest.mark.parametrize(
        "start, expected",
        [
            (Stage.PROSPECT, Stage.INTRO),
            (Stage.INTRO, Stage.DILIGENCE),
            (Stage.DILIGENCE, Stage.PORTFOLIO),
        ],
    )
    def test_stage_progression_advances_one_step(self, start, expected, today: date):
        contact = Contact(stage=start)
        result = execute_action(contact, "stage_progression", None, today)
        assert contact.stage == expected
        assert result.description == f"Moved to {expected.value}"

    @pytest.mark.parametrize("stage", [Stage.PORTFOLIO, Stage.PASSED])
    def test_stage_progression_stops_at_terminal(self, stage, today: date):
        contact = Contact(stage=stage)
        result = execute_action(contact, ActionType.STAGE_PROGRESSION, None, today)
        assert result.success
        assert contact.stage == stage

    def test_follow_up_sets_last_contact(self, today: date):
        contact = Contact(last_contact="2025-01-01")
        result = execute_action(contact, "follow_up", None, today)
        assert contact.last_contact == today
        assert result.description == "Follow-up scheduled and last_contact updated"

    def test_score_update_default_delta(self, today: date):
        contact = Contact(score=62)
        result = execute_action(contact, "score_update", None, today)
        assert result.description == "Score updated to 47"

    @pytest.mark.parametrize("score, expected", [(48, 33), (10, 0)])
    def test_score_update_default_delta_clamps_at_zero(self, score, expected, today: date):
        contact = Contact(score=score)
        execute_action(contact, ActionType.SCORE_UPDATE, None, today)
        assert contact.score == expected

    @pytest.mark.parametrize("score, delta, expected", [(10, -15, 0), (95, 20, 100), (50, 5, 55)])
    def test_score_update_clamps(self, score, delta, expected, today: date):
        contact = Contact(score=score)
        execute_action(contact, "score_update", {"delta": delta}, today)
        assert contact.score == expected

    def test_archive(self, today: date):
        contact = Contact(stage=Stage.DILIGENCE)
        assert execute_action(contact, "archive", None, today).description == "Archived"
        assert contact.stage == Stage.PASSED

    def test_unknown_type_leaves_contact_untouched(self, today: date):
        contact = Contact(stage=Stage.INTRO, score=70)
        result = execute_action(contact, "teleport", None, today)
        assert result.to_dict() == {"success": False, "error": "Unknown action type"}
        assert (contact.stage, contact.score) == (Stage.INTRO, 70)


class TestAgentExecutor:
    @pytest.fixture
    def executor(self, repo: InMemoryContactRepository, fixed_clock: FixedClock) -> AgentExecutor:
        return AgentExecutor(repo, fixed_clock)

    def test_execute_persists(self, repo, executor, make_contact):
        contact_id = repo.create(make_contact(days=40, stage=Stage.PROSPECT))
        executor.execute(contact_id, "follow_up")
        assert str(repo.find(contact_id).last_contact) == "2026-03-02"

    def test_execute_is_not_idempotent(self, repo, executor, make_contact):
        contact_id = repo.create(make_contact(stage=Stage.PROSPECT, score=62))

        executor.execute(contact_id, "stage_progression")
        executor.execute(contact_id, "stage_progression")
        assert repo.find(contact_id).stage == Stage.DILIGENCE

        executor.execute(contact_id, "score_update")
        executor.execute(contact_id, "score_update")
        assert repo.find(contact_id).score == 32

    def test_missing_contact_raises(self, executor):
        with pytest.raises(ContactNotFoundError):
            executor.execute(404, "archive")

    def test_unknown_type_returns_failure(self, repo, executor, make_contact):
        contact_id = repo.create(make_contact())
        assert executor.execute(contact_id, "teleport").success is False

    def test_execute_or_raise(self, repo, executor, make_contact):
        contact_id = repo.create(make_contact())
        with pytest.raises(InvalidActionError):
            executor.execute_or_raise(contact_id, "teleport")
        assert executor.execute_or_raise(contact_id, "archive").success

    def test_scan_then_execute(self, repo, executor, make_contact, today: date):
        repo.create(make_contact(days=25, stage=Stage.PROSPECT, score=70))
        for action in propose_actions(repo.list(), today):
            executor.execute(action.contact_id, action.type)
        contact = repo.list()[0]
        assert contact.stage == Stage.INTRO
        assert str(contact.last_contact) == "2026-03-02"
        assert propose_actions(repo.list(), today) == []


class SlowFindRepository(InMemoryContactRepository):
    """Widens the window between find() and save()."""

    def find(self, contact_id: int) -> Contact:
        contact = super().find(contact_id)
        time.sleep(0.01)
        return contact


class TestExecutorConcurrency:
    def test_same_contact_updates_are_serialized(self, make_contact, fixed_clock):
        repo = InMemoryContactRepository()
        contact_id = repo.create(make_contact(score=100))
        executor = AgentExecutor(repo, fixed_clock)

        def worker() -> None:
            for _ in range(10):
                executor.execute(contact_id, "score_update", {"delta": -1})

        threads = [threading.Thread(target=worker) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert repo.find(contact_id).score == 50

    def test_snapshot_during_writes_sees_whole_contacts(self, make_contact, fixed_clock):
        repo = InMemoryContactRepository()
        ids = [repo.create(make_contact(stage=Stage.PROSPECT, score=50)) for _ in range(10)]
        executor = AgentExecutor(repo, fixed_clock)
        errors: list[str] = []

        def writer() -> None:
            for contact_id in ids:
                executor.execute(contact_id, "archive")

        def reader() -> None:
            for _ in range(50):
                for contact in repo.list():
                    if contact.stage not in (Stage.PROSPECT, Stage.PASSED):
                        errors.append(contact.stage)

        threads = [threading.Thread(target=writer), threading.Thread(target=reader)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert all(c.stage == Stage.PASSED for c in repo.list())

    def test_executors_sharing_a_repository_serialize_writes(self, make_contact, fixed_clock):
        repo = SlowFindRepository()
        contact_id = repo.create(make_contact(score=100))

        def worker() -> None:
            executor = AgentExecutor(repo, fixed_clock)
            for _ in range(10):
                executor.execute(contact_id, "score_update", {"delta": -1})

        threads = [threading.Thread(target=worker) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert repo.find(contact_id).score == 50

    def test_lock_registry_drops_unused_entries(self, repo, fixed_clock):
        executor = AgentExecutor(repo, fixed_clock)
        for contact_id in range(1000, 1100):
            try:
                executor.execute(contact_id, "archive")
            except ContactNotFoundError:
                pass
        assert len(repo._contact_locks) == 0

    def test_lock_is_shared_while_held(self, repo):
        lock = repo.lock_for(7)
        assert repo.lock_for(7) is lock
        assert repo.lock_for(8) is not lock
