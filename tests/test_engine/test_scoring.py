"""Tests for the time-decayed relationship score."""

from datetime import date

import pytest

from folio.core.config import Config
from folio.db.models import Contact, Stage
from folio.engine.scoring import decayed_score, score_relationship


@pytest.fixture
def offline_config(mock_config: Config) -> Config:
    mock_config.openai_api_key = None
    mock_config.anthropic_api_key = None
    return mock_config


class TestDecayedScore:
    @pytest.mark.parametrize(
        "base, days, expected",
        [(80, 0, 80), (80, 6, 80), (80, 7, 79), (80, 22, 77), (80, 400, 70), (5, 70, 0)],
    )
    def test_one_point_per_week_capped(self, base, days, expected):
        assert decayed_score(base, days) == expected


class TestScoreRelationship:
    def test_reasoning_for_stale_contact(self, make_contact, today: date, offline_config):
        contact = make_contact(
            days=22, score=80, name="Priya Nair", company="Aeroform", tags=["Defense"], contact_id=3
        )
        result = score_relationship(contact, today, offline_config)
        assert result.score == 77
        assert result.live is False
        assert result.reasoning == (
            "Score 77/100. Priya Nair at Aeroform (prospect). "
            "Last contact 22 days ago. Tags: Defense. "
        )
        assert result.to_dict() == {"score": 77, "reasoning": result.reasoning, "contact_id": 3}

    def test_recent_contact_noted(self, make_contact, today: date, offline_config):
        result = score_relationship(make_contact(days=0, stage=Stage.INTRO), today, offline_config)
        assert result.reasoning.endswith("(intro). Strong recent engagement.")

    def test_unparsable_date_assumes_thirty_days(self, today: date, offline_config):
        contact = Contact(name="X", company="Y", score=60, last_contact="??")
        assert score_relationship(contact, today, offline_config).score == 56

    def test_live_flag_returns_stored_score(self, make_contact, today: date, offline_config):
        offline_config.anthropic_api_key = "sk-test"
        result = score_relationship(make_contact(days=60, score=88), today, offline_config)
        assert result.live is True
        assert result.score == 88
