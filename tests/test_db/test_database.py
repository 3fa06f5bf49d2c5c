"""Tests for the SQLite contact repository."""

from datetime import date

import pytest

from folio.core.exceptions import ContactNotFoundError
from folio.db.database import SCHEMA_VERSION, Database
from folio.db.models import Contact, Stage


def _contact(**kwargs) -> Contact:
    defaults = dict(
        name="Sarah Chen",
        company="Vertex AI Ventures",
        email="sarah@vertexai.com",
        stage=Stage.PORTFOLIO,
        score=94,
        last_contact="2026-02-27",
        created_at="2024-08-01",
        tags=["AI", "Series B"],
        notes="Led $12M round.",
    )
    defaults.update(kwargs)
    return Contact(**defaults)


class TestDatabaseSetup:
    def test_initialize_is_repeatable(self, memory_db: Database):
        memory_db.initialize()
        assert memory_db.list() == []

    def test_records_schema_version(self, memory_db: Database):
        rows = memory_db._get_connection().execute("SELECT version FROM schema_version").fetchall()
        assert [r["version"] for r in rows] == [SCHEMA_VERSION]

    def test_file_database_creates_parent_dir(self, tmp_path):
        db = Database(str(tmp_path / "nested" / "folio.db"))
        db.initialize()
        db.create(_contact())
        db.close()
        assert (tmp_path / "nested" / "folio.db").exists()

        reopened = Database(str(tmp_path / "nested" / "folio.db"))
        assert reopened.list()[0].name == "Sarah Chen"
        reopened.close()


class TestContactOperations:
    def test_create_and_find(self, memory_db: Database):
        contact_id = memory_db.create(_contact())
        found = memory_db.find(contact_id)
        assert found.id == contact_id
        assert found.stage == Stage.PORTFOLIO
        assert found.tags == ["AI", "Series B"]
        assert found.last_contact == "2026-02-27"

    def test_date_objects_stored_as_iso_text(self, memory_db: Database):
        contact_id = memory_db.create(_contact(last_contact=date(2026, 2, 20)))
        assert memory_db.find(contact_id).last_contact == "2026-02-20"

    def test_unparsable_date_survives_round_trip(self, memory_db: Database):
        contact_id = memory_db.create(_contact(last_contact="last spring"))
        assert memory_db.find(contact_id).last_contact == "last spring"

    def test_score_clamped_on_write(self, memory_db: Database):
        contact_id = memory_db.create(_contact(score=150))
        assert memory_db.find(contact_id).score == 100

    def test_find_missing_raises(self, memory_db: Database):
        with pytest.raises(ContactNotFoundError):
            memory_db.find(1)

    def test_save_updates_fields_and_tags(self, memory_db: Database):
        contact_id = memory_db.create(_contact())
        contact = memory_db.find(contact_id)
        contact.stage = Stage.PASSED
        contact.tags = ["Revisit"]
        memory_db.save(contact)

        found = memory_db.find(contact_id)
        assert found.stage == Stage.PASSED
        assert found.tags == ["Revisit"]

    def test_save_unknown_raises(self, memory_db: Database):
        with pytest.raises(ContactNotFoundError):
            memory_db.save(_contact(id=77))

    def test_delete_cascades_tags(self, memory_db: Database):
        contact_id = memory_db.create(_contact())
        removed = memory_db.delete(contact_id)
        assert removed.name == "Sarah Chen"
        assert memory_db.get_tags(contact_id) == []
        assert memory_db.get_all_tags() == []

    def test_list_in_id_order_with_tags(self, memory_db: Database):
        memory_db.create(_contact(name="First", tags=["b"]))
        memory_db.create(_contact(name="Second", email="x@y.com", tags=[]))
        contacts = memory_db.list()
        assert [c.name for c in contacts] == ["First", "Second"]
        assert contacts[0].tags == ["b"]
        assert contacts[1].tags == []

    def test_unknown_stored_stage_reads_as_prospect(self, memory_db: Database):
        contact_id = memory_db.create(_contact())
        memory_db._get_connection().execute(
            "UPDATE contacts SET stage = 'limbo' WHERE id = ?", (contact_id,)
        )
        assert memory_db.find(contact_id).stage == Stage.PROSPECT

    def test_get_all_tags_is_distinct_and_sorted(self, memory_db: Database):
        memory_db.create(_contact(tags=["Seed", "AI"]))
        memory_db.create(_contact(email="b@b.com", tags=["AI"]))
        assert memory_db.get_all_tags() == ["AI", "Seed"]

    def test_lock_for_is_shared_per_contact(self, memory_db: Database):
        lock = memory_db.lock_for(1)
        assert memory_db.lock_for(1) is lock
        assert memory_db.lock_for(2) is not lock
