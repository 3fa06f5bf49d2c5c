"""Create a small demo database with a realistic pipeline."""

from __future__ import annotations

import argparse
import sys
from datetime import date, timedelta
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from folio.db.database import Database
from folio.db.models import Contact, Stage


def demo_contacts(today: date) -> list[Contact]:
    """Eight contacts spread across every stage and staleness level."""

    def ago(days: int) -> str:
        return (today - timedelta(days=days)).isoformat()

    return [
        Contact(name="Sarah Chen", email="sarah@vertexai.com", phone="+14152001001",
                company="Vertex AI Ventures", stage=Stage.PORTFOLIO, tags=["AI", "Series B"],
                last_contact=ago(3), score=94,
                notes="Led $12M round. Strong alignment on AI thesis.", created_at="2024-08-01"),
        Contact(name="Marcus Rivera", email="m.rivera@deeplogic.io", phone="+16503002020",
                company="DeepLogic", stage=Stage.DILIGENCE, tags=["ML", "Seed"],
                last_contact=ago(5), score=78,
                notes="Robotics automation. Impressive traction in logistics.", created_at="2025-01-15"),
        Contact(name="Priya Nair", email="priya@aeroform.io", phone="+14089003030",
                company="Aeroform", stage=Stage.PROSPECT, tags=["Defense", "Pre-Seed"],
                last_contact=ago(25), score=62,
                notes="Drone swarm coordination. Waiting on IP clearance.", created_at="2025-01-20"),
        Contact(name="James Okafor", email="james@chainvault.xyz", phone="+12124004040",
                company="ChainVault", stage=Stage.PASSED, tags=["Crypto", "Series A"],
                last_contact=ago(60), score=45,
                notes="Pass — market timing uncertain. Revisit Q3.", created_at="2024-11-10"),
        Contact(name="Elena Vasquez", email="e.vasquez@lumensolar.com", phone="+17205005050",
                company="LumenSolar", stage=Stage.INTRO, tags=["Energy", "Seed"],
                last_contact=ago(2), score=71,
                notes="Novel perovskite efficiency claims.", created_at="2025-02-01"),
        Contact(name="Tomoko Sato", email="tomoko@neuralweave.ai", phone="+16287006060",
                company="NeuralWeave", stage=Stage.DILIGENCE, tags=["AI", "Seed"],
                last_contact=ago(1), score=85,
                notes="Edge AI inference engine. Ex-TPU team.", created_at="2025-02-05"),
        Contact(name="Raj Patel", email="raj@orbitdefense.io", phone="+15718007070",
                company="Orbit Defense", stage=Stage.PROSPECT, tags=["Defense", "Seed"],
                last_contact=ago(10), score=58,
                notes="Satellite comms for contested environments.", created_at="2025-02-10"),
        Contact(name="Amara Osei", email="amara@stackfinance.com", phone="+13479008080",
                company="StackFinance", stage=Stage.INTRO, tags=["Fintech", "Pre-Seed"],
                last_contact=ago(4), score=66,
                notes="Embedded lending for SaaS platforms.", created_at="2025-02-12"),
    ]


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed a Folio demo database")
    parser.add_argument("--db", default="data/demo/folio_demo.db", help="Database path")
    args = parser.parse_args()

    demo_db = Path(args.db)
    demo_db.parent.mkdir(parents=True, exist_ok=True)

    db = Database(str(demo_db))
    db.initialize()
    for contact in demo_contacts(date.today()):
        db.create(contact)
    db.close()

    print(f"Demo database ready: {demo_db}")


if __name__ == "__main__":
    main()
