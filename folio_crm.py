#!/usr/bin/env python3
"""Folio CRM - Deal-flow intelligence for an investment pipeline.

Single entry point for the application.

Usage:
    python folio_crm.py add --name "Raj Patel" --company "Orbit Defense"
    python folio_crm.py contacts --stage diligence
    python folio_crm.py followups          # Smart follow-up queue
    python folio_crm.py notifications      # Stale and low-score alerts
    python folio_crm.py scan               # Agent proposals
    python folio_crm.py execute follow_up 3
    python folio_crm.py execute score_update 3 --delta -10
    python folio_crm.py brief 3            # Meeting prep (Markdown)
    python folio_crm.py --version
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

from folio import __version__
from folio.core.clock import SystemClock
from folio.core.config import get_config, validate_config
from folio.core.exceptions import FolioError
from folio.core.logging import get_logger, setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Folio CRM - Deal-flow intelligence for an investment pipeline"
    )
    parser.add_argument("--version", action="store_true", help="Show version and exit")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--db", help="Path to database file (overrides FOLIO_DB_PATH)")

    sub = parser.add_subparsers(dest="command")
    contacts = sub.add_parser("contacts", help="List or search contacts")
    contacts.add_argument("--query", help="Substring of name, company or email")
    contacts.add_argument("--stage", help="Stage filter (or \"all\")")

    add = sub.add_parser("add", help="Validate and add a contact")
    add.add_argument("--name", required=True)
    add.add_argument("--company", required=True)
    add.add_argument("--email")
    add.add_argument("--phone")
    add.add_argument("--stage")
    add.add_argument("--score", type=int)
    add.add_argument("--tag", action="append", dest="tags", help="Repeat for several tags")
    add.add_argument("--notes")

    sub.add_parser("followups", help="Follow-up queue sorted by priority")
    sub.add_parser("notifications", help="Notifications for stale and low-score leads")
    stale = sub.add_parser("stale", help="Contacts without recent contact")
    stale.add_argument("--threshold", type=int, help="Minimum days since contact")
    sub.add_parser("nudges", help="Top follow-up reminders")
    sub.add_parser("health", help="Pipeline health overview")
    sub.add_parser("aging", help="Average days per stage")
    sub.add_parser("analytics", help="Analytics overview")
    sub.add_parser("insights", help="Cross-pipeline insights")
    sub.add_parser("scan", help="Agent scan: propose actions")

    score = sub.add_parser("score", help="Time-decayed relationship score")
    score.add_argument("contact_id", type=int)

    execute = sub.add_parser("execute", help="Execute an approved agent action")
    execute.add_argument("action_type")
    execute.add_argument("contact_id", type=int)
    execute.add_argument("--delta", type=int, help="Score delta for score_update")

    brief = sub.add_parser("brief", help="Meeting prep brief (Markdown)")
    brief.add_argument("contact_id", type=int)
    memo = sub.add_parser("memo", help="Investment memo draft (Markdown)")
    memo.add_argument("contact_id", type=int)

    return parser


def run_command(args: argparse.Namespace, repo: Any, clock: Any) -> Any:
    """Dispatch one command. Returns a JSON-able value or a Markdown string."""
    from folio.db import intake
    from folio.engine import agent, briefs, followups, health, notifications, scoring
    from folio.engine.staleness import StaleThresholds

    config = get_config()
    thresholds = StaleThresholds.from_config(config)
    today = clock.today()

    if args.command == "contacts":
        return [c.to_dict() for c in repo.search(args.query, args.stage)]
    if args.command == "add":
        fields = ("name", "company", "email", "phone", "stage", "score", "tags", "notes")
        payload = {k: getattr(args, k) for k in fields if getattr(args, k) is not None}
        return repo.find(intake.create_contact(repo, payload, today)).to_dict()
    if args.command == "followups":
        return [e.to_dict() for e in followups.build_follow_up_queue(repo.list(), today, thresholds)]
    if args.command == "notifications":
        return [n.to_dict() for n in notifications.build_notifications(repo.list(), clock, thresholds)]
    if args.command == "stale":
        entries = followups.find_stale(repo.list(), today, args.threshold, thresholds)
        return [e.to_dict() for e in entries]
    if args.command == "nudges":
        return [n.to_dict() for n in followups.build_nudges(repo.list(), today, config.nudge_limit)]
    if args.command == "health":
        return health.pipeline_health(repo.list(), today, thresholds)
    if args.command == "aging":
        return health.stage_aging(repo.list(), today)
    if args.command == "analytics":
        return health.analytics_overview(repo.list(), today, thresholds)
    if args.command == "insights":
        return [i.to_dict() for i in health.generate_insights(repo.list(), today, thresholds)]
    if args.command == "scan":
        return [a.to_dict() for a in agent.propose_actions(repo.list(), today)]
    if args.command == "score":
        return scoring.score_relationship(repo.find(args.contact_id), today, config).to_dict()
    if args.command == "execute":
        params = {"delta": args.delta} if args.delta is not None else {}
        executor = agent.AgentExecutor(repo, clock)
        return executor.execute(args.contact_id, args.action_type, params).to_dict()
    if args.command == "brief":
        return briefs.render_meeting_prep(repo.find(args.contact_id), today)
    if args.command == "memo":
        return briefs.render_memo(repo.find(args.contact_id))
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for Folio CRM.

    Returns:
        Exit code (0 = success, non-zero = error)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"Folio CRM v{__version__}")
        return 0

    if args.command is None:
        parser.print_help()
        return 2

    config = get_config()
    if args.db:
        config.db_path = Path(args.db).expanduser().resolve()

    setup_logging(
        log_dir=config.log_path,
        console_level=logging.DEBUG if (args.debug or config.debug) else logging.WARNING,
    )
    logger = get_logger("main")
    logger.info(f"Folio CRM v{__version__} starting...")

    for issue in validate_config(config):
        if issue.startswith("CRITICAL:"):
            logger.error(f"Configuration: {issue}")
        else:
            logger.warning(f"Configuration issue: {issue}")

    from folio.db.database import Database

    db = Database(str(config.db_path))
    try:
        db.initialize()
        output = run_command(args, db, SystemClock())
    except FolioError as e:
        logger.error(f"{args.command} failed: {e}")
        print(json.dumps({"error": str(e)}), file=sys.stderr)
        return 1
    finally:
        db.close()

    if isinstance(output, str):
        print(output)
    else:
        print(json.dumps(output, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
