"""Folio CRM Test Suite.

Test organization mirrors the folio/ package:
    tests/
    ├── conftest.py          # Shared fixtures
    ├── test_cli.py          # Command-line entry point
    ├── test_core/           # Config, logging, exceptions, clock
    ├── test_db/             # Models, repositories, intake
    └── test_engine/         # Staleness, follow-ups, notifications, agent
"""
