"""Folio CRM - deal-flow decision engine.

Tracks relationships in an investment pipeline and decides how stale each
one is, what follow-up it needs, and which changes an autonomous agent
may propose or execute.
"""

__version__ = "0.1.0"
