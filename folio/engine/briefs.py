"""Meeting-prep briefs and investment memo drafts using Jinja2.

Templates live in folio/templates and render Markdown.

Template types:
    - meeting_prep: Pre-meeting briefing with talking points
    - memo: Investment memo draft

Usage:
    from folio.engine.briefs import render_meeting_prep, render_memo

    markdown = render_meeting_prep(contact, clock.today())
"""

from datetime import date
from pathlib import Path
from typing import Any, Optional

import jinja2

from folio.core.logging import get_logger
from folio.db.models import Contact, Stage, days_since

logger = get_logger(__name__)


TEMPLATE_DIR = Path(__file__).parent.parent / "templates"

# Jinja2 environment (created once, reused)
_env: Optional[jinja2.Environment] = None


def _get_env() -> jinja2.Environment:
    """Get or create the Jinja2 environment."""
    global _env
    if _env is None:
        _env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
            autoescape=False,
            undefined=jinja2.StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
    return _env


def _contact_context(contact: Contact) -> dict[str, Any]:
    stage = contact.stage.value if isinstance(contact.stage, Stage) else contact.stage
    return {
        "contact": contact,
        "stage": stage,
        "tags": ", ".join(contact.tags),
        "last_contact": contact.to_dict()["last_contact"],
    }


def render_template(template_name: str, **context: Any) -> str:
    """Render a Markdown template.

    Raises:
        jinja2.TemplateNotFound: If template does not exist
    """
    template = _get_env().get_template(f"{template_name}.md.j2")
    return template.render(**context)


def render_meeting_prep(contact: Contact, today: date) -> str:
    """Pre-meeting briefing for a contact.

    An unparsable last_contact is reported as 0 days ago.
    """
    context = _contact_context(contact)
    context["days_since"] = days_since(contact.last_contact, today, default=0)
    brief = render_template("meeting_prep", **context)
    logger.info("Meeting prep rendered", extra={"context": {"contact_id": contact.id}})
    return brief


def render_memo(contact: Contact) -> str:
    """Investment memo draft for a contact."""
    memo = render_template("memo", **_contact_context(contact))
    logger.info("Memo rendered", extra={"context": {"contact_id": contact.id}})
    return memo
