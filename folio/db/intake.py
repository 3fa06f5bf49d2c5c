"""Contact intake - validation and normalization at the boundary.

Incoming payloads are loosely typed dicts. Nothing reaches the engine
until it has been validated here and turned into a Contact.

Rules:
    - name and company are required
    - email, when present, must look like an address
    - stage must be a known stage
    - score must be 0-100
    - on create, email must not duplicate an existing contact

Usage:
    from folio.db.intake import create_contact

    contact_id = create_contact(repo, {"name": "Raj Patel", "company": "Orbit"}, today)
"""

import re
from datetime import date
from typing import Any, Optional

from folio.core.exceptions import ValidationError
from folio.core.logging import get_logger
from folio.db.models import VALID_STAGES, Contact, Stage, clamp_score
from folio.db.repository import ContactRepository

logger = get_logger(__name__)

EMAIL_REGEX = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_TAG_RE = re.compile(r"<[^>]*>")


def sanitize(text: Any) -> str:
    """Strip whitespace and remove HTML tags.

    >>> sanitize("  <b>Vertex</b> AI ")
    'Vertex AI'
    """
    if text is None:
        return ""
    return _TAG_RE.sub("", str(text).strip())


def normalize_phone(phone: Any) -> str:
    """Normalize a phone number to +digits.

    Ten-digit numbers are assumed to be North American and get a leading 1.
    Input without any digits is returned unchanged.

    >>> normalize_phone("(415) 200-1001")
    '+14152001001'
    """
    if phone is None:
        return ""
    raw = str(phone)
    digits = re.sub(r"\D", "", raw)
    if not digits:
        return raw
    if len(digits) == 10:
        digits = f"1{digits}"
    return f"+{digits}"


def validate_contact(
    payload: dict[str, Any],
    repo: ContactRepository,
    existing_id: Optional[int] = None,
) -> list[str]:
    """Validate a contact payload.

    Args:
        payload: Raw field values
        repo: Repository (for the duplicate-email check)
        existing_id: Contact being updated; None on create

    Returns:
        List of error messages (empty if valid)
    """
    errors: list[str] = []

    name = payload.get("name")
    if name is None or not str(name).strip():
        errors.append("name is required")

    company = payload.get("company")
    if company is None or not str(company).strip():
        errors.append("company is required")

    email = payload.get("email")
    if email and not EMAIL_REGEX.match(str(email)):
        errors.append("invalid email format")

    stage = payload.get("stage")
    if stage and stage not in VALID_STAGES:
        errors.append(f"stage must be one of: {', '.join(VALID_STAGES)}")

    score = payload.get("score")
    if score is not None:
        try:
            value = int(score)
        except (TypeError, ValueError):
            errors.append("score must be 0-100")
        else:
            if value < 0 or value > 100:
                errors.append("score must be 0-100")

    if existing_id is None and email:
        dupe = repo.find_by_email(str(email))
        if dupe is not None:
            errors.append(
                f"duplicate: contact with email {email} already exists (id: {dupe.id})"
            )

    return errors


def create_contact(repo: ContactRepository, payload: dict[str, Any], today: date) -> int:
    """Validate, normalize and store a new contact.

    Returns:
        The new contact id

    Raises:
        ValidationError: If the payload is invalid
    """
    errors = validate_contact(payload, repo)
    if errors:
        raise ValidationError("; ".join(errors))

    contact = Contact(
        name=sanitize(payload.get("name")),
        email=sanitize(payload.get("email")),
        phone=normalize_phone(payload.get("phone")),
        company=sanitize(payload.get("company")),
        stage=Stage(payload.get("stage") or Stage.PROSPECT.value),
        tags=[sanitize(t) for t in payload.get("tags") or []],
        last_contact=payload.get("last_contact") or today.isoformat(),
        score=clamp_score(payload.get("score")),
        notes=sanitize(payload.get("notes")),
        created_at=today.isoformat(),
    )
    return repo.create(contact)


def update_contact(repo: ContactRepository, contact_id: int, payload: dict[str, Any]) -> Contact:
    """Merge a payload into an existing contact.

    Fields absent from the payload keep their current values. The
    validation runs on the merged record, as a full update would.

    Raises:
        ContactNotFoundError: If the contact does not exist
        ValidationError: If the merged record is invalid
    """
    contact = repo.find(contact_id)

    merged = contact.to_dict()
    merged.update(payload)
    errors = validate_contact(merged, repo, existing_id=contact_id)
    if errors:
        raise ValidationError("; ".join(errors))

    contact.name = sanitize(merged["name"])
    contact.email = sanitize(merged.get("email"))
    contact.company = sanitize(merged["company"])
    if "phone" in payload:
        contact.phone = normalize_phone(payload["phone"])
    if "stage" in payload and payload["stage"]:
        contact.stage = Stage(payload["stage"])
    if "tags" in payload:
        contact.tags = [sanitize(t) for t in payload["tags"] or []]
    if "last_contact" in payload:
        contact.last_contact = payload["last_contact"]
    if "notes" in payload:
        contact.notes = sanitize(payload["notes"])
    contact.score = clamp_score(merged.get("score"))

    repo.save(contact)
    logger.info(
        "Contact updated",
        extra={"context": {"contact_id": contact_id, "fields": sorted(payload)}},
    )
    return contact
