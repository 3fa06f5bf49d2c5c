"""Contact repository contract and in-memory implementation.

The engine never holds the canonical contact collection. It asks a
repository for detached copies, computes on them, and hands mutated
contacts back through save().

Usage:
    from folio.db.repository import InMemoryContactRepository

    repo = InMemoryContactRepository()
    contact_id = repo.create(Contact(name="Sarah Chen", company="Vertex"))
    contact = repo.find(contact_id)
"""

from __future__ import annotations

import copy
import threading
import weakref
from abc import ABC, abstractmethod
from typing import Optional

from folio.core.exceptions import ContactNotFoundError
from folio.core.logging import get_logger
from folio.db.models import Contact, Stage

logger = get_logger(__name__)

_registry_guard = threading.Lock()


class ContactRepository(ABC):
    """Port for reading and writing Contact records.

    Writers that read, mutate and save one contact hold lock_for(id) for
    the whole sequence. Locks are owned by the repository, so every
    caller sharing it shares them.
    """

    @abstractmethod
    def find(self, contact_id: int) -> Contact:
        """Return a copy of the contact.

        Raises:
            ContactNotFoundError: If no contact has this id
        """

    @abstractmethod
    def list(self) -> list[Contact]:
        """Return copies of all contacts, passed ones included, in id order."""

    @abstractmethod
    def save(self, contact: Contact) -> None:
        """Persist changes to an existing contact.

        Raises:
            ContactNotFoundError: If the contact no longer exists
        """

    @abstractmethod
    def create(self, contact: Contact) -> int:
        """Insert a new contact and return its assigned id."""

    @abstractmethod
    def delete(self, contact_id: int) -> Contact:
        """Remove a contact and return the removed record.

        Raises:
            ContactNotFoundError: If no contact has this id
        """

    def lock_for(self, contact_id: int) -> threading.Lock:
        """Lock serializing read-modify-write on one contact.

        Entries live only while some caller holds a reference, so ids
        that are never written (or do not exist) leave nothing behind.
        """
        with _registry_guard:
            registry = self.__dict__.get("_contact_locks")
            if registry is None:
                registry = weakref.WeakValueDictionary()
                self._contact_locks = registry
            lock = registry.get(contact_id)
            if lock is None:
                lock = threading.Lock()
                registry[contact_id] = lock
            return lock

    def find_by_email(self, email: str) -> Optional[Contact]:
        """Case-insensitive email lookup."""
        if not email:
            return None
        needle = email.lower()
        for contact in self.list():
            if contact.email and contact.email.lower() == needle:
                return contact
        return None

    def search(self, query: Optional[str] = None, stage: Optional[str] = None) -> list[Contact]:
        """Filter by substring of name, company or email, and by stage.

        A stage of None or "all" matches every contact.
        """
        contacts = self.list()
        if query:
            q = query.lower()
            contacts = [
                c
                for c in contacts
                if q in c.name.lower() or q in c.company.lower() or q in (c.email or "").lower()
            ]
        if stage and stage != "all":
            contacts = [c for c in contacts if _stage_value(c.stage) == stage]
        return contacts


class InMemoryContactRepository(ContactRepository):
    """Thread-safe dict-backed repository.

    Reads and writes copy under one lock, so a list() snapshot never
    observes a half-applied save().
    """

    def __init__(self, contacts: Optional[list[Contact]] = None):
        self._lock = threading.RLock()
        self._contacts: dict[int, Contact] = {}
        self._next_id = 1
        for contact in contacts or []:
            self.create(contact)

    def find(self, contact_id: int) -> Contact:
        with self._lock:
            contact = self._contacts.get(contact_id)
            if contact is None:
                raise ContactNotFoundError(contact_id)
            return copy.deepcopy(contact)

    def list(self) -> list[Contact]:
        with self._lock:
            return [copy.deepcopy(self._contacts[k]) for k in sorted(self._contacts)]

    def save(self, contact: Contact) -> None:
        if contact.id is None:
            raise ContactNotFoundError(-1)
        with self._lock:
            if contact.id not in self._contacts:
                raise ContactNotFoundError(contact.id)
            self._contacts[contact.id] = copy.deepcopy(contact)

    def create(self, contact: Contact) -> int:
        with self._lock:
            if contact.id is None or contact.id in self._contacts:
                contact_id = self._next_id
            else:
                contact_id = contact.id
            self._next_id = max(self._next_id, contact_id + 1)
            stored = copy.deepcopy(contact)
            stored.id = contact_id
            self._contacts[contact_id] = stored
        logger.debug("Contact created", extra={"context": {"contact_id": contact_id}})
        return contact_id

    def delete(self, contact_id: int) -> Contact:
        with self._lock:
            contact = self._contacts.pop(contact_id, None)
        if contact is None:
            raise ContactNotFoundError(contact_id)
        logger.info("Contact deleted", extra={"context": {"contact_id": contact_id}})
        return contact


def _stage_value(stage: object) -> object:
    return stage.value if isinstance(stage, Stage) else stage
