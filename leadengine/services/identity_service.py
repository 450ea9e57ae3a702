"""Contact identity resolution, merging and duplicate discovery."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from leadengine.auth.tenant_context import enforce_all, enforce_tenant_match
from leadengine.core.exceptions import (
    AlreadyMergedError,
    ContactNotFoundError,
    IdentityError,
    InsufficientHintsError,
)
from leadengine.models import Channel, Contact, Event
from leadengine.models.base import as_utc, utcnow
from leadengine.schemas.events import ContactHints
from leadengine.services.base_service import BaseService
from leadengine.services.scoring_engine import LeadScore, ScoringEngine
from leadengine.utils.validators import clean_optional, normalize_email, normalize_phone

logger = logging.getLogger(__name__)

UNKNOWN_NAME = "Unknown"
_PROFILE_FIELDS = ("company", "title", "location")
_COUNTER_FIELDS = (
    "total_interactions",
    "hot_lead_count",
    "appointment_count",
    "phone_request_count",
    "pricing_discussion_count",
)


@dataclass(frozen=True)
class MergeResult:
    primary_id: int
    merged_ids: list[int]
    events_reassigned: int
    lead_score: LeadScore


@dataclass(frozen=True)
class DuplicateGroup:
    name: str | None
    email: str | None
    phone: str | None
    contact_ids: list[int]


def _is_blank_name(value: str | None) -> bool:
    return not value or value.strip() == "" or value.strip() == UNKNOWN_NAME


def _earliest(*values: datetime | None) -> datetime | None:
    present = [as_utc(value) for value in values if value is not None]
    return min(present) if present else None


def _latest(*values: datetime | None) -> datetime | None:
    present = [as_utc(value) for value in values if value is not None]
    return max(present) if present else None


class IdentityService(BaseService):
    """Maps loose contact hints onto exactly one active contact per tenant."""

    def __init__(self, db: Session | None = None, scoring_engine: ScoringEngine | None = None) -> None:
        super().__init__(db=db)
        self.scoring_engine = scoring_engine or ScoringEngine()

    def _active_by(self, tenant_id: int, column, value: str) -> Contact | None:
        contact = self.db.execute(
            select(Contact)
            .where(Contact.tenant_id == tenant_id, Contact.is_active.is_(True), column == value)
            .limit(1)
        ).scalar_one_or_none()
        if contact is not None:
            enforce_tenant_match(contact.tenant_id, tenant_id)
        return contact

    def _match(self, tenant_id: int, email: str | None, phone: str | None) -> Contact | None:
        if email:
            contact = self._active_by(tenant_id, Contact.email, email)
            if contact is not None:
                return contact
        if phone:
            return self._active_by(tenant_id, Contact.phone, phone)
        return None

    def _identifier_free(self, contact: Contact, column, value: str, field: str) -> bool:
        owner = self._active_by(contact.tenant_id, column, value)
        if owner is None or owner.id == contact.id:
            return True
        logger.warning(
            "identity.identifier_conflict",
            extra={
                "event": "identity.identifier_conflict",
                "tenant_id": contact.tenant_id,
                "contact_id": contact.id,
                "owner_contact_id": owner.id,
                "field": field,
            },
        )
        return False

    def _enrich(self, contact: Contact, hints: ContactHints, email: str | None, phone: str | None) -> None:
        if email and not contact.email and self._identifier_free(contact, Contact.email, email, "email"):
            contact.email = email
        if phone and not contact.phone and self._identifier_free(contact, Contact.phone, phone, "phone"):
            contact.phone = phone

        name = clean_optional(hints.name)
        if name and _is_blank_name(contact.name):
            contact.name = name
        for field in _PROFILE_FIELDS:
            value = clean_optional(getattr(hints, field))
            if value and not getattr(contact, field):
                setattr(contact, field, value)
        contact.add_tags(hints.tags)

    def resolve(
        self,
        tenant_id: int,
        hints: ContactHints | dict[str, Any],
        channel: Channel | str | None = None,
        now: datetime | None = None,
    ) -> Contact:
        """Return the single active contact for ``hints``, creating it when absent."""
        if not isinstance(hints, ContactHints):
            hints = ContactHints(**(hints or {}))
        email = normalize_email(hints.email)
        phone = normalize_phone(hints.phone)
        if not email and not phone:
            logger.warning(
                "identity.insufficient_hints",
                extra={"event": "identity.insufficient_hints", "tenant_id": tenant_id},
            )
            raise InsufficientHintsError("Contact resolution needs an email or a phone number.")

        channel_value = Channel.parse(channel).value if channel else None
        now = now or utcnow()

        for attempt in (1, 2):
            contact = self._match(tenant_id, email, phone)
            if contact is not None:
                self._enrich(contact, hints, email, phone)
                self.commit()
                return contact

            contact = Contact(
                tenant_id=tenant_id,
                email=email,
                phone=phone,
                name=clean_optional(hints.name) or UNKNOWN_NAME,
                company=clean_optional(hints.company),
                title=clean_optional(hints.title),
                location=clean_optional(hints.location),
                first_interaction_at=now,
                source_channel=channel_value,
                channels_used=[channel_value] if channel_value else [],
                tags=[],
            )
            contact.add_tags(hints.tags)
            self.scoring_engine.apply(contact, now)
            try:
                self.db.add(contact)
                self.commit()
            except IntegrityError:
                if attempt == 2:
                    raise
                logger.info(
                    "identity.create_race.retry",
                    extra={"event": "identity.create_race.retry", "tenant_id": tenant_id},
                )
                continue

            logger.info(
                "identity.contact.created",
                extra={
                    "event": "identity.contact.created",
                    "tenant_id": tenant_id,
                    "contact_id": contact.id,
                    "channel": channel_value,
                },
            )
            return contact

        raise IdentityError("Contact resolution did not converge.")

    def get_contact(self, tenant_id: int, contact_id: int) -> Contact:
        contact = self.db.execute(
            select(Contact).where(Contact.tenant_id == tenant_id, Contact.id == contact_id)
        ).scalar_one_or_none()
        if contact is None:
            raise ContactNotFoundError(f"Contact {contact_id} not found.")
        enforce_tenant_match(contact.tenant_id, tenant_id)
        return contact

    def _lock_participants(self, tenant_id: int, ids: list[int]) -> dict[int, Contact]:
        rows = self.db.execute(
            select(Contact)
            .where(Contact.tenant_id == tenant_id, Contact.id.in_(ids))
            .order_by(Contact.id)
            .with_for_update()
        ).scalars().all()
        enforce_all(rows, tenant_id)
        by_id = {row.id: row for row in rows}
        missing = [contact_id for contact_id in ids if contact_id not in by_id]
        if missing:
            raise ContactNotFoundError(f"Contacts not found: {missing}.")
        inactive = [contact_id for contact_id in ids if not by_id[contact_id].is_active]
        if inactive:
            raise AlreadyMergedError(f"Contacts already merged: {inactive}.")
        return by_id

    @staticmethod
    def _absorb(primary: Contact, duplicate: Contact) -> None:
        for field in _COUNTER_FIELDS:
            setattr(primary, field, (getattr(primary, field) or 0) + (getattr(duplicate, field) or 0))
        for channel in duplicate.channels_used or []:
            primary.add_channel(channel)
        primary.add_tags(duplicate.tags)
        primary.first_interaction_at = _earliest(primary.first_interaction_at, duplicate.first_interaction_at)
        primary.last_interaction_at = _latest(primary.last_interaction_at, duplicate.last_interaction_at)

    @staticmethod
    def _fill_identity(primary: Contact, duplicate: Contact) -> None:
        if not primary.email and duplicate.email:
            primary.email = duplicate.email
        if not primary.phone and duplicate.phone:
            primary.phone = duplicate.phone
        if _is_blank_name(primary.name) and not _is_blank_name(duplicate.name):
            primary.name = duplicate.name
        for field in _PROFILE_FIELDS:
            if not getattr(primary, field) and getattr(duplicate, field):
                setattr(primary, field, getattr(duplicate, field))

    def merge(
        self,
        tenant_id: int,
        primary_id: int,
        duplicate_ids: Iterable[int],
        now: datetime | None = None,
    ) -> MergeResult:
        """Fold duplicates into ``primary_id`` in one locked transaction."""
        duplicate_ids = list(dict.fromkeys(int(value) for value in duplicate_ids))
        if not duplicate_ids:
            raise IdentityError("Merge needs at least one duplicate contact.", reason="EmptyDuplicateList")
        if primary_id in duplicate_ids:
            raise IdentityError("A contact cannot be merged into itself.", reason="SelfMerge")

        now = now or utcnow()
        try:
            by_id = self._lock_participants(tenant_id, [primary_id, *duplicate_ids])
            primary = by_id[primary_id]
            duplicates = [by_id[contact_id] for contact_id in duplicate_ids]

            moved_ids = self.db.execute(
                select(Event.id).where(Event.tenant_id == tenant_id, Event.contact_id.in_(duplicate_ids))
            ).scalars().all()
            if moved_ids:
                self.db.execute(
                    update(Event)
                    .where(Event.tenant_id == tenant_id, Event.id.in_(moved_ids))
                    .values(contact_id=primary.id)
                    .execution_options(synchronize_session="fetch")
                )
            reassigned = len(moved_ids)

            for duplicate in duplicates:
                self._absorb(primary, duplicate)
                duplicate.is_active = False
                duplicate.merged_into = primary.id
            # Retire duplicates first so their identifiers are free for the primary.
            self.db.flush()

            for duplicate in duplicates:
                self._fill_identity(primary, duplicate)
            result = self.scoring_engine.apply(primary, now)
            self.commit()
        except Exception:
            self.rollback()
            raise

        logger.info(
            "identity.contacts.merged",
            extra={
                "event": "identity.contacts.merged",
                "tenant_id": tenant_id,
                "contact_id": primary_id,
                "merged_ids": duplicate_ids,
                "events_reassigned": reassigned,
            },
        )
        return MergeResult(
            primary_id=primary_id,
            merged_ids=duplicate_ids,
            events_reassigned=reassigned or 0,
            lead_score=result,
        )

    def find_duplicates(self, tenant_id: int, limit: int = 50) -> list[DuplicateGroup]:
        """Group active contacts sharing normalized name, email and phone.

        Contacts created through ``resolve`` never collide here: identifiers are
        normalized on write and the partial unique indexes reject a second
        active owner. Groups therefore only surface rows written by imports or
        other paths that bypass the resolver. Same-name contacts with different
        identifiers are not grouped.
        """
        rows = self.db.execute(
            select(Contact)
            .where(Contact.tenant_id == tenant_id, Contact.is_active.is_(True))
            .order_by(Contact.created_at, Contact.id)
        ).scalars().all()

        groups: dict[tuple[str, str, str], list[Contact]] = defaultdict(list)
        for contact in rows:
            key = (
                (contact.name or "").strip().lower(),
                (contact.email or "").strip().lower(),
                (contact.phone or "").strip(),
            )
            groups[key].append(contact)

        duplicates = [
            DuplicateGroup(
                name=members[0].name,
                email=members[0].email,
                phone=members[0].phone,
                contact_ids=[member.id for member in members],
            )
            for members in groups.values()
            if len(members) > 1
        ]
        duplicates.sort(key=lambda group: (-len(group.contact_ids), group.contact_ids[0]))
        return duplicates[:limit]
