"""Domain events emitted by the ledger and the sink that records them.

Notification delivery (SMS, e-mail, dashboard badges) lives outside this
service. The ledger only emits: every event is logged and written to
``audit_trail`` in the same transaction as the change that produced it, so a
rolled-back change never leaves an event behind. Delivery workers read the
audit trail.
"""


import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from elevatorid.repositories.directory import AuditTrailRepository

logger = logging.getLogger(__name__)

TRANSFER_CREATED = "TransferCreated"
TRANSFER_APPROVED = "TransferApproved"
TRANSFER_REJECTED = "TransferRejected"
PART_REGISTERED = "PartRegistered"
PART_INSTALLED = "PartInstalled"
PART_REMOVED = "PartRemoved"
PART_RETURNED_TO_STOCK = "PartReturnedToStock"


@dataclass(frozen=True)
class DomainEvent:
    name: str
    entity_type: str
    entity_id: str
    part_id: str | None = None
    actor_company_id: str | None = None
    actor_user_id: str | None = None
    payload: dict[str, Any] = field(default_factory=dict)

    def describe(self) -> str:
        return f"{self.name} {self.entity_type}={self.entity_id} part={self.part_id}"


class EventSink:
    """Receives domain events. Subclasses decide where they go."""

    async def emit(self, event: DomainEvent) -> None:
        logger.info("event %s", event.describe())


class AuditTrailSink(EventSink):
    """Logs the event and appends it to ``audit_trail`` using the caller's session."""

    def __init__(self, session: AsyncSession, client_id: str):
        self._repo = AuditTrailRepository(session, client_id)

    async def emit(self, event: DomainEvent) -> None:
        await super().emit(event)
        await self._repo.create(
            action=event.name,
            entity_type=event.entity_type,
            entity_id=event.entity_id,
            part_id=event.part_id,
            actor_company_id=event.actor_company_id,
            actor_user_id=event.actor_user_id,
            payload=event.payload,
            description=event.describe(),
        )
