"""Installation ledger — fixing parts into elevators and taking them out again.

Installing turns company stock into an elevator-owned asset. Removing closes
the installation row but leaves the part elevator-owned: somebody has to take
it back explicitly with ``return_to_stock`` before it can be traded or
installed again.
"""


import logging

from sqlalchemy.ext.asyncio import AsyncSession

from elevatorid.core.exceptions import (
    NotPartOwner,
    PartAlreadyInstalled,
    PartNotInstalled,
    PartNotTransferable,
    TransferAlreadyPending,
    ValidationError,
)
from elevatorid.domain.enums import OwnerType, OwnershipCause
from elevatorid.domain.installation import ElevatorPart
from elevatorid.domain.mixins import utcnow
from elevatorid.domain.part import Part
from elevatorid.repositories.installations import InstallationRepository
from elevatorid.repositories.transfers import TransferRepository
from elevatorid.schemas.part import PartCreate
from elevatorid.services import events
from elevatorid.services.directory import CompanyDirectory, ElevatorRegistry
from elevatorid.services.events import AuditTrailSink, DomainEvent, EventSink
from elevatorid.services.part_registry import PartRegistry

logger = logging.getLogger(__name__)


class InstallationLedger:
    def __init__(self, session: AsyncSession, client_id: str, sink: EventSink | None = None):
        self._session = session
        self._sink = sink or AuditTrailSink(session, client_id)
        self._installs = InstallationRepository(session, client_id)
        self._transfers = TransferRepository(session, client_id)
        self._registry = PartRegistry(session, client_id, self._sink)
        self._elevators = ElevatorRegistry(session, client_id)
        self._companies = CompanyDirectory(session, client_id)

    async def list_elevator_parts(self, elevator_id: str, *, include_removed: bool = False) -> list[ElevatorPart]:
        await self._elevators.get_elevator(elevator_id)
        return await self._installs.for_elevator(elevator_id, include_removed=include_removed)

    async def install_part(self, elevator_id: str, part_id: str, installer_company_id: str) -> ElevatorPart:
        await self._elevators.get_elevator(elevator_id)
        await self._companies.get_company(installer_company_id)
        part = await self._registry.get_part(part_id)

        if await self._installs.active_for_part(part.id):
            raise PartAlreadyInstalled(part.id)
        if part.current_owner_type == OwnerType.ELEVATOR.value:
            raise PartNotTransferable(part.id, "it must be returned to stock before it is installed again")
        if part.current_owner_company_id != installer_company_id:
            raise NotPartOwner(part.id, installer_company_id)
        if await self._transfers.pending_for_part(part.id):
            raise TransferAlreadyPending(part.id)

        async with self._session.begin_nested():
            record = await self._installs.try_create(
                elevator_id=elevator_id,
                part_id=part.id,
                installer_company_id=installer_company_id,
                installed_at=utcnow(),
            )
            if record is None:
                raise PartAlreadyInstalled(part.id)
            await self._registry.set_owner(
                part.id,
                OwnerType.ELEVATOR,
                elevator_id,
                OwnershipCause.INSTALLED,
                elevator_part_id=record.id,
            )

        await self._sink.emit(
            DomainEvent(
                name=events.PART_INSTALLED,
                entity_type="elevator_part",
                entity_id=record.id,
                part_id=part.id,
                actor_company_id=installer_company_id,
                payload={"elevator_id": elevator_id},
            )
        )
        logger.info("Part %s installed in elevator %s by %s", part.id, elevator_id, installer_company_id)
        return record

    async def remove_part(self, elevator_id: str, part_id: str, reason: str | None = None) -> ElevatorPart:
        await self._elevators.get_elevator(elevator_id)
        record = await self._installs.active_in_elevator(elevator_id, part_id)
        if record is None or not await self._installs.mark_removed(record.id, reason):
            raise PartNotInstalled(part_id, elevator_id)

        await self._session.refresh(record)
        await self._sink.emit(
            DomainEvent(
                name=events.PART_REMOVED,
                entity_type="elevator_part",
                entity_id=record.id,
                part_id=part_id,
                actor_company_id=record.installer_company_id,
                payload={"elevator_id": elevator_id, "reason": reason},
            )
        )
        logger.info("Part %s removed from elevator %s", part_id, elevator_id)
        return record

    async def replace_part(
        self,
        elevator_id: str,
        old_part_id: str,
        new_part_id: str,
        installer_company_id: str,
        reason: str | None = None,
    ) -> tuple[ElevatorPart, ElevatorPart]:
        """Remove one part and install another as a single unit of work."""
        if old_part_id == new_part_id:
            raise ValidationError("Replacement part must differ from the part being removed")
        async with self._session.begin_nested():
            removed = await self.remove_part(elevator_id, old_part_id, reason)
            installed = await self.install_part(elevator_id, new_part_id, installer_company_id)
        return removed, installed

    async def return_to_stock(self, part_id: str, company_id: str) -> Part:
        """Hand a removed part back to a company's tradeable stock."""
        part = await self._registry.get_part(part_id)
        await self._companies.get_company(company_id)
        if part.current_owner_type != OwnerType.ELEVATOR.value:
            raise PartNotTransferable(part.id, "it is already in company stock")
        if await self._installs.active_for_part(part.id):
            raise PartNotTransferable(part.id, "it is still installed; remove it first")

        elevator_id = part.current_owner_elevator_id
        part = await self._registry.set_owner(
            part.id, OwnerType.COMPANY, company_id, OwnershipCause.RETURNED_TO_STOCK
        )
        await self._sink.emit(
            DomainEvent(
                name=events.PART_RETURNED_TO_STOCK,
                entity_type="part",
                entity_id=part.id,
                part_id=part.id,
                actor_company_id=company_id,
                payload={"from_elevator_id": elevator_id},
            )
        )
        return part

    async def register_installed(self, data: PartCreate) -> Part:
        """Register a part; with ``install_into_elevator_id`` the registrant installs it right away."""
        part = await self._registry.register_part(data)
        if data.install_into_elevator_id:
            await self.install_part(data.install_into_elevator_id, part.id, data.registrant_company_id)
            await self._session.refresh(part)
        return part
