"""Provenance query — read-only views of where a part has been.

Nothing here writes. The chain of custody is rebuilt on every call from the
transfer rows, installation rows and the ownership event log.
"""


from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from elevatorid.domain.enums import OwnershipCause, TransferStatus
from elevatorid.domain.installation import ElevatorPart
from elevatorid.domain.part import PartOwnershipEvent
from elevatorid.domain.transfer import PartTransfer
from elevatorid.repositories.installations import InstallationRepository
from elevatorid.repositories.parts import PartOwnershipEventRepository
from elevatorid.repositories.transfers import TransferRepository
from elevatorid.services.part_registry import Owner, PartRegistry

# Tie-break for entries stamped with the same instant, e.g. the removal and
# installation written by a single replace.
_KIND_ORDER = {
    "registered": 0,
    "removed": 1,
    "returned_to_stock": 2,
    "transfer_requested": 3,
    "transfer_rejected": 4,
    "transfer_approved": 5,
    "installed": 6,
}


@dataclass
class CustodyEntry:
    at: datetime
    kind: str
    company_id: str | None = None
    counterparty_company_id: str | None = None
    counterparty_name: str | None = None
    elevator_id: str | None = None
    transfer_id: str | None = None
    elevator_part_id: str | None = None
    note: str | None = None


def _utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class ProvenanceQuery:
    def __init__(self, session: AsyncSession, client_id: str):
        self._registry = PartRegistry(session, client_id)
        self._transfers = TransferRepository(session, client_id)
        self._installs = InstallationRepository(session, client_id)
        self._log = PartOwnershipEventRepository(session, client_id)

    async def get_current_owner(self, part_id: str) -> Owner:
        return await self._registry.get_owner(part_id)

    async def get_transfer_history(self, part_id: str) -> list[PartTransfer]:
        await self._registry.get_part(part_id)
        return await self._transfers.for_part(part_id)

    async def get_installation_history(self, part_id: str) -> list[ElevatorPart]:
        await self._registry.get_part(part_id)
        return await self._installs.for_part(part_id)

    async def get_ownership_log(self, part_id: str) -> list[PartOwnershipEvent]:
        await self._registry.get_part(part_id)
        return await self._log.for_part(part_id)

    async def get_full_chain_of_custody(self, part_id: str) -> list[CustodyEntry]:
        await self._registry.get_part(part_id)
        entries: list[CustodyEntry] = []

        for event in await self._log.for_part(part_id):
            if event.cause == OwnershipCause.REGISTERED.value:
                entries.append(CustodyEntry(at=event.created_at, kind="registered", company_id=event.owner_company_id))
            elif event.cause == OwnershipCause.RETURNED_TO_STOCK.value:
                entries.append(
                    CustodyEntry(at=event.created_at, kind="returned_to_stock", company_id=event.owner_company_id)
                )

        for transfer in await self._transfers.for_part(part_id):
            entries.extend(self._transfer_entries(transfer))

        for record in await self._installs.for_part(part_id):
            entries.append(
                CustodyEntry(
                    at=record.installed_at,
                    kind="installed",
                    company_id=record.installer_company_id,
                    elevator_id=record.elevator_id,
                    elevator_part_id=record.id,
                )
            )
            if not record.is_active:
                entries.append(
                    CustodyEntry(
                        at=record.removed_at,
                        kind="removed",
                        company_id=record.installer_company_id,
                        elevator_id=record.elevator_id,
                        elevator_part_id=record.id,
                        note=record.removal_reason,
                    )
                )

        for entry in entries:
            entry.at = _utc(entry.at)
        entries.sort(key=lambda e: (e.at, _KIND_ORDER[e.kind]))
        return entries

    @staticmethod
    def _transfer_entries(transfer: PartTransfer) -> list[CustodyEntry]:
        requested = CustodyEntry(
            at=transfer.created_at,
            kind="transfer_requested",
            company_id=transfer.initiator_company_id,
            counterparty_company_id=transfer.counterparty_company_id,
            counterparty_name=transfer.other_company_name,
            transfer_id=transfer.id,
            note=transfer.reason,
        )
        if transfer.status == TransferStatus.APPROVED.value:
            return [
                requested,
                CustodyEntry(
                    at=transfer.approved_at,
                    kind="transfer_approved",
                    company_id=transfer.buyer_company_id,
                    counterparty_company_id=transfer.seller_company_id,
                    counterparty_name=transfer.other_company_name,
                    transfer_id=transfer.id,
                ),
            ]
        if transfer.status == TransferStatus.REJECTED.value:
            return [
                requested,
                CustodyEntry(
                    at=transfer.rejected_at,
                    kind="transfer_rejected",
                    company_id=transfer.initiator_company_id,
                    counterparty_company_id=transfer.counterparty_company_id,
                    counterparty_name=transfer.other_company_name,
                    transfer_id=transfer.id,
                    note=transfer.reject_reason,
                ),
            ]
        return [requested]
