"""Transfer workflow — pending -> approved | rejected, nothing else.

Approval moves the part to the buyer in the same savepoint as the status
change. The status change is a compare-and-set on ``status = 'pending'``, so
of two concurrent approve/reject calls exactly one wins and the other gets
``TransferNotPending``.
"""


import logging

from sqlalchemy.ext.asyncio import AsyncSession

from elevatorid.core.exceptions import (
    ApprovalNotAllowed,
    NotPartOwner,
    PartNotTransferable,
    TransferAlreadyPending,
    TransferNotFound,
    TransferNotPending,
    ValidationError,
)
from elevatorid.core.pagination import PaginationParams
from elevatorid.domain.enums import (
    ApprovalMethod,
    OwnerType,
    OwnershipCause,
    TransferDirection,
    TransferStatus,
)
from elevatorid.domain.mixins import utcnow
from elevatorid.domain.transfer import PartTransfer
from elevatorid.repositories.parts import PartRepository
from elevatorid.repositories.transfers import TransferRepository
from elevatorid.schemas.transfer import InAppApproval, PhoneApproval, TransferCreate
from elevatorid.services import events
from elevatorid.services.directory import CompanyDirectory, normalize_phone
from elevatorid.services.events import AuditTrailSink, DomainEvent, EventSink
from elevatorid.services.part_registry import PartRegistry

logger = logging.getLogger(__name__)

_PENDING = TransferStatus.PENDING.value


class TransferWorkflow:
    def __init__(self, session: AsyncSession, client_id: str, sink: EventSink | None = None):
        self._session = session
        self._sink = sink or AuditTrailSink(session, client_id)
        self._transfers = TransferRepository(session, client_id)
        self._parts = PartRepository(session, client_id)
        self._registry = PartRegistry(session, client_id, self._sink)
        self._companies = CompanyDirectory(session, client_id)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_transfer(self, transfer_id: str) -> PartTransfer:
        transfer = await self._transfers.get_by_id(transfer_id)
        if not transfer:
            raise TransferNotFound(transfer_id)
        return transfer

    async def list_transfers(
        self,
        pagination: PaginationParams,
        *,
        status: TransferStatus | None = None,
        company_id: str | None = None,
        part_id: str | None = None,
    ):
        return await self._transfers.search(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            company_id=company_id,
            filters={"status": status.value if status else None, "part_id": part_id},
        )

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create_transfer(self, data: TransferCreate) -> PartTransfer:
        part = await self._registry.get_part(data.part_id)
        if part.current_owner_type != OwnerType.COMPANY.value:
            raise PartNotTransferable(part.id)
        if await self._transfers.pending_for_part(part.id):
            raise TransferAlreadyPending(part.id)

        initiator_id = data.initiator_company_id
        counterparty_id = data.counterparty_company_id
        await self._companies.get_company(initiator_id)
        if counterparty_id:
            if counterparty_id == initiator_id:
                raise ValidationError("A company cannot transfer a part to itself")
            await self._companies.get_company(counterparty_id)

        # Whoever gives the part up must hold it right now. For an incoming
        # transfer from an unregistered company the initiator already holds
        # it and the transfer only records where it came from.
        if data.direction is TransferDirection.OUTGOING:
            holder_id = initiator_id
            seller_id, buyer_id = initiator_id, counterparty_id
        else:
            holder_id = counterparty_id or initiator_id
            seller_id, buyer_id = counterparty_id, initiator_id
        if part.current_owner_company_id != holder_id:
            raise NotPartOwner(part.id, holder_id)

        transfer = await self._transfers.try_create(
            part_id=part.id,
            initiator_company_id=initiator_id,
            seller_company_id=seller_id,
            buyer_company_id=buyer_id,
            direction=data.direction.value,
            other_company_name=None if counterparty_id else data.other_company_name.strip(),
            status=_PENDING,
            reason=data.reason,
            notes=data.notes,
            transfer_date=data.transfer_date or utcnow(),
        )
        if transfer is None:
            # A concurrent create won the partial unique index on part_id
            raise TransferAlreadyPending(part.id)

        await self._sink.emit(
            DomainEvent(
                name=events.TRANSFER_CREATED,
                entity_type="part_transfer",
                entity_id=transfer.id,
                part_id=part.id,
                actor_company_id=initiator_id,
                payload={
                    "direction": transfer.direction,
                    "seller_company_id": seller_id,
                    "buyer_company_id": buyer_id,
                    "other_company_name": transfer.other_company_name,
                },
            )
        )
        logger.info("Transfer %s created for part %s by %s", transfer.id, part.id, initiator_id)
        return transfer

    # ------------------------------------------------------------------
    # Approve / reject
    # ------------------------------------------------------------------

    async def approve_transfer(
        self, transfer_id: str, approval: InAppApproval | PhoneApproval
    ) -> PartTransfer:
        transfer = await self.get_transfer(transfer_id)
        if transfer.status != _PENDING:
            raise TransferNotPending(transfer.id, transfer.status)

        await self._check_approver(transfer, approval)
        if transfer.buyer_company_id is None:
            raise ValidationError(
                "Ownership cannot move to an unregistered company; reject this transfer instead"
            )

        values = {
            "status": TransferStatus.APPROVED.value,
            "approved_at": utcnow(),
            "approval_method": approval.method,
        }
        if isinstance(approval, InAppApproval):
            values.update(approved_by_user_id=approval.user_id, approved_by_company_id=approval.company_id)
        else:
            values.update(approved_by_ceo_phone=approval.phone.strip())

        async with self._session.begin_nested():
            if not await self._transfers.transition(transfer.id, from_status=_PENDING, **values):
                raise TransferNotPending(transfer.id)

            part = await self._parts.get_for_update(transfer.part_id)
            holder_id = transfer.seller_company_id or transfer.buyer_company_id
            if (
                part.current_owner_type != OwnerType.COMPANY.value
                or part.current_owner_company_id != holder_id
            ):
                raise PartNotTransferable(part.id, "its owner changed while the transfer was pending")

            await self._registry.set_owner(
                part.id,
                OwnerType.COMPANY,
                transfer.buyer_company_id,
                OwnershipCause.TRANSFER_APPROVED,
                transfer_id=transfer.id,
            )

        await self._session.refresh(transfer)
        await self._sink.emit(
            DomainEvent(
                name=events.TRANSFER_APPROVED,
                entity_type="part_transfer",
                entity_id=transfer.id,
                part_id=transfer.part_id,
                actor_company_id=transfer.approved_by_company_id,
                actor_user_id=transfer.approved_by_user_id,
                payload={
                    "approval_method": transfer.approval_method,
                    "buyer_company_id": transfer.buyer_company_id,
                },
            )
        )
        logger.info("Transfer %s approved via %s", transfer.id, transfer.approval_method)
        return transfer

    async def reject_transfer(
        self, transfer_id: str, reject_reason: str, actor_company_id: str | None = None
    ) -> PartTransfer:
        transfer = await self.get_transfer(transfer_id)
        if transfer.status != _PENDING:
            raise TransferNotPending(transfer.id, transfer.status)
        parties = {transfer.initiator_company_id, transfer.seller_company_id, transfer.buyer_company_id}
        if actor_company_id and actor_company_id not in parties:
            raise ApprovalNotAllowed(
                f"Company '{actor_company_id}' is not a party to transfer '{transfer.id}'"
            )

        rejected = await self._transfers.transition(
            transfer.id,
            from_status=_PENDING,
            status=TransferStatus.REJECTED.value,
            reject_reason=reject_reason,
            rejected_at=utcnow(),
        )
        if not rejected:
            raise TransferNotPending(transfer.id)

        await self._session.refresh(transfer)
        await self._sink.emit(
            DomainEvent(
                name=events.TRANSFER_REJECTED,
                entity_type="part_transfer",
                entity_id=transfer.id,
                part_id=transfer.part_id,
                actor_company_id=actor_company_id,
                payload={"reject_reason": reject_reason},
            )
        )
        logger.info("Transfer %s rejected: %s", transfer.id, reject_reason)
        return transfer

    async def _check_approver(self, transfer: PartTransfer, approval: InAppApproval | PhoneApproval) -> None:
        counterpart_id = transfer.counterparty_company_id

        if approval.method == ApprovalMethod.IN_APP.value:
            # With an unregistered counterparty nobody else can confirm
            expected = counterpart_id or transfer.initiator_company_id
            if approval.company_id != expected:
                logger.warning(
                    "Rejected in-app approval of transfer %s by company %s", transfer.id, approval.company_id
                )
                raise ApprovalNotAllowed(
                    f"Only company '{expected}' can approve transfer '{transfer.id}'"
                )
            return

        if transfer.is_external:
            raise ApprovalNotAllowed("Phone confirmation needs a registered counterpart company")
        if not await self._companies.ceo_phone_matches(counterpart_id, approval.phone):
            logger.warning(
                "CEO phone mismatch for transfer %s (given %s)", transfer.id, normalize_phone(approval.phone)
            )
            raise ApprovalNotAllowed("Phone number does not match the counterpart company's CEO contact")
