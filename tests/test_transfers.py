import asyncio

import pytest

from elevatorid.core.exceptions import (
    ApprovalNotAllowed,
    NotPartOwner,
    PartNotTransferable,
    TransferAlreadyPending,
    TransferNotPending,
    ValidationError,
)
from elevatorid.domain.enums import OwnerType, TransferStatus
from elevatorid.repositories.directory import AuditTrailRepository
from elevatorid.repositories.parts import PartRepository
from elevatorid.schemas.transfer import InAppApproval, PhoneApproval, TransferCreate
from elevatorid.services.part_registry import Owner, PartRegistry
from elevatorid.services.provenance import ProvenanceQuery
from elevatorid.services.transfers import TransferWorkflow
from tests.helpers import CLIENT, make_company, make_part, page


async def _seed(session):
    c1 = await make_company(session, "Arya Lift", ceo_phone="+98 912 000 1111")
    c2 = await make_company(session, "Pars Elevator", ceo_phone="+98 912 000 2222")
    part = await make_part(session, c1.id, part_uid="P-001")
    return c1, c2, part


def _outgoing(part, seller, buyer, **extra):
    return TransferCreate(
        part_id=part.id, initiator_company_id=seller.id, counterparty_company_id=buyer.id, **extra
    )


async def test_approved_transfer_moves_owner_to_buyer(session):
    c1, c2, part = await _seed(session)
    workflow = TransferWorkflow(session, CLIENT)

    transfer = await workflow.create_transfer(_outgoing(part, c1, c2, reason="sale"))
    assert transfer.status == "pending"
    assert (transfer.seller_company_id, transfer.buyer_company_id) == (c1.id, c2.id)

    transfer = await workflow.approve_transfer(transfer.id, InAppApproval(user_id="u-2", company_id=c2.id))

    assert transfer.status == "approved"
    assert transfer.approval_method == "in_app"
    assert transfer.approved_by_company_id == c2.id
    assert transfer.approved_at is not None
    assert await PartRegistry(session, CLIENT).get_owner(part.id) == Owner(OwnerType.COMPANY, c2.id)

    log = await ProvenanceQuery(session, CLIENT).get_ownership_log(part.id)
    assert log[-1].cause == "transfer_approved"
    assert log[-1].transfer_id == transfer.id
    assert log[-1].owner_company_id == c2.id

    audit = await AuditTrailRepository(session, CLIENT).for_entity(transfer.id)
    assert [a.action for a in audit] == ["TransferCreated", "TransferApproved"]


async def test_second_pending_transfer_is_rejected(session):
    c1, c2, part = await _seed(session)
    workflow = TransferWorkflow(session, CLIENT)
    await workflow.create_transfer(_outgoing(part, c1, c2))

    with pytest.raises(TransferAlreadyPending):
        await workflow.create_transfer(_outgoing(part, c1, c2))

    items, total = await workflow.list_transfers(page(), part_id=part.id)
    assert total == 1


async def test_rejected_transfer_leaves_owner_and_frees_the_part(session):
    c1, c2, part = await _seed(session)
    workflow = TransferWorkflow(session, CLIENT)
    transfer = await workflow.create_transfer(_outgoing(part, c1, c2))

    transfer = await workflow.reject_transfer(transfer.id, "wrong buyer", actor_company_id=c2.id)

    assert transfer.status == "rejected"
    assert transfer.reject_reason == "wrong buyer"
    assert transfer.rejected_at is not None
    assert await PartRegistry(session, CLIENT).get_owner(part.id) == Owner(OwnerType.COMPANY, c1.id)

    again = await workflow.create_transfer(_outgoing(part, c1, c2))
    assert again.status == "pending"


async def test_rejecting_twice_fails_and_changes_nothing(session):
    c1, c2, part = await _seed(session)
    workflow = TransferWorkflow(session, CLIENT)
    transfer = await workflow.create_transfer(_outgoing(part, c1, c2))
    await workflow.reject_transfer(transfer.id, "wrong buyer")

    with pytest.raises(TransferNotPending):
        await workflow.reject_transfer(transfer.id, "second thoughts")

    await session.refresh(transfer)
    assert transfer.status == "rejected"
    assert transfer.reject_reason == "wrong buyer"


async def test_approving_a_terminal_transfer_fails(session):
    c1, c2, part = await _seed(session)
    workflow = TransferWorkflow(session, CLIENT)
    transfer = await workflow.create_transfer(_outgoing(part, c1, c2))
    await workflow.approve_transfer(transfer.id, InAppApproval(user_id="u-2", company_id=c2.id))

    with pytest.raises(TransferNotPending):
        await workflow.approve_transfer(transfer.id, InAppApproval(user_id="u-2", company_id=c2.id))
    with pytest.raises(TransferNotPending):
        await workflow.reject_transfer(transfer.id, "too late")


async def test_initiator_cannot_approve_its_own_outgoing_transfer(session):
    c1, c2, part = await _seed(session)
    workflow = TransferWorkflow(session, CLIENT)
    transfer = await workflow.create_transfer(_outgoing(part, c1, c2))

    with pytest.raises(ApprovalNotAllowed):
        await workflow.approve_transfer(transfer.id, InAppApproval(user_id="u-1", company_id=c1.id))

    assert (await workflow.get_transfer(transfer.id)).status == "pending"


async def test_phone_approval_matches_counterpart_ceo(session):
    c1, c2, part = await _seed(session)
    workflow = TransferWorkflow(session, CLIENT)
    transfer = await workflow.create_transfer(_outgoing(part, c1, c2))

    with pytest.raises(ApprovalNotAllowed):
        await workflow.approve_transfer(transfer.id, PhoneApproval(phone="+98 912 000 1111"))

    transfer = await workflow.approve_transfer(transfer.id, PhoneApproval(phone="98-912-000-2222"))
    assert transfer.status == "approved"
    assert transfer.approval_method == "phone"
    assert transfer.approved_by_ceo_phone == "98-912-000-2222"
    assert (await PartRegistry(session, CLIENT).get_part(part.id)).current_owner_company_id == c2.id


async def test_incoming_transfer_is_approved_by_the_seller(session):
    c1, c2, part = await _seed(session)
    workflow = TransferWorkflow(session, CLIENT)

    transfer = await workflow.create_transfer(
        TransferCreate(
            part_id=part.id,
            initiator_company_id=c2.id,
            direction="incoming",
            counterparty_company_id=c1.id,
        )
    )
    assert (transfer.seller_company_id, transfer.buyer_company_id) == (c1.id, c2.id)

    with pytest.raises(ApprovalNotAllowed):
        await workflow.approve_transfer(transfer.id, InAppApproval(user_id="u-2", company_id=c2.id))

    transfer = await workflow.approve_transfer(transfer.id, InAppApproval(user_id="u-1", company_id=c1.id))
    assert transfer.status == "approved"
    assert (await PartRegistry(session, CLIENT).get_part(part.id)).current_owner_company_id == c2.id


async def test_only_the_holder_can_give_a_part_up(session):
    c1, c2, part = await _seed(session)
    workflow = TransferWorkflow(session, CLIENT)

    with pytest.raises(NotPartOwner):
        await workflow.create_transfer(_outgoing(part, c2, c1))
    with pytest.raises(NotPartOwner):
        await workflow.create_transfer(
            TransferCreate(
                part_id=part.id,
                initiator_company_id=c1.id,
                direction="incoming",
                counterparty_company_id=c2.id,
            )
        )


async def test_transfer_to_self_is_invalid(session):
    c1, _, part = await _seed(session)
    with pytest.raises(ValidationError):
        await TransferWorkflow(session, CLIENT).create_transfer(_outgoing(part, c1, c1))


async def test_incoming_from_external_company_is_recorded(session):
    c1, _, part = await _seed(session)
    workflow = TransferWorkflow(session, CLIENT)

    transfer = await workflow.create_transfer(
        TransferCreate(
            part_id=part.id,
            initiator_company_id=c1.id,
            direction="incoming",
            other_company_name="Old Supplier Ltd",
        )
    )
    assert transfer.seller_company_id is None
    assert transfer.other_company_name == "Old Supplier Ltd"

    with pytest.raises(ApprovalNotAllowed):
        await workflow.approve_transfer(transfer.id, PhoneApproval(phone="+98 912 000 1111"))

    transfer = await workflow.approve_transfer(transfer.id, InAppApproval(user_id="u-1", company_id=c1.id))
    assert transfer.status == "approved"
    assert (await PartRegistry(session, CLIENT).get_part(part.id)).current_owner_company_id == c1.id


async def test_outgoing_to_external_company_can_only_be_rejected(session):
    c1, _, part = await _seed(session)
    workflow = TransferWorkflow(session, CLIENT)
    transfer = await workflow.create_transfer(
        TransferCreate(part_id=part.id, initiator_company_id=c1.id, other_company_name="Walk-in buyer")
    )

    with pytest.raises(ValidationError):
        await workflow.approve_transfer(transfer.id, InAppApproval(user_id="u-1", company_id=c1.id))
    assert (await workflow.get_transfer(transfer.id)).status == "pending"

    transfer = await workflow.reject_transfer(transfer.id, "never registered", actor_company_id=c1.id)
    assert transfer.status == "rejected"
    assert (await PartRegistry(session, CLIENT).get_part(part.id)).current_owner_company_id == c1.id


async def test_reject_by_outsider_is_not_allowed(session):
    c1, c2, part = await _seed(session)
    c3 = await make_company(session, "Third Party Co")
    workflow = TransferWorkflow(session, CLIENT)
    transfer = await workflow.create_transfer(_outgoing(part, c1, c2))

    with pytest.raises(ApprovalNotAllowed):
        await workflow.reject_transfer(transfer.id, "not mine", actor_company_id=c3.id)


async def test_failed_approval_leaves_transfer_pending_and_owner_unchanged(session):
    c1, c2, part = await _seed(session)
    c3 = await make_company(session, "Third Party Co")
    workflow = TransferWorkflow(session, CLIENT)
    transfer = await workflow.create_transfer(_outgoing(part, c1, c2))
    # Owner moved without going through the ledger
    await PartRepository(session, CLIENT).update(part.id, current_owner_company_id=c3.id)

    with pytest.raises(PartNotTransferable):
        await workflow.approve_transfer(transfer.id, InAppApproval(user_id="u-2", company_id=c2.id))

    await session.refresh(transfer)
    assert transfer.status == "pending"
    assert transfer.approved_at is None
    assert (await PartRegistry(session, CLIENT).get_part(part.id)).current_owner_company_id == c3.id
    log = await ProvenanceQuery(session, CLIENT).get_ownership_log(part.id)
    assert [e.cause for e in log] == ["registered"]


async def test_list_transfers_by_company_and_status(session):
    c1, c2, part = await _seed(session)
    c3 = await make_company(session, "Third Party Co")
    other = await make_part(session, c3.id, part_uid="P-002")
    workflow = TransferWorkflow(session, CLIENT)
    t1 = await workflow.create_transfer(_outgoing(part, c1, c2))
    await workflow.create_transfer(_outgoing(other, c3, c1))
    await workflow.reject_transfer(t1.id, "wrong buyer")

    items, total = await workflow.list_transfers(page(), company_id=c2.id)
    assert total == 1 and items[0].id == t1.id

    items, total = await workflow.list_transfers(page(), company_id=c1.id, status=TransferStatus.PENDING)
    assert total == 1 and items[0].part_id == other.id


async def _approve_in_own_session(session_factory, transfer_id, approval):
    async with session_factory() as session:
        try:
            transfer = await TransferWorkflow(session, CLIENT).approve_transfer(transfer_id, approval)
            await session.commit()
            return transfer
        except Exception:
            await session.rollback()
            raise


async def test_concurrent_approvals_have_exactly_one_winner(session_factory):
    async with session_factory() as session:
        c1, c2, part = await _seed(session)
        transfer = await TransferWorkflow(session, CLIENT).create_transfer(_outgoing(part, c1, c2))
        await session.commit()

    approval = InAppApproval(user_id="u-2", company_id=c2.id)
    results = await asyncio.gather(
        _approve_in_own_session(session_factory, transfer.id, approval),
        _approve_in_own_session(session_factory, transfer.id, PhoneApproval(phone="+989120002222")),
        return_exceptions=True,
    )

    failures = [r for r in results if isinstance(r, Exception)]
    assert len(failures) == 1
    assert isinstance(failures[0], TransferNotPending)

    async with session_factory() as session:
        assert await PartRegistry(session, CLIENT).get_owner(part.id) == Owner(OwnerType.COMPANY, c2.id)
        log = await ProvenanceQuery(session, CLIENT).get_ownership_log(part.id)
        assert [e.cause for e in log] == ["registered", "transfer_approved"]


async def _create_in_own_session(session_factory, data):
    async with session_factory() as session:
        try:
            transfer = await TransferWorkflow(session, CLIENT).create_transfer(data)
            await session.commit()
            return transfer
        except Exception:
            await session.rollback()
            raise


async def test_concurrent_creates_leave_one_pending_transfer(session_factory):
    async with session_factory() as session:
        c1, c2, part = await _seed(session)
        c3 = await make_company(session, "Third Party Co")
        await session.commit()

    results = await asyncio.gather(
        _create_in_own_session(session_factory, _outgoing(part, c1, c2)),
        _create_in_own_session(session_factory, _outgoing(part, c1, c3)),
        return_exceptions=True,
    )

    failures = [r for r in results if isinstance(r, Exception)]
    assert len(failures) == 1
    assert isinstance(failures[0], TransferAlreadyPending)

    async with session_factory() as session:
        items, total = await TransferWorkflow(session, CLIENT).list_transfers(page(), part_id=part.id)
        assert total == 1


async def _reject_in_own_session(session_factory, transfer_id, reason):
    async with session_factory() as session:
        try:
            transfer = await TransferWorkflow(session, CLIENT).reject_transfer(transfer_id, reason)
            await session.commit()
            return transfer
        except Exception:
            await session.rollback()
            raise


async def test_concurrent_approve_and_reject_have_one_winner(session_factory):
    async with session_factory() as session:
        c1, c2, part = await _seed(session)
        transfer = await TransferWorkflow(session, CLIENT).create_transfer(_outgoing(part, c1, c2))
        await session.commit()

    results = await asyncio.gather(
        _reject_in_own_session(session_factory, transfer.id, "changed my mind"),
        _approve_in_own_session(session_factory, transfer.id, InAppApproval(user_id="u-2", company_id=c2.id)),
        return_exceptions=True,
    )

    failures = [r for r in results if isinstance(r, Exception)]
    winners = [r for r in results if not isinstance(r, Exception)]
    assert len(failures) == 1 and len(winners) == 1
    assert isinstance(failures[0], TransferNotPending)
    assert winners[0].status in ("approved", "rejected")

    expected_owner = c2.id if winners[0].status == "approved" else c1.id
    async with session_factory() as session:
        stored = await TransferWorkflow(session, CLIENT).get_transfer(transfer.id)
        assert stored.status == winners[0].status
        assert await PartRegistry(session, CLIENT).get_owner(part.id) == Owner(OwnerType.COMPANY, expected_owner)
