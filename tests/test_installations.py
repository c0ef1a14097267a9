import pytest

from elevatorid.core.exceptions import (
    ElevatorNotFound,
    NotPartOwner,
    PartAlreadyInstalled,
    PartNotInstalled,
    PartNotTransferable,
    TransferAlreadyPending,
    ValidationError,
)
from elevatorid.domain.enums import OwnerType
from elevatorid.schemas.part import PartCreate
from elevatorid.schemas.transfer import InAppApproval, TransferCreate
from elevatorid.services.installations import InstallationLedger
from elevatorid.services.part_registry import Owner, PartRegistry
from elevatorid.services.provenance import ProvenanceQuery
from elevatorid.services.transfers import TransferWorkflow
from tests.helpers import CLIENT, make_company, make_elevator, make_part


@pytest.fixture()
async def ledger_state(session):
    """P-001 registered by C1 and sold to C2; elevators E-1 and E-2 exist."""
    c1 = await make_company(session, "Arya Lift")
    c2 = await make_company(session, "Pars Elevator")
    e1 = await make_elevator(session, "E-1", installer_company_id=c2.id)
    e2 = await make_elevator(session, "E-2")
    part = await make_part(session, c1.id, part_uid="P-001")

    workflow = TransferWorkflow(session, CLIENT)
    transfer = await workflow.create_transfer(
        TransferCreate(part_id=part.id, initiator_company_id=c1.id, counterparty_company_id=c2.id)
    )
    await workflow.approve_transfer(transfer.id, InAppApproval(user_id="u-2", company_id=c2.id))
    return c1, c2, e1, e2, part


async def test_installed_part_belongs_to_the_elevator(session, ledger_state):
    c1, c2, e1, _, part = ledger_state
    ledger = InstallationLedger(session, CLIENT)

    record = await ledger.install_part(e1.id, part.id, c2.id)

    assert record.removed_at is None
    assert record.installer_company_id == c2.id
    assert await PartRegistry(session, CLIENT).get_owner(part.id) == Owner(OwnerType.ELEVATOR, e1.id)

    with pytest.raises(PartNotTransferable):
        await TransferWorkflow(session, CLIENT).create_transfer(
            TransferCreate(part_id=part.id, initiator_company_id=c2.id, counterparty_company_id=c1.id)
        )


async def test_a_part_is_active_in_one_elevator_at_most(session, ledger_state):
    _, c2, e1, e2, part = ledger_state
    ledger = InstallationLedger(session, CLIENT)
    await ledger.install_part(e1.id, part.id, c2.id)

    with pytest.raises(PartAlreadyInstalled):
        await ledger.install_part(e1.id, part.id, c2.id)
    with pytest.raises(PartAlreadyInstalled):
        await ledger.install_part(e2.id, part.id, c2.id)

    assert len(await ledger.list_elevator_parts(e1.id)) == 1
    assert await ledger.list_elevator_parts(e2.id) == []


async def test_install_requires_owner_and_no_pending_transfer(session, ledger_state):
    c1, c2, e1, _, part = ledger_state
    ledger = InstallationLedger(session, CLIENT)

    with pytest.raises(NotPartOwner):
        await ledger.install_part(e1.id, part.id, c1.id)
    with pytest.raises(ElevatorNotFound):
        await ledger.install_part("no-such-elevator", part.id, c2.id)

    await TransferWorkflow(session, CLIENT).create_transfer(
        TransferCreate(part_id=part.id, initiator_company_id=c2.id, counterparty_company_id=c1.id)
    )
    with pytest.raises(TransferAlreadyPending):
        await ledger.install_part(e1.id, part.id, c2.id)


async def test_removed_part_stays_with_the_elevator_until_returned(session, ledger_state):
    c1, c2, e1, e2, part = ledger_state
    ledger = InstallationLedger(session, CLIENT)
    first = await ledger.install_part(e1.id, part.id, c2.id)

    removed = await ledger.remove_part(e1.id, part.id, reason="worn bearing")
    assert removed.id == first.id
    assert removed.removed_at is not None
    assert removed.removal_reason == "worn bearing"
    assert await PartRegistry(session, CLIENT).get_owner(part.id) == Owner(OwnerType.ELEVATOR, e1.id)

    assert await ledger.list_elevator_parts(e1.id) == []
    assert [r.id for r in await ledger.list_elevator_parts(e1.id, include_removed=True)] == [first.id]

    with pytest.raises(PartNotInstalled):
        await ledger.remove_part(e1.id, part.id)
    with pytest.raises(PartNotTransferable):
        await ledger.install_part(e2.id, part.id, c2.id)
    with pytest.raises(PartNotTransferable):
        await TransferWorkflow(session, CLIENT).create_transfer(
            TransferCreate(part_id=part.id, initiator_company_id=c2.id, counterparty_company_id=c1.id)
        )

    returned = await ledger.return_to_stock(part.id, c2.id)
    assert returned.current_owner_type == "company"
    assert returned.current_owner_company_id == c2.id
    assert returned.current_owner_elevator_id is None

    second = await ledger.install_part(e2.id, part.id, c2.id)
    assert second.id != first.id
    history = await ProvenanceQuery(session, CLIENT).get_installation_history(part.id)
    assert [(r.elevator_id, r.removed_at is None) for r in history] == [(e1.id, False), (e2.id, True)]


async def test_return_to_stock_needs_a_removed_part(session, ledger_state):
    _, c2, e1, _, part = ledger_state
    ledger = InstallationLedger(session, CLIENT)

    with pytest.raises(PartNotTransferable):
        await ledger.return_to_stock(part.id, c2.id)

    await ledger.install_part(e1.id, part.id, c2.id)
    with pytest.raises(PartNotTransferable):
        await ledger.return_to_stock(part.id, c2.id)


async def test_remove_from_the_wrong_elevator(session, ledger_state):
    _, c2, e1, e2, part = ledger_state
    ledger = InstallationLedger(session, CLIENT)
    await ledger.install_part(e1.id, part.id, c2.id)

    with pytest.raises(PartNotInstalled):
        await ledger.remove_part(e2.id, part.id)


async def test_replace_swaps_parts_in_one_step(session, ledger_state):
    _, c2, e1, _, part = ledger_state
    spare = await make_part(session, c2.id, part_uid="P-002")
    ledger = InstallationLedger(session, CLIENT)
    await ledger.install_part(e1.id, part.id, c2.id)

    removed, installed = await ledger.replace_part(e1.id, part.id, spare.id, c2.id, reason="upgrade")

    assert removed.part_id == part.id and removed.removed_at is not None
    assert installed.part_id == spare.id and installed.removed_at is None
    assert [r.part_id for r in await ledger.list_elevator_parts(e1.id)] == [spare.id]
    registry = PartRegistry(session, CLIENT)
    assert await registry.get_owner(spare.id) == Owner(OwnerType.ELEVATOR, e1.id)
    assert await registry.get_owner(part.id) == Owner(OwnerType.ELEVATOR, e1.id)


async def test_failed_replace_keeps_the_old_part_installed(session, ledger_state):
    c1, c2, e1, _, part = ledger_state
    foreign = await make_part(session, c1.id, part_uid="P-003")
    ledger = InstallationLedger(session, CLIENT)
    await ledger.install_part(e1.id, part.id, c2.id)

    with pytest.raises(NotPartOwner):
        await ledger.replace_part(e1.id, part.id, foreign.id, c2.id)
    with pytest.raises(ValidationError):
        await ledger.replace_part(e1.id, part.id, part.id, c2.id)

    assert [r.part_id for r in await ledger.list_elevator_parts(e1.id)] == [part.id]
    assert await PartRegistry(session, CLIENT).get_owner(foreign.id) == Owner(OwnerType.COMPANY, c1.id)


async def test_register_installed_puts_new_part_into_the_elevator(session, ledger_state):
    c1, _, _, e2, _ = ledger_state
    ledger = InstallationLedger(session, CLIENT)

    part = await ledger.register_installed(
        PartCreate(title="Landing door", registrant_company_id=c1.id, install_into_elevator_id=e2.id)
    )

    assert await PartRegistry(session, CLIENT).get_owner(part.id) == Owner(OwnerType.ELEVATOR, e2.id)
    assert [r.part_id for r in await ledger.list_elevator_parts(e2.id)] == [part.id]
    log = await ProvenanceQuery(session, CLIENT).get_ownership_log(part.id)
    assert [e.cause for e in log] == ["registered", "installed"]


async def test_register_installed_without_elevator_keeps_part_in_stock(session, ledger_state):
    c1, _, _, _, _ = ledger_state

    part = await InstallationLedger(session, CLIENT).register_installed(
        PartCreate(title="Buffer", registrant_company_id=c1.id)
    )

    assert await PartRegistry(session, CLIENT).get_owner(part.id) == Owner(OwnerType.COMPANY, c1.id)


async def test_register_installed_into_unknown_elevator(session, ledger_state):
    c1, _, _, _, _ = ledger_state
    with pytest.raises(ElevatorNotFound):
        await InstallationLedger(session, CLIENT).register_installed(
            PartCreate(title="Buffer", registrant_company_id=c1.id, install_into_elevator_id="nowhere")
        )
