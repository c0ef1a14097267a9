import pytest

from elevatorid.core.exceptions import PartNotFound
from elevatorid.domain.part import Part
from elevatorid.schemas.transfer import InAppApproval, TransferCreate
from elevatorid.services.installations import InstallationLedger
from elevatorid.services.provenance import ProvenanceQuery
from elevatorid.services.transfers import TransferWorkflow
from tests.helpers import CLIENT, make_company, make_elevator, make_part


async def _walk_part_through_its_life(session):
    c1 = await make_company(session, "Arya Lift")
    c2 = await make_company(session, "Pars Elevator")
    e1 = await make_elevator(session, "E-1")
    part = await make_part(session, c1.id, part_uid="P-001")
    workflow = TransferWorkflow(session, CLIENT)
    ledger = InstallationLedger(session, CLIENT)

    wrong = await workflow.create_transfer(
        TransferCreate(part_id=part.id, initiator_company_id=c1.id, counterparty_company_id=c2.id)
    )
    await workflow.reject_transfer(wrong.id, "wrong buyer")
    sale = await workflow.create_transfer(
        TransferCreate(part_id=part.id, initiator_company_id=c1.id, counterparty_company_id=c2.id, reason="sale")
    )
    await workflow.approve_transfer(sale.id, InAppApproval(user_id="u-2", company_id=c2.id))
    await ledger.install_part(e1.id, part.id, c2.id)
    await ledger.remove_part(e1.id, part.id, reason="modernisation")
    await ledger.return_to_stock(part.id, c2.id)
    return c1, c2, e1, part, wrong, sale


async def test_chain_of_custody_is_chronological(session):
    c1, c2, e1, part, wrong, sale = await _walk_part_through_its_life(session)

    chain = await ProvenanceQuery(session, CLIENT).get_full_chain_of_custody(part.id)

    assert [e.kind for e in chain] == [
        "registered",
        "transfer_requested",
        "transfer_rejected",
        "transfer_requested",
        "transfer_approved",
        "installed",
        "removed",
        "returned_to_stock",
    ]
    assert [e.at for e in chain] == sorted(e.at for e in chain)
    assert chain[0].company_id == c1.id
    assert chain[2].transfer_id == wrong.id and chain[2].note == "wrong buyer"
    assert chain[4].transfer_id == sale.id and chain[4].company_id == c2.id
    assert chain[5].elevator_id == e1.id
    assert chain[6].note == "modernisation"
    assert chain[7].company_id == c2.id


async def test_histories_are_oldest_first(session):
    _, _, e1, part, wrong, sale = await _walk_part_through_its_life(session)
    query = ProvenanceQuery(session, CLIENT)

    assert [t.id for t in await query.get_transfer_history(part.id)] == [wrong.id, sale.id]
    installs = await query.get_installation_history(part.id)
    assert [r.elevator_id for r in installs] == [e1.id]


async def test_folding_the_ownership_log_gives_the_current_owner(session):
    c1, c2, _, part, _, _ = await _walk_part_through_its_life(session)
    other = await make_part(session, c1.id, part_uid="P-002")
    query = ProvenanceQuery(session, CLIENT)

    for p in (part, other):
        log = await query.get_ownership_log(p.id)
        assert [e.sequence for e in log] == list(range(1, len(log) + 1))
        last = log[-1]
        current = await session.get(Part, p.id)
        assert (last.owner_type, last.owner_company_id, last.owner_elevator_id) == (
            current.current_owner_type,
            current.current_owner_company_id,
            current.current_owner_elevator_id,
        )
        assert (current.current_owner_company_id is None) != (current.current_owner_elevator_id is None)

    causes = [e.cause for e in await query.get_ownership_log(part.id)]
    assert causes == ["registered", "transfer_approved", "installed", "returned_to_stock"]


async def test_unknown_part_has_no_provenance(session):
    query = ProvenanceQuery(session, CLIENT)
    with pytest.raises(PartNotFound):
        await query.get_full_chain_of_custody("missing")
    with pytest.raises(PartNotFound):
        await query.get_current_owner("missing")
