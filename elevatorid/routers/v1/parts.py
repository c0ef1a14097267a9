"""Part registry and provenance endpoints (/api/v1/parts)."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from elevatorid.core.config import settings
from elevatorid.core.pagination import PaginationParams
from elevatorid.core.response import DataResponse, ItemsResponse, ListResponse, paginated
from elevatorid.db.base import get_db
from elevatorid.domain.enums import OwnerType
from elevatorid.schemas.installation import CustodyEntryOut, InstallationOut, OwnershipEventOut
from elevatorid.schemas.part import (
    OwnerOut,
    PartCreate,
    PartDetailOut,
    PartOut,
    PartUpdate,
    ReturnToStockRequest,
)
from elevatorid.schemas.transfer import PartTransferRequest, TransferCreate, TransferOut
from elevatorid.services.installations import InstallationLedger
from elevatorid.services.part_registry import PartRegistry
from elevatorid.services.provenance import ProvenanceQuery
from elevatorid.services.transfers import TransferWorkflow

router = APIRouter(prefix="/parts", tags=["Parts"])

_CLIENT = settings.default_client_id


# ------------------------------------------------------------------
# Registry
# ------------------------------------------------------------------

@router.get("", response_model=ListResponse[PartOut])
async def list_parts(
    q: Optional[str] = Query(default=None, description="Search title, part UID or barcode"),
    category_id: Optional[str] = Query(default=None, alias="categoryId"),
    barcode: Optional[str] = Query(default=None),
    owner_type: Optional[OwnerType] = Query(default=None, alias="ownerType"),
    owner_id: Optional[str] = Query(default=None, alias="ownerId"),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
):
    items, total = await PartRegistry(session, _CLIENT).list_parts(
        pagination,
        q=q,
        category_id=category_id,
        barcode=barcode,
        owner_type=owner_type,
        owner_id=owner_id,
    )
    return paginated(
        [PartOut.model_validate(p) for p in items],
        total, pagination.page, pagination.limit,
    )


@router.post("", response_model=DataResponse[PartDetailOut], status_code=status.HTTP_201_CREATED)
async def register_part(
    body: PartCreate,
    session: AsyncSession = Depends(get_db),
):
    """Register a part. With installIntoElevatorId it is installed right away by the registrant."""
    part = await InstallationLedger(session, _CLIENT).register_installed(body)
    return {"data": PartDetailOut.model_validate(part)}


@router.get("/{part_id}", response_model=DataResponse[PartDetailOut])
async def get_part(
    part_id: str,
    session: AsyncSession = Depends(get_db),
):
    part = await PartRegistry(session, _CLIENT).get_part(part_id)
    return {"data": PartDetailOut.model_validate(part)}


@router.put("/{part_id}", response_model=DataResponse[PartDetailOut])
async def update_part(
    part_id: str,
    body: PartUpdate,
    session: AsyncSession = Depends(get_db),
):
    part = await PartRegistry(session, _CLIENT).update_part(part_id, body)
    return {"data": PartDetailOut.model_validate(part)}


# ------------------------------------------------------------------
# Ownership changes
# ------------------------------------------------------------------

@router.post(
    "/{part_id}/transfer",
    response_model=DataResponse[TransferOut],
    status_code=status.HTTP_201_CREATED,
)
async def create_part_transfer(
    part_id: str,
    body: PartTransferRequest,
    session: AsyncSession = Depends(get_db),
):
    data = TransferCreate(part_id=part_id, **body.model_dump())
    transfer = await TransferWorkflow(session, _CLIENT).create_transfer(data)
    return {"data": TransferOut.model_validate(transfer)}


@router.post("/{part_id}/return-to-stock", response_model=DataResponse[PartOut])
async def return_part_to_stock(
    part_id: str,
    body: ReturnToStockRequest,
    session: AsyncSession = Depends(get_db),
):
    """Put a part that was removed from an elevator back into a company's stock."""
    part = await InstallationLedger(session, _CLIENT).return_to_stock(part_id, body.company_id)
    return {"data": PartOut.model_validate(part)}


# ------------------------------------------------------------------
# Provenance
# ------------------------------------------------------------------

@router.get("/{part_id}/owner", response_model=DataResponse[OwnerOut])
async def get_current_owner(
    part_id: str,
    session: AsyncSession = Depends(get_db),
):
    owner = await ProvenanceQuery(session, _CLIENT).get_current_owner(part_id)
    return {"data": OwnerOut(type=owner.type, id=owner.id)}


@router.get("/{part_id}/transfers", response_model=ItemsResponse[TransferOut])
async def get_transfer_history(
    part_id: str,
    session: AsyncSession = Depends(get_db),
):
    transfers = await ProvenanceQuery(session, _CLIENT).get_transfer_history(part_id)
    return {"data": [TransferOut.model_validate(t) for t in transfers]}


@router.get("/{part_id}/installations", response_model=ItemsResponse[InstallationOut])
async def get_installation_history(
    part_id: str,
    session: AsyncSession = Depends(get_db),
):
    records = await ProvenanceQuery(session, _CLIENT).get_installation_history(part_id)
    return {"data": [InstallationOut.model_validate(r) for r in records]}


@router.get("/{part_id}/ownership-log", response_model=ItemsResponse[OwnershipEventOut])
async def get_ownership_log(
    part_id: str,
    session: AsyncSession = Depends(get_db),
):
    log = await ProvenanceQuery(session, _CLIENT).get_ownership_log(part_id)
    return {"data": [OwnershipEventOut.model_validate(e) for e in log]}


@router.get("/{part_id}/custody", response_model=ItemsResponse[CustodyEntryOut])
async def get_chain_of_custody(
    part_id: str,
    session: AsyncSession = Depends(get_db),
):
    """Registration, transfers and installations of the part, oldest first."""
    entries = await ProvenanceQuery(session, _CLIENT).get_full_chain_of_custody(part_id)
    return {"data": [CustodyEntryOut.model_validate(e) for e in entries]}
