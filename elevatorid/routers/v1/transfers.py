"""Transfer workflow endpoints (/api/v1/transfers)."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from elevatorid.core.config import settings
from elevatorid.core.pagination import PaginationParams
from elevatorid.core.response import DataResponse, ListResponse, paginated
from elevatorid.db.base import get_db
from elevatorid.domain.enums import TransferStatus
from elevatorid.schemas.transfer import ApprovalRequest, RejectRequest, TransferCreate, TransferOut
from elevatorid.services.transfers import TransferWorkflow

router = APIRouter(prefix="/transfers", tags=["Transfers"])


def _svc(session: AsyncSession) -> TransferWorkflow:
    return TransferWorkflow(session, settings.default_client_id)


@router.get("", response_model=ListResponse[TransferOut])
async def list_transfers(
    filter_status: Optional[TransferStatus] = Query(default=None, alias="status"),
    company_id: Optional[str] = Query(
        default=None, alias="companyId", description="Transfers where the company is any party"
    ),
    part_id: Optional[str] = Query(default=None, alias="partId"),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
):
    items, total = await _svc(session).list_transfers(
        pagination, status=filter_status, company_id=company_id, part_id=part_id
    )
    return paginated(
        [TransferOut.model_validate(t) for t in items],
        total, pagination.page, pagination.limit,
    )


@router.post("", response_model=DataResponse[TransferOut], status_code=status.HTTP_201_CREATED)
async def create_transfer(
    body: TransferCreate,
    session: AsyncSession = Depends(get_db),
):
    """Open a pending transfer. The counterpart (or its CEO by phone) must approve it."""
    transfer = await _svc(session).create_transfer(body)
    return {"data": TransferOut.model_validate(transfer)}


@router.get("/{transfer_id}", response_model=DataResponse[TransferOut])
async def get_transfer(
    transfer_id: str,
    session: AsyncSession = Depends(get_db),
):
    transfer = await _svc(session).get_transfer(transfer_id)
    return {"data": TransferOut.model_validate(transfer)}


@router.post("/{transfer_id}/approve", response_model=DataResponse[TransferOut])
async def approve_transfer(
    transfer_id: str,
    body: ApprovalRequest = Body(...),
    session: AsyncSession = Depends(get_db),
):
    """Approve in-app (`method: in_app`) or by CEO phone confirmation (`method: phone`)."""
    transfer = await _svc(session).approve_transfer(transfer_id, body)
    return {"data": TransferOut.model_validate(transfer)}


@router.post("/{transfer_id}/reject", response_model=DataResponse[TransferOut])
async def reject_transfer(
    transfer_id: str,
    body: RejectRequest,
    session: AsyncSession = Depends(get_db),
):
    transfer = await _svc(session).reject_transfer(
        transfer_id, body.reject_reason, actor_company_id=body.actor_company_id
    )
    return {"data": TransferOut.model_validate(transfer)}
