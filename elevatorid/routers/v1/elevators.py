"""Elevator registry and installation endpoints (/api/v1/elevators)."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from elevatorid.core.config import settings
from elevatorid.core.pagination import PaginationParams
from elevatorid.core.response import DataResponse, ItemsResponse, ListResponse, paginated
from elevatorid.db.base import get_db
from elevatorid.domain.enums import ElevatorStatus
from elevatorid.schemas.directory import ElevatorCreate, ElevatorOut
from elevatorid.schemas.installation import (
    InstallationOut,
    InstallRequest,
    RemoveRequest,
    ReplaceOut,
    ReplaceRequest,
)
from elevatorid.services.directory import ElevatorRegistry
from elevatorid.services.installations import InstallationLedger

router = APIRouter(prefix="/elevators", tags=["Elevators"])

_CLIENT = settings.default_client_id


@router.get("", response_model=ListResponse[ElevatorOut])
async def list_elevators(
    filter_status: Optional[ElevatorStatus] = Query(default=None, alias="status"),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
):
    items, total = await ElevatorRegistry(session, _CLIENT).list_elevators(
        pagination, status=filter_status.value if filter_status else None
    )
    return paginated(
        [ElevatorOut.model_validate(e) for e in items],
        total, pagination.page, pagination.limit,
    )


@router.post("", response_model=DataResponse[ElevatorOut], status_code=status.HTTP_201_CREATED)
async def create_elevator(
    body: ElevatorCreate,
    session: AsyncSession = Depends(get_db),
):
    elevator = await ElevatorRegistry(session, _CLIENT).create_elevator(body)
    return {"data": ElevatorOut.model_validate(elevator)}


@router.get("/{elevator_id}", response_model=DataResponse[ElevatorOut])
async def get_elevator(
    elevator_id: str,
    session: AsyncSession = Depends(get_db),
):
    elevator = await ElevatorRegistry(session, _CLIENT).get_elevator(elevator_id)
    return {"data": ElevatorOut.model_validate(elevator)}


# ------------------------------------------------------------------
# Installed parts
# ------------------------------------------------------------------

@router.get("/{elevator_id}/parts", response_model=ItemsResponse[InstallationOut])
async def list_elevator_parts(
    elevator_id: str,
    include_removed: bool = Query(default=False, alias="includeRemoved"),
    session: AsyncSession = Depends(get_db),
):
    records = await InstallationLedger(session, _CLIENT).list_elevator_parts(
        elevator_id, include_removed=include_removed
    )
    return {"data": [InstallationOut.model_validate(r) for r in records]}


@router.post(
    "/{elevator_id}/parts",
    response_model=DataResponse[InstallationOut],
    status_code=status.HTTP_201_CREATED,
)
async def install_part(
    elevator_id: str,
    body: InstallRequest,
    session: AsyncSession = Depends(get_db),
):
    record = await InstallationLedger(session, _CLIENT).install_part(
        elevator_id, body.part_id, body.installer_company_id
    )
    return {"data": InstallationOut.model_validate(record)}


@router.post("/{elevator_id}/parts/{part_id}/remove", response_model=DataResponse[InstallationOut])
async def remove_part(
    elevator_id: str,
    part_id: str,
    body: RemoveRequest,
    session: AsyncSession = Depends(get_db),
):
    """Take a part out. It stays elevator-owned until returned to stock."""
    record = await InstallationLedger(session, _CLIENT).remove_part(elevator_id, part_id, body.reason)
    return {"data": InstallationOut.model_validate(record)}


@router.post("/{elevator_id}/parts/{part_id}/replace", response_model=DataResponse[ReplaceOut])
async def replace_part(
    elevator_id: str,
    part_id: str,
    body: ReplaceRequest,
    session: AsyncSession = Depends(get_db),
):
    removed, installed = await InstallationLedger(session, _CLIENT).replace_part(
        elevator_id, part_id, body.new_part_id, body.installer_company_id, body.reason
    )
    return {
        "data": ReplaceOut(
            removed=InstallationOut.model_validate(removed),
            installed=InstallationOut.model_validate(installed),
        )
    }
