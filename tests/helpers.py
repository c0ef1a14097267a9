"""Seeding helpers shared by the service-level tests."""

from elevatorid.core.config import settings
from elevatorid.core.pagination import PaginationParams
from elevatorid.schemas.directory import CompanyCreate, ElevatorCreate
from elevatorid.schemas.part import PartCreate
from elevatorid.services.directory import CompanyDirectory, ElevatorRegistry
from elevatorid.services.part_registry import PartRegistry

CLIENT = settings.default_client_id


def page(limit: int = 50, sort: str = "created_at", order: str = "desc") -> PaginationParams:
    return PaginationParams(page=1, limit=limit, size=None, sort=sort, order=order)


async def make_company(session, name: str, ceo_phone: str | None = None):
    return await CompanyDirectory(session, CLIENT).create_company(
        CompanyCreate(name=name, ceo_phone=ceo_phone)
    )


async def make_elevator(session, elevator_uid: str, installer_company_id: str | None = None):
    return await ElevatorRegistry(session, CLIENT).create_elevator(
        ElevatorCreate(elevator_uid=elevator_uid, city="Tehran", installer_company_id=installer_company_id)
    )


async def make_part(session, company_id: str, part_uid: str | None = None, title: str = "Traction sheave"):
    return await PartRegistry(session, CLIENT).register_part(
        PartCreate(title=title, registrant_company_id=company_id, part_uid=part_uid)
    )
