"""Company directory, elevator registry and part attribute catalog.

These are collaborators of the ledger: transfers validate counterparties and
CEO phones against the company directory, installations check that the
elevator exists, and part registration checks feature ids against the
catalog. The create/list operations exist so an installation can be seeded
without the profile/onboarding service.
"""


import re

from sqlalchemy.ext.asyncio import AsyncSession

from elevatorid.core.exceptions import (
    CompanyNotFound,
    ConflictError,
    ElevatorNotFound,
    NotFoundError,
    ValidationError,
)
from elevatorid.core.pagination import PaginationParams
from elevatorid.domain.catalog import Category, Feature
from elevatorid.domain.company import Company
from elevatorid.domain.elevator import Elevator
from elevatorid.repositories.directory import (
    CategoryRepository,
    CompanyRepository,
    ElevatorRepository,
    FeatureRepository,
)
from elevatorid.schemas.directory import CategoryCreate, CompanyCreate, ElevatorCreate, FeatureCreate

_NON_DIGITS = re.compile(r"\D+")


def normalize_phone(phone: str | None) -> str:
    """Digits only, so "+98 912-000 1122" and "989120001122" compare equal."""
    return _NON_DIGITS.sub("", phone or "")


class CompanyDirectory:
    def __init__(self, session: AsyncSession, client_id: str):
        self._repo = CompanyRepository(session, client_id)

    async def get_company(self, company_id: str) -> Company:
        company = await self._repo.get_by_id(company_id)
        if not company:
            raise CompanyNotFound(company_id)
        return company

    async def ceo_phone_matches(self, company_id: str, phone: str) -> bool:
        company = await self.get_company(company_id)
        registered = normalize_phone(company.ceo_phone)
        return bool(registered) and registered == normalize_phone(phone)

    async def list_companies(self, pagination: PaginationParams):
        return await self._repo.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
        )

    async def create_company(self, data: CompanyCreate) -> Company:
        return await self._repo.create(**data.model_dump(exclude_none=True, mode="json"))


class ElevatorRegistry:
    def __init__(self, session: AsyncSession, client_id: str):
        self._repo = ElevatorRepository(session, client_id)
        self._companies = CompanyDirectory(session, client_id)

    async def get_elevator(self, elevator_id: str) -> Elevator:
        elevator = await self._repo.get_by_id(elevator_id)
        if not elevator:
            raise ElevatorNotFound(elevator_id)
        return elevator

    async def list_elevators(self, pagination: PaginationParams, status: str | None = None):
        return await self._repo.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            filters={"status": status} if status else None,
        )

    async def create_elevator(self, data: ElevatorCreate) -> Elevator:
        if await self._repo.get_by_uid(data.elevator_uid):
            raise ConflictError(f"Elevator UID '{data.elevator_uid}' is already registered")
        if data.installer_company_id:
            await self._companies.get_company(data.installer_company_id)
        return await self._repo.create(**data.model_dump(exclude_none=True, mode="json"))


class CatalogService:
    def __init__(self, session: AsyncSession, client_id: str):
        self._categories = CategoryRepository(session, client_id)
        self._features = FeatureRepository(session, client_id)

    async def get_category(self, category_id: str) -> Category:
        category = await self._categories.get_by_id(category_id)
        if not category:
            raise NotFoundError("Category", category_id)
        return category

    async def list_categories(self, pagination: PaginationParams):
        return await self._categories.list(
            offset=pagination.offset, limit=pagination.limit, order_by="title", order="asc"
        )

    async def create_category(self, data: CategoryCreate) -> Category:
        if data.parent_id:
            await self.get_category(data.parent_id)
        category = await self._categories.try_create(**data.model_dump(exclude_none=True))
        if category is None:
            raise ConflictError(f"Category slug '{data.slug}' already exists")
        return category

    async def list_features(self, pagination: PaginationParams, category_id: str | None = None):
        return await self._features.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by="key",
            order="asc",
            filters={"category_id": category_id} if category_id else None,
        )

    async def create_feature(self, data: FeatureCreate) -> Feature:
        if data.category_id:
            await self.get_category(data.category_id)
        feature = await self._features.try_create(**data.model_dump(exclude_none=True))
        if feature is None:
            raise ConflictError(f"Feature key '{data.key}' already exists")
        return feature

    async def require_features(self, feature_ids: list[str]) -> list[Feature]:
        """Return the features, failing on any id the catalog doesn't know."""
        unique_ids = list(dict.fromkeys(feature_ids))
        found = await self._features.get_many(unique_ids)
        missing = set(unique_ids) - {f.id for f in found}
        if missing:
            raise ValidationError(f"Unknown feature id(s): {', '.join(sorted(missing))}")
        return found
