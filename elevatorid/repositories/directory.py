"""Repositories for the collaborators the ledger validates against.

Pattern reminder: subclass BaseRepository, set ``model``, add domain-specific
queries only when a service needs them.
"""

from elevatorid.domain.audit import AuditTrail
from elevatorid.domain.catalog import Category, Feature
from elevatorid.domain.company import Company
from elevatorid.domain.elevator import Elevator
from elevatorid.repositories.base import BaseRepository


class CompanyRepository(BaseRepository[Company]):
    model = Company


class ElevatorRepository(BaseRepository[Elevator]):
    model = Elevator

    async def get_by_uid(self, elevator_uid: str) -> Elevator | None:
        result = await self._session.execute(
            self._base_query().where(Elevator.elevator_uid == elevator_uid)
        )
        return result.scalars().first()


class CategoryRepository(BaseRepository[Category]):
    model = Category


class FeatureRepository(BaseRepository[Feature]):
    model = Feature

    async def get_many(self, feature_ids: list[str]) -> list[Feature]:
        if not feature_ids:
            return []
        result = await self._session.execute(
            self._base_query().where(Feature.id.in_(feature_ids))
        )
        return list(result.scalars().all())


class AuditTrailRepository(BaseRepository[AuditTrail]):
    model = AuditTrail

    async def for_entity(self, entity_id: str) -> list[AuditTrail]:
        result = await self._session.execute(
            self._base_query()
            .where(AuditTrail.entity_id == entity_id)
            .order_by(AuditTrail.created_at.asc())
        )
        return list(result.scalars().all())
