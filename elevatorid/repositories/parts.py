"""Part, feature value and ownership event repositories."""

from __future__ import annotations

from typing import Any

from sqlalchemy import delete, func, or_, select

from elevatorid.domain.part import Part, PartFeatureValue, PartOwnershipEvent
from elevatorid.repositories.base import BaseRepository


class PartRepository(BaseRepository[Part]):
    model = Part

    async def get_for_update(self, part_id: str) -> Part | None:
        """Load the part row with a row lock (no-op on SQLite, which locks the database)."""
        result = await self._session.execute(
            self._base_query()
            .where(Part.id == part_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def uid_exists(self, part_uid: str) -> bool:
        # part_uid is globally unique, so this check ignores the tenant
        result = await self._session.execute(
            select(func.count()).select_from(Part).where(Part.part_uid == part_uid)
        )
        return result.scalar_one() > 0

    async def search(
        self,
        *,
        offset: int,
        limit: int,
        order_by: str,
        order: str,
        q: str | None = None,
        filters: dict[str, Any] | None = None,
    ) -> tuple[list[Part], int]:
        query = self._base_query()
        if q:
            like = f"%{q}%"
            query = query.where(
                or_(Part.title.ilike(like), Part.part_uid.ilike(like), Part.barcode.ilike(like))
            )
        for col_name, value in (filters or {}).items():
            if value is not None:
                query = query.where(getattr(Part, col_name) == value)
        return await self._page(query, offset=offset, limit=limit, order_by=order_by, order=order)


class PartFeatureValueRepository(BaseRepository[PartFeatureValue]):
    model = PartFeatureValue

    async def for_part(self, part_id: str) -> list[PartFeatureValue]:
        result = await self._session.execute(
            self._base_query().where(PartFeatureValue.part_id == part_id)
        )
        return list(result.scalars().all())

    async def delete_for_features(self, part_id: str, feature_ids: list[str]) -> None:
        if not feature_ids:
            return
        await self._session.execute(
            delete(PartFeatureValue)
            .where(PartFeatureValue.part_id == part_id)
            .where(PartFeatureValue.feature_id.in_(feature_ids))
            .execution_options(synchronize_session=False)
        )


class PartOwnershipEventRepository(BaseRepository[PartOwnershipEvent]):
    """Append-only: exposes create and ordered reads, never update."""

    model = PartOwnershipEvent

    async def next_sequence(self, part_id: str) -> int:
        result = await self._session.execute(
            select(func.coalesce(func.max(PartOwnershipEvent.sequence), 0)).where(
                PartOwnershipEvent.part_id == part_id
            )
        )
        return result.scalar_one() + 1

    async def for_part(self, part_id: str) -> list[PartOwnershipEvent]:
        result = await self._session.execute(
            self._base_query()
            .where(PartOwnershipEvent.part_id == part_id)
            .order_by(PartOwnershipEvent.sequence.asc())
        )
        return list(result.scalars().all())
