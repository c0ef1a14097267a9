
from sqlalchemy import update

from elevatorid.domain.installation import ElevatorPart
from elevatorid.domain.mixins import utcnow
from elevatorid.repositories.base import BaseRepository


class InstallationRepository(BaseRepository[ElevatorPart]):
    model = ElevatorPart

    async def active_for_part(self, part_id: str) -> ElevatorPart | None:
        result = await self._session.execute(
            self._base_query()
            .where(ElevatorPart.part_id == part_id)
            .where(ElevatorPart.removed_at.is_(None))
        )
        return result.scalars().first()

    async def active_in_elevator(self, elevator_id: str, part_id: str) -> ElevatorPart | None:
        result = await self._session.execute(
            self._base_query()
            .where(ElevatorPart.elevator_id == elevator_id)
            .where(ElevatorPart.part_id == part_id)
            .where(ElevatorPart.removed_at.is_(None))
        )
        return result.scalars().first()

    async def for_part(self, part_id: str) -> list[ElevatorPart]:
        result = await self._session.execute(
            self._base_query()
            .where(ElevatorPart.part_id == part_id)
            .order_by(ElevatorPart.installed_at.asc(), ElevatorPart.id.asc())
        )
        return list(result.scalars().all())

    async def for_elevator(self, elevator_id: str, *, include_removed: bool = False) -> list[ElevatorPart]:
        q = self._base_query().where(ElevatorPart.elevator_id == elevator_id)
        if not include_removed:
            q = q.where(ElevatorPart.removed_at.is_(None))
        result = await self._session.execute(q.order_by(ElevatorPart.installed_at.asc()))
        return list(result.scalars().all())

    async def mark_removed(self, record_id: str, reason: str | None) -> bool:
        """Close an active row; False if it was already closed by another writer."""
        now = utcnow()
        result = await self._session.execute(
            update(ElevatorPart)
            .where(ElevatorPart.id == record_id)
            .where(ElevatorPart.removed_at.is_(None))
            .values(removed_at=now, removal_reason=reason, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
