"""PartTransfer repository, including the status compare-and-set used by approve/reject."""

from __future__ import annotations

from typing import Any

from sqlalchemy import or_, update

from elevatorid.domain.mixins import utcnow
from elevatorid.domain.transfer import PartTransfer
from elevatorid.repositories.base import BaseRepository


class TransferRepository(BaseRepository[PartTransfer]):
    model = PartTransfer

    async def pending_for_part(self, part_id: str) -> PartTransfer | None:
        result = await self._session.execute(
            self._base_query()
            .where(PartTransfer.part_id == part_id)
            .where(PartTransfer.status == "pending")
        )
        return result.scalars().first()

    async def for_part(self, part_id: str) -> list[PartTransfer]:
        result = await self._session.execute(
            self._base_query()
            .where(PartTransfer.part_id == part_id)
            .order_by(PartTransfer.created_at.asc(), PartTransfer.id.asc())
        )
        return list(result.scalars().all())

    async def search(
        self,
        *,
        offset: int,
        limit: int,
        order_by: str,
        order: str,
        company_id: str | None = None,
        filters: dict[str, Any] | None = None,
    ) -> tuple[list[PartTransfer], int]:
        q = self._base_query()
        if company_id:
            q = q.where(
                or_(
                    PartTransfer.initiator_company_id == company_id,
                    PartTransfer.seller_company_id == company_id,
                    PartTransfer.buyer_company_id == company_id,
                )
            )
        for col_name, value in (filters or {}).items():
            if value is not None:
                q = q.where(getattr(PartTransfer, col_name) == value)
        return await self._page(q, offset=offset, limit=limit, order_by=order_by, order=order)

    async def transition(self, transfer_id: str, *, from_status: str, **values: Any) -> bool:
        """Atomically move a transfer out of ``from_status``.

        Returns False when another writer changed the status first; the caller
        owns the resulting error.
        """
        values.setdefault("updated_at", utcnow())
        result = await self._session.execute(
            update(PartTransfer)
            .where(PartTransfer.id == transfer_id)
            .where(PartTransfer.client_id == self._client_id)
            .where(PartTransfer.status == from_status)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
