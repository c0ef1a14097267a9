"""Part registry — the single source of truth for a part's identity and owner.

``set_owner`` is the only code path that changes ``Part.current_owner_*``.
It is called by the transfer workflow (on approval) and the installation
ledger (install / return to stock); routers never reach it.
"""


import logging
import secrets
import string
from typing import NamedTuple

from sqlalchemy.ext.asyncio import AsyncSession

from elevatorid.core.config import settings
from elevatorid.core.exceptions import DuplicatePartUid, PartNotFound
from elevatorid.core.pagination import PaginationParams
from elevatorid.domain.enums import OwnerType, OwnershipCause
from elevatorid.domain.part import Part
from elevatorid.repositories.parts import (
    PartFeatureValueRepository,
    PartOwnershipEventRepository,
    PartRepository,
)
from elevatorid.schemas.part import FeatureValueIn, PartCreate, PartUpdate
from elevatorid.services import events
from elevatorid.services.directory import CatalogService, CompanyDirectory
from elevatorid.services.events import AuditTrailSink, DomainEvent, EventSink

logger = logging.getLogger(__name__)

_UID_ALPHABET = string.ascii_uppercase + string.digits
_UID_ATTEMPTS = 10


class Owner(NamedTuple):
    type: OwnerType
    id: str


def owner_of(part: Part) -> Owner:
    owner_type = OwnerType(part.current_owner_type)
    if owner_type is OwnerType.COMPANY:
        return Owner(owner_type, part.current_owner_company_id)
    return Owner(owner_type, part.current_owner_elevator_id)


class PartRegistry:
    def __init__(self, session: AsyncSession, client_id: str, sink: EventSink | None = None):
        self._session = session
        self._parts = PartRepository(session, client_id)
        self._values = PartFeatureValueRepository(session, client_id)
        self._log = PartOwnershipEventRepository(session, client_id)
        self._companies = CompanyDirectory(session, client_id)
        self._catalog = CatalogService(session, client_id)
        self._sink = sink or AuditTrailSink(session, client_id)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_part(self, part_id: str) -> Part:
        part = await self._parts.get_by_id(part_id)
        if not part:
            raise PartNotFound(part_id)
        return part

    async def get_owner(self, part_id: str) -> Owner:
        return owner_of(await self.get_part(part_id))

    async def list_parts(
        self,
        pagination: PaginationParams,
        *,
        q: str | None = None,
        category_id: str | None = None,
        barcode: str | None = None,
        owner_type: OwnerType | None = None,
        owner_id: str | None = None,
    ):
        filters = {
            "category_id": category_id,
            "barcode": barcode,
            "current_owner_type": owner_type.value if owner_type else None,
        }
        if owner_id:
            column = (
                "current_owner_elevator_id"
                if owner_type is OwnerType.ELEVATOR
                else "current_owner_company_id"
            )
            filters[column] = owner_id
        return await self._parts.search(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            q=q.strip() if q else None,
            filters=filters,
        )

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def register_part(self, data: PartCreate) -> Part:
        """Register a part; the registrant company becomes its first owner."""
        await self._companies.get_company(data.registrant_company_id)
        if data.category_id:
            await self._catalog.get_category(data.category_id)
        if data.features:
            await self._catalog.require_features([f.feature_id for f in data.features])

        if data.part_uid:
            part_uid = data.part_uid.strip()
            if await self._parts.uid_exists(part_uid):
                raise DuplicatePartUid(part_uid)
        else:
            part_uid = await self._generate_part_uid()

        part = await self._parts.try_create(
            part_uid=part_uid,
            title=data.title,
            category_id=data.category_id,
            barcode=data.barcode,
            manufacturer_country=data.manufacturer_country,
            origin_country=data.origin_country,
            registrant_company_id=data.registrant_company_id,
            current_owner_type=OwnerType.COMPANY.value,
            current_owner_company_id=data.registrant_company_id,
        )
        if part is None:
            # Lost a race with a concurrent registration of the same UID
            raise DuplicatePartUid(part_uid)

        await self._append_log(part, OwnershipCause.REGISTERED)
        await self._sync_features(part, data.features, replace=False)

        await self._sink.emit(
            DomainEvent(
                name=events.PART_REGISTERED,
                entity_type="part",
                entity_id=part.id,
                part_id=part.id,
                actor_company_id=data.registrant_company_id,
                payload={"part_uid": part.part_uid, "title": part.title},
            )
        )
        logger.info("Registered part %s (%s) for company %s", part.part_uid, part.id, data.registrant_company_id)
        return part

    async def update_part(self, part_id: str, data: PartUpdate) -> Part:
        """Update descriptive fields and specs. Ownership is not editable here."""
        part = await self.get_part(part_id)
        fields = data.model_dump(exclude_unset=True, exclude={"features"})
        if fields.get("title") is None:
            fields.pop("title", None)
        if fields.get("category_id"):
            await self._catalog.get_category(fields["category_id"])
        if fields:
            part = await self._parts.update(part.id, **fields)
        if data.features is not None:
            await self._catalog.require_features([f.feature_id for f in data.features])
            await self._sync_features(part, data.features, replace=True)
        return part

    async def set_owner(
        self,
        part_id: str,
        owner_type: OwnerType,
        owner_id: str,
        cause: OwnershipCause,
        *,
        transfer_id: str | None = None,
        elevator_part_id: str | None = None,
    ) -> Part:
        """Move the owner pointer and append the matching ownership event.

        Internal: callers run this inside their own transaction together with
        the transfer or installation row that justifies the change.
        """
        part = await self._parts.get_for_update(part_id)
        if not part:
            raise PartNotFound(part_id)

        if owner_type is OwnerType.COMPANY:
            owner_columns = {"current_owner_company_id": owner_id, "current_owner_elevator_id": None}
        else:
            owner_columns = {"current_owner_company_id": None, "current_owner_elevator_id": owner_id}

        part = await self._parts.update(part.id, current_owner_type=owner_type.value, **owner_columns)
        await self._append_log(
            part, cause, transfer_id=transfer_id, elevator_part_id=elevator_part_id
        )
        logger.info("Part %s now owned by %s %s (%s)", part.id, owner_type.value, owner_id, cause.value)
        return part

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _append_log(
        self,
        part: Part,
        cause: OwnershipCause,
        *,
        transfer_id: str | None = None,
        elevator_part_id: str | None = None,
    ) -> None:
        await self._log.create(
            part_id=part.id,
            sequence=await self._log.next_sequence(part.id),
            cause=cause.value,
            owner_type=part.current_owner_type,
            owner_company_id=part.current_owner_company_id,
            owner_elevator_id=part.current_owner_elevator_id,
            transfer_id=transfer_id,
            elevator_part_id=elevator_part_id,
        )

    async def _generate_part_uid(self) -> str:
        for _ in range(_UID_ATTEMPTS):
            suffix = "".join(secrets.choice(_UID_ALPHABET) for _ in range(settings.part_uid_length))
            candidate = f"{settings.part_uid_prefix}{suffix}"
            if not await self._parts.uid_exists(candidate):
                return candidate
        raise DuplicatePartUid(candidate)

    async def _sync_features(self, part: Part, features: list[FeatureValueIn], *, replace: bool) -> None:
        """Upsert feature values; with ``replace`` also drop features not listed."""
        wanted = {f.feature_id: f.value for f in features}
        existing = {v.feature_id: v for v in await self._values.for_part(part.id)}

        for feature_id, value in wanted.items():
            row = existing.get(feature_id)
            if row is None:
                await self._values.create(part_id=part.id, feature_id=feature_id, value=value)
            elif row.value != value:
                await self._values.update(row.id, value=value)

        if replace:
            await self._values.delete_for_features(
                part.id, [fid for fid in existing if fid not in wanted]
            )
        await self._session.flush()
        await self._session.refresh(part, attribute_names=["feature_values"])
