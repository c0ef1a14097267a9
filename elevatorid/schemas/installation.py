"""Installation, ownership log and chain-of-custody schemas."""


from datetime import datetime

from pydantic import Field

from elevatorid.domain.enums import OwnerType, OwnershipCause
from elevatorid.schemas.common import CamelModel

class InstallRequest(CamelModel):
    part_id: str
    installer_company_id: str

class RemoveRequest(CamelModel):
    reason: str | None = Field(default=None, max_length=1000)

class ReplaceRequest(CamelModel):
    new_part_id: str
    installer_company_id: str
    reason: str | None = Field(default=None, max_length=1000)

class InstallationOut(CamelModel):
    id: str
    elevator_id: str
    part_id: str
    installer_company_id: str | None = None
    installed_at: datetime
    removed_at: datetime | None = None
    removal_reason: str | None = None

class ReplaceOut(CamelModel):
    removed: InstallationOut
    installed: InstallationOut

class OwnershipEventOut(CamelModel):
    id: str
    part_id: str
    sequence: int
    cause: OwnershipCause
    owner_type: OwnerType
    owner_company_id: str | None = None
    owner_elevator_id: str | None = None
    transfer_id: str | None = None
    elevator_part_id: str | None = None
    created_at: datetime

class CustodyEntryOut(CamelModel):
    """One line of a part's chain of custody."""

    at: datetime
    kind: str  # registered | transfer_requested | transfer_approved | transfer_rejected
    #            installed | removed | returned_to_stock
    company_id: str | None = None
    counterparty_company_id: str | None = None
    counterparty_name: str | None = None
    elevator_id: str | None = None
    transfer_id: str | None = None
    elevator_part_id: str | None = None
    note: str | None = None
