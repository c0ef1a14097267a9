"""Transfer Pydantic schemas, including the tagged approval variants."""


from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import Field, model_validator

from elevatorid.domain.enums import TransferDirection, TransferStatus
from elevatorid.schemas.common import CamelModel

class PartTransferRequest(CamelModel):
    """Body of ``POST /parts/{id}/transfer`` (the part comes from the path)."""

    initiator_company_id: str
    direction: TransferDirection = TransferDirection.OUTGOING
    counterparty_company_id: str | None = None
    other_company_name: str | None = Field(default=None, max_length=255)
    reason: str | None = None
    notes: str | None = None
    transfer_date: datetime | None = None

    @model_validator(mode="after")
    def _exactly_one_counterparty(self):
        has_id = bool(self.counterparty_company_id)
        has_name = bool(self.other_company_name and self.other_company_name.strip())
        if has_id == has_name:
            raise ValueError(
                "Provide exactly one of counterpartyCompanyId or otherCompanyName"
            )
        return self

class TransferCreate(PartTransferRequest):
    part_id: str

class InAppApproval(CamelModel):
    """The counterpart company's user approves inside the application."""

    method: Literal["in_app"] = "in_app"
    user_id: str
    company_id: str

class PhoneApproval(CamelModel):
    """Out-of-band confirmation by the counterpart company's registered CEO phone."""

    method: Literal["phone"] = "phone"
    phone: str = Field(min_length=4, max_length=30)

ApprovalRequest = Annotated[Union[InAppApproval, PhoneApproval], Field(discriminator="method")]

class RejectRequest(CamelModel):
    reject_reason: str = Field(min_length=1, max_length=500)
    actor_company_id: str | None = None

class TransferOut(CamelModel):
    id: str
    part_id: str
    initiator_company_id: str
    seller_company_id: str | None = None
    buyer_company_id: str | None = None
    direction: TransferDirection
    other_company_name: str | None = None
    status: TransferStatus
    approval_method: str | None = None
    approved_by_user_id: str | None = None
    approved_by_company_id: str | None = None
    approved_by_ceo_phone: str | None = None
    approved_at: datetime | None = None
    rejected_at: datetime | None = None
    reject_reason: str | None = None
    reason: str | None = None
    notes: str | None = None
    transfer_date: datetime | None = None
    created_at: datetime
    updated_at: datetime
