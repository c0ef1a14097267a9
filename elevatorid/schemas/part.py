"""Part Pydantic schemas (request DTOs and response models)."""


from datetime import datetime

from pydantic import Field, computed_field

from elevatorid.domain.enums import OwnerType
from elevatorid.schemas.common import CamelModel

class FeatureValueIn(CamelModel):
    feature_id: str
    value: str | None = None

class PartCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    registrant_company_id: str
    part_uid: str | None = Field(default=None, max_length=64)  # generated when omitted
    category_id: str | None = None
    barcode: str | None = None
    manufacturer_country: str | None = None
    origin_country: str | None = None
    features: list[FeatureValueIn] = Field(default_factory=list)
    # Register straight into an elevator, installed by the registrant
    install_into_elevator_id: str | None = None

class PartUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    category_id: str | None = None
    barcode: str | None = None
    manufacturer_country: str | None = None
    origin_country: str | None = None
    features: list[FeatureValueIn] | None = None

class OwnerOut(CamelModel):
    type: OwnerType
    id: str

class FeatureValueOut(CamelModel):
    feature_id: str
    value: str | None = None

class PartOut(CamelModel):
    id: str
    part_uid: str
    title: str
    category_id: str | None = None
    barcode: str | None = None
    manufacturer_country: str | None = None
    origin_country: str | None = None
    registrant_company_id: str
    current_owner_type: OwnerType
    current_owner_company_id: str | None = None
    current_owner_elevator_id: str | None = None
    created_at: datetime
    updated_at: datetime

    @computed_field(alias="currentOwner")
    @property
    def current_owner(self) -> OwnerOut:
        owner_id = (
            self.current_owner_company_id
            if self.current_owner_type == OwnerType.COMPANY
            else self.current_owner_elevator_id
        )
        return OwnerOut(type=self.current_owner_type, id=owner_id)

class PartDetailOut(PartOut):
    feature_values: list[FeatureValueOut] = Field(default_factory=list, alias="features")

class ReturnToStockRequest(CamelModel):
    company_id: str
