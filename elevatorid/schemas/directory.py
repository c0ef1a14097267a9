"""Company, elevator and catalog schemas."""


from datetime import datetime

from pydantic import Field

from elevatorid.domain.enums import CompanyType, ElevatorStatus
from elevatorid.schemas.common import CamelModel

class CompanyCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    company_type: CompanyType | None = None
    trade_id: str | None = None
    ceo_phone: str | None = None

class CompanyOut(CamelModel):
    id: str
    name: str
    company_type: CompanyType | None = None
    trade_id: str | None = None
    ceo_phone: str | None = None
    created_at: datetime

class ElevatorCreate(CamelModel):
    elevator_uid: str = Field(min_length=1, max_length=50)
    province: str | None = None
    city: str | None = None
    address: str | None = None
    postal_code: str | None = None
    installer_company_id: str | None = None
    status: ElevatorStatus = ElevatorStatus.ACTIVE

class ElevatorOut(CamelModel):
    id: str
    elevator_uid: str
    province: str | None = None
    city: str | None = None
    address: str | None = None
    postal_code: str | None = None
    installer_company_id: str | None = None
    status: ElevatorStatus
    created_at: datetime

class CategoryCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    slug: str = Field(min_length=1, max_length=255, pattern=r"^[a-z0-9-]+$")
    parent_id: str | None = None

class CategoryOut(CamelModel):
    id: str
    title: str
    slug: str
    parent_id: str | None = None

class FeatureCreate(CamelModel):
    key: str = Field(min_length=1, max_length=100, pattern=r"^[a-z0-9_]+$")
    name: str = Field(min_length=1, max_length=255)
    data_type: str = Field(default="string", pattern="^(string|number|boolean)$")
    category_id: str | None = None

class FeatureOut(CamelModel):
    id: str
    key: str
    name: str
    data_type: str
    category_id: str | None = None
