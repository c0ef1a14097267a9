"""String enums shared by models, schemas and services."""

from enum import Enum


class OwnerType(str, Enum):
    COMPANY = "company"
    ELEVATOR = "elevator"


class TransferStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class TransferDirection(str, Enum):
    INCOMING = "incoming"
    OUTGOING = "outgoing"


class ApprovalMethod(str, Enum):
    IN_APP = "in_app"
    PHONE = "phone"


class OwnershipCause(str, Enum):
    REGISTERED = "registered"
    TRANSFER_APPROVED = "transfer_approved"
    INSTALLED = "installed"
    RETURNED_TO_STOCK = "returned_to_stock"


class CompanyType(str, Enum):
    PRODUCER = "producer"
    IMPORTER = "importer"
    INSTALLER = "installer"
    SELLER = "seller"


class ElevatorStatus(str, Enum):
    ACTIVE = "active"
    MAINTENANCE = "maintenance"
    OUT_OF_ORDER = "out_of_order"
    SUSPENDED = "suspended"
