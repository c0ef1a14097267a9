"""Domain package — all ORM models are imported here so Alembic autogenerate detects them.

Folder intent:
  part.py          — Part, its spec values and the append-only ownership log
  transfer.py      — PartTransfer (pending -> approved | rejected)
  installation.py  — ElevatorPart install/remove cycles
  company.py       — Company directory (external collaborator, minimal columns)
  elevator.py      — Elevator registry (external collaborator, minimal columns)
  catalog.py       — Category / Feature attribute schema
  audit.py         — Immutable domain event trail
  enums.py         — String enums for statuses and owner types
  mixins.py        — Shared IdMixin, TimestampMixin, TenantMixin
"""

from elevatorid.domain.audit import AuditTrail
from elevatorid.domain.catalog import Category, Feature
from elevatorid.domain.company import Company
from elevatorid.domain.elevator import Elevator
from elevatorid.domain.installation import ElevatorPart
from elevatorid.domain.part import Part, PartFeatureValue, PartOwnershipEvent
from elevatorid.domain.transfer import PartTransfer

__all__ = [
    "AuditTrail",
    "Category",
    "Company",
    "Elevator",
    "ElevatorPart",
    "Feature",
    "Part",
    "PartFeatureValue",
    "PartOwnershipEvent",
    "PartTransfer",
]
