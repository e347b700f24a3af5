"""ORM model exports for convenient imports elsewhere in the app."""

from correlativos.models.activity_type import ActivityType
from correlativos.models.base import Base
from correlativos.models.correlative_counter import CorrelativeCounter
from correlativos.models.issuance_record import IssuanceRecord

__all__ = [
    "ActivityType",
    "Base",
    "CorrelativeCounter",
    "IssuanceRecord",
]
