"""Domain records for the scheduling grid.

Best Practices:
- Pydantic models for records coming from the transport layer
- snake_case transport names mapped with aliases (employee_id -> resource_id)
- Records are frozen: the grid is always rebuilt from an immutable snapshot
"""
import math
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Optional, Sequence, Tuple, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from salon_schedule import config
from salon_schedule.timegrid import parse_wall_clock

Number = Union[int, float]


def first_present(record: Any, accessors: Sequence[Callable[[Any], Optional[str]]]) -> Optional[str]:
    """
    Try accessors in order and return the first non-empty result.

    The order of accessors is part of the contract: existing records use
    inconsistent schemas and rely on it.
    """
    for accessor in accessors:
        value = accessor(record)
        if value:
            return value
    return None


def is_number(value: Any) -> bool:
    """True for finite int/float values (bool excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _blank_to_none(v: Any) -> Any:
    if v is None:
        return None
    if isinstance(v, str):
        return v.strip() or None
    return str(v)


class AppointmentStatus(str, Enum):
    """Booking lifecycle status."""
    BOOKED = "booked"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Resource(BaseModel):
    """Staff member (or other bookable entity) owning a grid column."""
    id: str
    short_name: Optional[str] = None
    full_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    photo_url: Optional[str] = None
    color: Optional[str] = None
    location_id: Optional[str] = None
    location_name: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    @field_validator("location_id", mode="before")
    @classmethod
    def coerce_location(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @property
    def display_name(self) -> str:
        """Short name, full name, "first last", then the fallback literal."""
        return first_present(self, RESOURCE_NAME_ACCESSORS) or config.RESOURCE_FALLBACK_LABEL


RESOURCE_NAME_ACCESSORS: Tuple[Callable[[Resource], Optional[str]], ...] = (
    lambda r: r.short_name,
    lambda r: r.full_name,
    lambda r: " ".join(part for part in (r.first_name, r.last_name) if part),
)


class ServiceOffering(BaseModel):
    """Bookable service from the catalog."""
    id: str
    name: Optional[str] = None
    service_name: Optional[str] = None
    title: Optional[str] = None
    duration_minutes: Optional[Number] = Field(
        default=None,
        validation_alias=AliasChoices("duration_minutes", "duration"),
        description="None when absent or non-numeric"
    )
    price: Optional[Number] = Field(default=None, description="None when absent or non-numeric")

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    @field_validator("duration_minutes", "price", mode="before")
    @classmethod
    def numeric_or_none(cls, v: Any) -> Any:
        """Non-numeric values (including numeric strings) count as absent."""
        return v if is_number(v) else None

    @property
    def label(self) -> str:
        return first_present(self, SERVICE_LABEL_ACCESSORS) or self.id

    @property
    def effective_duration(self) -> Number:
        if self.duration_minutes is None:
            return config.DEFAULT_DURATION_MINUTES
        return self.duration_minutes

    @property
    def effective_price(self) -> Number:
        return 0 if self.price is None else self.price


SERVICE_LABEL_ACCESSORS: Tuple[Callable[[ServiceOffering], Optional[str]], ...] = (
    lambda s: s.name,
    lambda s: s.service_name,
    lambda s: s.title,
    lambda s: s.id,
)


class Appointment(BaseModel):
    """
    Appointment as returned by the appointment store.

    Transport uses snake_case with `employee_id`; the model exposes it as
    `resource_id` (both names accepted on input).
    """
    id: Optional[str] = None
    title: str = ""
    start_time: datetime
    end_time: datetime
    resource_id: Optional[str] = Field(default=None, alias="employee_id")
    client_id: Optional[str] = None
    client_name: Optional[str] = None
    service_ids: Tuple[str, ...] = ()
    service_names: Tuple[str, ...] = ()
    status: AppointmentStatus = AppointmentStatus.BOOKED
    price: Optional[Number] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def parse_timestamp(cls, v: Any) -> Any:
        if isinstance(v, (str, datetime)):
            return parse_wall_clock(v)
        return v

    @field_validator("id", "resource_id", "client_id", mode="before")
    @classmethod
    def coerce_reference(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("title", mode="before")
    @classmethod
    def coerce_title(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("service_ids", "service_names", mode="before")
    @classmethod
    def coerce_list(cls, v: Any) -> Any:
        if v is None:
            return ()
        return tuple(str(item) for item in v)

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return AppointmentStatus.BOOKED
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("price", mode="before")
    @classmethod
    def price_or_none(cls, v: Any) -> Any:
        return v if is_number(v) else None

    @property
    def duration_minutes(self) -> int:
        """Wall-clock length; may be <= 0 for inconsistent records."""
        return int((self.end_time - self.start_time).total_seconds() // 60)
