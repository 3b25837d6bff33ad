"""Day schedule view model.

Composes the time grid, the slot index and the roster into one structure a
renderer can draw. The view model never fetches: the caller loads
resources/appointments for `current_date` and passes the results (or empty
lists plus a status) to `build`.
"""
import re
from datetime import date, timedelta
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict

from salon_schedule import config
from salon_schedule.logging_config import get_logger
from salon_schedule.aggregator import CatalogEntry
from salon_schedule.edit_session import AppointmentEditSession
from salon_schedule.models import Appointment, Resource, ServiceOffering
from salon_schedule.schedule_config import ScheduleConfig
from salon_schedule.slot_index import SlotIndex, cell_key
from salon_schedule.timegrid import (
    MINUTES_PER_DAY,
    build_time_grid,
    format_minutes,
    minutes_since_midnight,
)

logger = get_logger(__name__)

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class LoadStatus(str, Enum):
    """What the grid area shows."""
    LOADING = "loading"
    ERROR = "error"
    EMPTY = "empty"
    READY = "ready"


# Pure date navigation

def shift_day(day: date, delta: int) -> date:
    """Move a day forward (delta > 0) or back (delta < 0)."""
    return day + timedelta(days=delta)


def parse_iso_date(value: str) -> date:
    """
    Parse a strict YYYY-MM-DD date.

    Raises:
        ValueError: For any other format or an impossible date
    """
    if not isinstance(value, str) or not _ISO_DATE_RE.match(value):
        raise ValueError(f"Invalid date: {value!r}, expected YYYY-MM-DD")
    return date.fromisoformat(value)


def format_day_label(day: date) -> str:
    """Header label, e.g. 15.01.2025."""
    return day.strftime("%d.%m.%Y.")


class AppointmentPill(BaseModel):
    """Render data for one appointment inside a cell."""
    appointment_id: Optional[str]
    label: str
    time_label: str
    status_class: str
    duration_minutes: int
    height_px: float

    model_config = ConfigDict(frozen=True)


class LocationGroup(BaseModel):
    """Staff of one location, in roster order."""
    location_id: Optional[str]
    name: str
    resource_ids: Tuple[str, ...]
    employee_count: int

    model_config = ConfigDict(frozen=True)


def group_by_location(resources: Iterable[Resource]) -> Tuple[LocationGroup, ...]:
    """
    Group a roster into location cards.

    Groups appear in order of their first resource. Resources without a
    location form one trailing group named by the fallback literal. A
    location without a name shows its id.
    """
    order: List[Optional[str]] = []
    members: Dict[Optional[str], List[Resource]] = {}
    for resource in resources:
        if resource.location_id not in members:
            order.append(resource.location_id)
            members[resource.location_id] = []
        members[resource.location_id].append(resource)

    if None in members:
        order.remove(None)
        order.append(None)

    groups = []
    for location_id in order:
        staff = members[location_id]
        if location_id is None:
            name = config.UNLOCATED_LABEL
        else:
            name = next((r.location_name for r in staff if r.location_name), location_id)
        groups.append(LocationGroup(
            location_id=location_id,
            name=name,
            resource_ids=tuple(r.id for r in staff),
            employee_count=len(staff),
        ))
    return tuple(groups)


class DayGrid(BaseModel):
    """Derived grid for one day."""
    day: date
    day_label: str
    buckets: Tuple[int, ...]
    bucket_labels: Tuple[str, ...]
    resources: Tuple[Resource, ...]
    locations: Tuple[LocationGroup, ...]
    cells_by_key: Dict[str, Tuple[Appointment, ...]]
    unassigned: Tuple[Appointment, ...]
    booking_counts: Dict[str, int]
    status: LoadStatus
    error_message: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    def lookup(self, resource_id: str, minute: int) -> Tuple[Appointment, ...]:
        """Appointments of a cell; empty tuple when nothing starts there."""
        return self.cells_by_key.get(cell_key(resource_id, minute), ())


def pill_label(appointment: Appointment) -> str:
    """Cell label: client and services, either one alone, or the fallback literal."""
    client = appointment.client_name or ""
    services = ", ".join(appointment.service_names)
    if client and services:
        return f"{client} - {services}"
    return client or services or config.PILL_FALLBACK_LABEL


class DayScheduleViewModel:
    """
    Holds the selected day and derives its grid.

    Navigation methods return the new date so the caller can trigger a
    re-fetch for it.
    """

    def __init__(
        self,
        current_date: Union[date, str, None] = None,
        schedule_config: Optional[ScheduleConfig] = None,
        today_provider: Callable[[], date] = date.today
    ):
        self.schedule_config = schedule_config or ScheduleConfig()
        self._today = today_provider
        if current_date is None:
            current_date = today_provider()
        elif isinstance(current_date, str):
            current_date = parse_iso_date(current_date)
        self.current_date: date = current_date

    # Navigation

    def shift_day(self, delta: int) -> date:
        self.current_date = shift_day(self.current_date, delta)
        return self.current_date

    def go_to_today(self) -> date:
        self.current_date = self._today()
        return self.current_date

    def set_date(self, iso_date: str) -> date:
        self.current_date = parse_iso_date(iso_date)
        return self.current_date

    def fetch_range(self) -> Tuple[str, str]:
        """Wall-clock bounds for the appointment query of the selected day."""
        day = self.current_date.isoformat()
        return f"{day} 00:00", f"{day} 23:59"

    # Derivation

    @property
    def buckets(self) -> Tuple[int, ...]:
        start, end = self.schedule_config.window
        return build_time_grid(start, end, self.schedule_config.slot_size_minutes)

    def build(
        self,
        resources: Iterable[Resource],
        appointments: Iterable[Appointment],
        loading: bool = False,
        error: Optional[str] = None
    ) -> DayGrid:
        """
        Derive the grid for the selected day.

        Args:
            resources: Roster (column order)
            appointments: Appointments of the selected day
            loading: Upstream fetch still in flight
            error: Upstream failure message, if any

        Returns:
            DayGrid; identical inputs give an equal grid
        """
        roster = tuple(resources)
        index = SlotIndex.build(appointments, roster)
        buckets = self.buckets

        if error:
            status = LoadStatus.ERROR
        elif loading:
            status = LoadStatus.LOADING
        elif not roster:
            status = LoadStatus.EMPTY
        else:
            status = LoadStatus.READY

        grid = DayGrid(
            day=self.current_date,
            day_label=format_day_label(self.current_date),
            buckets=buckets,
            bucket_labels=tuple(format_minutes(m) for m in buckets),
            resources=roster,
            locations=group_by_location(roster),
            cells_by_key=index.cells_by_key,
            unassigned=index.unassigned,
            booking_counts={r.id: index.count_for(r.id) for r in roster},
            status=status,
            error_message=error or None,
        )
        logger.debug(
            "day_grid_built",
            date=self.current_date.isoformat(),
            status=status.value,
            resources=len(roster),
            appointments=len(index),
        )
        return grid

    def pill_for(self, appointment: Appointment) -> AppointmentPill:
        """Render data for one appointment; height scales with duration."""
        duration = appointment.duration_minutes
        if duration <= 0:
            duration = self.schedule_config.default_duration_minutes
        start = minutes_since_midnight(appointment.start_time)
        end = (start + duration) % MINUTES_PER_DAY
        slot = self.schedule_config.slot_size_minutes
        return AppointmentPill(
            appointment_id=appointment.id,
            label=pill_label(appointment),
            time_label=f"{format_minutes(start)} - {format_minutes(end)}",
            status_class=f"appt-status-{appointment.status.value}",
            duration_minutes=duration,
            height_px=duration / slot * self.schedule_config.pill_height_px,
        )

    def pills_for(self, grid: DayGrid, resource_id: str, minute: int) -> Tuple[AppointmentPill, ...]:
        return tuple(self.pill_for(a) for a in grid.lookup(resource_id, minute))

    def open_cell(
        self,
        resource_id: str,
        minute: int,
        catalog: Union[Iterable[CatalogEntry], Mapping[str, ServiceOffering]] = (),
        **kwargs: Any
    ) -> AppointmentEditSession:
        """New edit session for a clicked cell of the selected day, using this salon's settings."""
        return AppointmentEditSession.for_cell(
            resource_id,
            minute,
            self.current_date,
            catalog,
            schedule_config=self.schedule_config,
            **kwargs
        )
