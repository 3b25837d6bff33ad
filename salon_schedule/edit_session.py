"""Draft state for creating or updating one appointment.

The session derives the end time and a suggested price from the selected
services. Two independent one-way latches stop that derivation:
- end_time_touched: set when the end time is edited directly
- price_touched: set when the price is edited directly
Once set, a latch stays set for the rest of the session.
"""
import math
import re
from datetime import date
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from salon_schedule import config
from salon_schedule.aggregator import (
    CatalogEntry,
    ServiceTotals,
    aggregate,
    build_catalog,
    derive_end_time,
    format_price,
)
from salon_schedule.logging_config import generate_draft_id, get_logger
from salon_schedule.models import Appointment, AppointmentStatus, ServiceOffering
from salon_schedule.schedule_config import ScheduleConfig
from salon_schedule.timegrid import format_minutes, parse_hhmm, snap_to_grid

logger = get_logger(__name__)

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_HHMM_RE = re.compile(r"^\d{2}:\d{2}$")


class SessionState(str, Enum):
    """Edit session lifecycle."""
    OPEN = "open"
    EDITING = "editing"
    SAVED = "saved"
    CANCELLED = "cancelled"


VALID_TRANSITIONS: Dict[SessionState, List[SessionState]] = {
    SessionState.OPEN: [
        SessionState.EDITING,
        SessionState.SAVED,  # Save without changes
        SessionState.CANCELLED,
    ],
    SessionState.EDITING: [
        SessionState.SAVED,
        SessionState.CANCELLED,
    ],
    SessionState.SAVED: [],
    SessionState.CANCELLED: [],
}


def validate_transition(current: SessionState, intended: SessionState) -> bool:
    """True if the session may move from `current` to `intended`."""
    return intended in VALID_TRANSITIONS.get(current, [])


class SessionClosedError(Exception):
    """Raised when a saved or cancelled session is modified."""
    pass


class InvalidTransitionError(Exception):
    """Raised on an illegal session state change."""
    pass


class DraftValidationError(ValueError):
    """Raised when the draft cannot be turned into a save payload."""
    pass


def validate_interval(
    date_iso: str,
    start_hhmm: str,
    end_hhmm: str,
    min_minutes: int = config.MIN_INTERVAL_MINUTES
) -> Optional[str]:
    """
    Client-side check of a same-day interval.

    Returns:
        Error message, or None when the interval is acceptable
    """
    if not date_iso or not start_hhmm or not end_hhmm:
        return "Missing date or time."
    if not _ISO_DATE_RE.match(date_iso):
        return "Invalid date."
    if not _HHMM_RE.match(start_hhmm) or not _HHMM_RE.match(end_hhmm):
        return "Invalid time format."
    try:
        start = parse_hhmm(start_hhmm)
        end = parse_hhmm(end_hhmm)
    except ValueError:
        return "Invalid time format."
    if end <= start:
        return "End time must be after start time."
    if end - start < min_minutes:
        return f"Interval too short (min. {min_minutes} minutes)."
    return None


class AppointmentEditSession:
    """
    Mutable draft behind the appointment form.

    Open it with `for_cell` (new appointment from a clicked grid cell) or
    `from_appointment` (edit). `save()` returns the payload for the caller
    to persist; the session never talks to the store itself.
    """

    def __init__(
        self,
        day: str,
        start_time: str,
        end_time: str,
        catalog: Union[Iterable[CatalogEntry], Mapping[str, ServiceOffering]] = (),
        appointment_id: Optional[str] = None,
        title: str = "",
        resource_id: Optional[str] = None,
        client_id: Optional[str] = None,
        service_ids: Iterable[str] = (),
        status: Union[AppointmentStatus, str] = AppointmentStatus.BOOKED,
        price: str = "",
        payment_method: str = "",
        notes: str = "",
        schedule_config: Optional[ScheduleConfig] = None
    ):
        self._check_date(day)

        self.catalog = catalog if isinstance(catalog, Mapping) else build_catalog(catalog)
        self.appointment_id = appointment_id
        self.title = title
        self.day = day
        self.start_time = format_minutes(parse_hhmm(start_time))
        self.end_time = format_minutes(parse_hhmm(end_time))
        self.resource_id = resource_id
        self.client_id = client_id
        self.service_ids: List[str] = []
        for service_id in service_ids:
            if service_id not in self.service_ids:
                self.service_ids.append(service_id)
        self.status = AppointmentStatus(status)
        self.price = price
        self.payment_method = payment_method
        self.notes = notes
        self.schedule_config = schedule_config or ScheduleConfig()

        self.end_time_touched = False
        self.price_touched = False
        self.state = SessionState.OPEN

        self.draft_id = generate_draft_id()
        self.logger = logger.bind(draft_id=self.draft_id)

    @classmethod
    def for_cell(
        cls,
        resource_id: str,
        bucket_minute: int,
        day: Union[date, str],
        catalog: Union[Iterable[CatalogEntry], Mapping[str, ServiceOffering]] = (),
        schedule_config: Optional[ScheduleConfig] = None,
        **kwargs: Any
    ) -> "AppointmentEditSession":
        """
        New draft seeded from a clicked grid cell.

        Args:
            resource_id: Column of the clicked cell
            bucket_minute: Row of the clicked cell (minutes since midnight)
            day: Selected day
            catalog: Service catalog for duration/price aggregation
            schedule_config: Salon settings (default duration, placeholder title)

        Returns:
            Session whose end time is start + default duration
        """
        schedule_config = schedule_config or ScheduleConfig()
        start = format_minutes(bucket_minute)
        day_iso = day.isoformat() if isinstance(day, date) else day
        end = derive_end_time(start, schedule_config.default_duration_minutes)
        return cls(
            day_iso, start, end,
            catalog=catalog,
            resource_id=resource_id,
            schedule_config=schedule_config,
            **kwargs
        )

    @classmethod
    def from_appointment(
        cls,
        appointment: Appointment,
        catalog: Union[Iterable[CatalogEntry], Mapping[str, ServiceOffering]] = (),
        **kwargs: Any
    ) -> "AppointmentEditSession":
        """
        Draft pre-filled from an existing appointment.

        Start and end are taken as stored; nothing is recomputed until the
        start time or the service selection changes.
        """
        return cls(
            appointment.start_time.strftime(config.DATE_FORMAT),
            appointment.start_time.strftime(config.TIME_FORMAT),
            appointment.end_time.strftime(config.TIME_FORMAT),
            catalog=catalog,
            appointment_id=appointment.id,
            title=appointment.title,
            resource_id=appointment.resource_id,
            client_id=appointment.client_id,
            service_ids=appointment.service_ids,
            status=appointment.status,
            price=format_price(appointment.price) if appointment.price is not None else "",
            payment_method=appointment.payment_method or "",
            notes=appointment.notes or "",
            **kwargs
        )

    # Derived values

    @property
    def totals(self) -> ServiceTotals:
        return aggregate(self.service_ids, self.catalog, self.schedule_config.default_duration_minutes)

    @property
    def is_closed(self) -> bool:
        return self.state in (SessionState.SAVED, SessionState.CANCELLED)

    def validation_error(self) -> Optional[str]:
        """Interval problem for display, or None; save() does not enforce it."""
        return validate_interval(
            self.day, self.start_time, self.end_time, self.schedule_config.min_interval_minutes
        )

    # Mutations

    def toggle_service(self, service_id: str) -> None:
        """Add the service if absent, remove it if selected."""
        self._touch()
        if service_id in self.service_ids:
            self.service_ids.remove(service_id)
        else:
            self.service_ids.append(service_id)
        self._recompute()

    def add_service(self, service_id: str) -> None:
        if service_id not in self.service_ids:
            self.toggle_service(service_id)

    def remove_service(self, service_id: str) -> None:
        if service_id in self.service_ids:
            self.toggle_service(service_id)

    def set_start_time(self, hhmm: str, snap: Optional[str] = None) -> None:
        """
        Change the start time and re-derive the end time.

        Args:
            hhmm: New start (HH:MM)
            snap: Optional snap direction ("nearest", "up", "down") on the
                salon booking step
        """
        normalized = self._normalize_time(hhmm, snap)
        self._touch()
        self.start_time = normalized
        self._recompute()

    def set_end_time(self, hhmm: str, snap: Optional[str] = None) -> None:
        """Manual end time; stops automatic end-time derivation."""
        normalized = self._normalize_time(hhmm, snap)
        self._touch()
        self.end_time = normalized
        self.end_time_touched = True

    def set_price(self, value: str) -> None:
        """Manual price; stops price suggestion even if cleared later."""
        self._touch()
        self.price = value
        self.price_touched = True

    def set_date(self, day: Union[date, str]) -> None:
        day_iso = day.isoformat() if isinstance(day, date) else day
        self._check_date(day_iso)
        self._touch()
        self.day = day_iso

    def update(self, **fields: Any) -> None:
        """Set plain fields (title, resource_id, client_id, status, payment_method, notes)."""
        allowed = {"title", "resource_id", "client_id", "status", "payment_method", "notes"}
        unknown = set(fields) - allowed
        if unknown:
            raise TypeError(f"Unknown draft fields: {', '.join(sorted(unknown))}")
        self._touch()
        for name, value in fields.items():
            if name == "status":
                value = AppointmentStatus(value)
            setattr(self, name, value)

    # Lifecycle

    def save(self) -> Dict[str, Any]:
        """
        Close the session and build the save payload.

        Returns:
            JSON-serializable dict; empty optional fields are omitted

        Raises:
            DraftValidationError: If the price text is not a number
            SessionClosedError: If the session is already closed
        """
        payload = self.to_payload()
        self._transition(SessionState.SAVED)
        self.logger.info(
            "appointment_draft_saved",
            appointment_id=self.appointment_id,
            resource_id=self.resource_id,
            services=len(self.service_ids),
        )
        return payload

    def cancel(self) -> None:
        self._transition(SessionState.CANCELLED)
        self.logger.info("appointment_draft_cancelled", appointment_id=self.appointment_id)

    def to_payload(self) -> Dict[str, Any]:
        """Payload for the current draft, without closing the session."""
        payload: Dict[str, Any] = {}
        if self.appointment_id:
            payload["id"] = self.appointment_id
        payload["title"] = self.title.strip() or self.schedule_config.placeholder_title
        payload["start_time"] = f"{self.day} {self.start_time}"
        payload["end_time"] = f"{self.day} {self.end_time}"
        if self.resource_id:
            payload["employee_id"] = self.resource_id
        if self.client_id:
            payload["client_id"] = self.client_id
        payload["service_ids"] = list(self.service_ids)
        payload["status"] = self.status.value
        price = self._parse_price()
        if price is not None:
            payload["price"] = price
        if self.payment_method:
            payload["payment_method"] = self.payment_method
        if self.notes:
            payload["notes"] = self.notes
        return payload

    # Internals

    def _recompute(self) -> None:
        totals = self.totals
        if not self.end_time_touched:
            self.end_time = derive_end_time(self.start_time, totals.total_minutes)
        if not self.price_touched and not self.price and totals.total_price > 0:
            self.price = format_price(totals.total_price)
        self.logger.debug(
            "appointment_draft_recomputed",
            total_minutes=totals.total_minutes,
            total_price=totals.total_price,
            end_time=self.end_time,
        )

    def _parse_price(self) -> Optional[Union[int, float]]:
        text = self.price.strip() if self.price else ""
        if not text:
            return None
        try:
            value = float(text)
        except ValueError:
            raise DraftValidationError(f"Invalid price: {self.price!r}") from None
        if not math.isfinite(value):
            raise DraftValidationError(f"Invalid price: {self.price!r}")
        return int(value) if value.is_integer() else value

    def _touch(self) -> None:
        if self.is_closed:
            raise SessionClosedError(f"Session {self.draft_id} is {self.state.value}")
        if self.state == SessionState.OPEN:
            self._transition(SessionState.EDITING)

    def _transition(self, intended: SessionState) -> None:
        if self.is_closed:
            raise SessionClosedError(f"Session {self.draft_id} is {self.state.value}")
        if not validate_transition(self.state, intended):
            raise InvalidTransitionError(f"{self.state.value} -> {intended.value}")
        self.state = intended

    def _normalize_time(self, hhmm: str, snap: Optional[str]) -> str:
        if snap is None:
            return format_minutes(parse_hhmm(hhmm))
        return snap_to_grid(hhmm, self.schedule_config.snap_step_minutes, snap)

    @staticmethod
    def _check_date(day: str) -> None:
        if not isinstance(day, str) or not _ISO_DATE_RE.match(day):
            raise ValueError(f"Invalid date: {day!r}, expected YYYY-MM-DD")
        date.fromisoformat(day)
