"""Salon scheduling grid and duration-aggregation core."""
from salon_schedule.aggregator import ServiceTotals, aggregate, derive_end_time
from salon_schedule.day_view import DayGrid, DayScheduleViewModel, LoadStatus
from salon_schedule.edit_session import AppointmentEditSession, SessionState
from salon_schedule.models import Appointment, AppointmentStatus, Resource, ServiceOffering
from salon_schedule.schedule_config import ScheduleConfig
from salon_schedule.slot_index import SlotIndex
from salon_schedule.timegrid import GridConfigurationError, build_time_grid, format_minutes

__all__ = [
    "Appointment",
    "AppointmentEditSession",
    "AppointmentStatus",
    "DayGrid",
    "DayScheduleViewModel",
    "GridConfigurationError",
    "LoadStatus",
    "Resource",
    "ScheduleConfig",
    "ServiceOffering",
    "ServiceTotals",
    "SessionState",
    "SlotIndex",
    "aggregate",
    "build_time_grid",
    "derive_end_time",
    "format_minutes",
]
