"""Shared test fixtures."""
from datetime import date

import pytest

from salon_schedule.models import Appointment, Resource, ServiceOffering


@pytest.fixture
def service_catalog():
    """Service catalog with one incomplete record."""
    return [
        ServiceOffering(id="srv-cut", name="Haircut", duration_minutes=45, price=12000),
        ServiceOffering(id="srv-color", service_name="Coloring", duration_minutes=90, price=25000),
        ServiceOffering(id="srv-wash", title="Wash", duration_minutes=None, price=None),
    ]


@pytest.fixture
def roster():
    """Two staff members."""
    return [
        Resource(id="emp-1", full_name="Anna Kovacs"),
        Resource(id="emp-2", first_name="Bela", last_name="Nagy"),
    ]


@pytest.fixture
def selected_day():
    return date(2025, 1, 15)


@pytest.fixture
def make_appointment():
    """Build an appointment from transport-style fields."""
    def _create(appointment_id, start, end, employee_id="emp-1", **extra):
        return Appointment.model_validate({
            "id": appointment_id,
            "start_time": f"2025-01-15 {start}",
            "end_time": f"2025-01-15 {end}",
            "employee_id": employee_id,
            **extra,
        })
    return _create
