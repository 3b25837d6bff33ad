"""Test the day schedule view model."""
import pytest
from datetime import date
from salon_schedule.day_view import (
    DayScheduleViewModel,
    LoadStatus,
    format_day_label,
    group_by_location,
    parse_iso_date,
    pill_label,
    shift_day,
)
from salon_schedule.models import Resource
from salon_schedule.schedule_config import ScheduleConfig


@pytest.fixture
def view_model(selected_day):
    return DayScheduleViewModel(selected_day, today_provider=lambda: date(2025, 3, 1))


class TestNavigation:
    """Test day navigation."""

    def test_shift_day_forward_and_back(self, view_model):
        assert view_model.shift_day(1) == date(2025, 1, 16)
        assert view_model.shift_day(-1) == date(2025, 1, 15)

    def test_shift_across_month(self):
        assert shift_day(date(2025, 1, 31), 1) == date(2025, 2, 1)
        assert shift_day(date(2025, 3, 1), -1) == date(2025, 2, 28)

    def test_go_to_today(self, view_model):
        assert view_model.go_to_today() == date(2025, 3, 1)
        assert view_model.current_date == date(2025, 3, 1)

    def test_set_date(self, view_model):
        assert view_model.set_date("2025-06-02") == date(2025, 6, 2)

    @pytest.mark.parametrize("value", ["2025-6-2", "02.06.2025", "2025-02-30", ""])
    def test_set_date_rejects_invalid(self, view_model, value):
        with pytest.raises(ValueError):
            view_model.set_date(value)
        assert view_model.current_date == date(2025, 1, 15)

    def test_accepts_iso_string(self):
        assert DayScheduleViewModel("2025-01-15").current_date == date(2025, 1, 15)

    def test_defaults_to_today(self):
        view_model = DayScheduleViewModel(today_provider=lambda: date(2025, 5, 5))
        assert view_model.current_date == date(2025, 5, 5)

    def test_fetch_range(self, view_model):
        assert view_model.fetch_range() == ("2025-01-15 00:00", "2025-01-15 23:59")

    def test_parse_iso_date(self):
        assert parse_iso_date("2024-02-29") == date(2024, 2, 29)

    def test_day_label(self):
        assert format_day_label(date(2025, 1, 5)) == "05.01.2025."


class TestBuild:
    """Test grid derivation."""

    def test_default_window(self, view_model, roster):
        grid = view_model.build(roster, [])

        assert len(grid.buckets) == 24
        assert grid.bucket_labels[0] == "08:00"
        assert grid.bucket_labels[-1] == "19:30"
        assert grid.status is LoadStatus.READY

    def test_custom_salon_hours(self, selected_day, roster):
        config = ScheduleConfig(day_start="09:00", day_end="12:00", slot_size_minutes=15)
        grid = DayScheduleViewModel(selected_day, config).build(roster, [])

        assert grid.buckets[0] == 540
        assert grid.buckets[-1] == 705
        assert len(grid.buckets) == 12

    def test_cells_and_counts(self, view_model, roster, make_appointment):
        a1 = make_appointment("a1", "09:30", "10:00")
        a2 = make_appointment("a2", "09:30", "10:15")
        orphan = make_appointment("a3", "11:00", "11:30", employee_id=None)

        grid = view_model.build(roster, [a1, a2, orphan])

        assert grid.lookup("emp-1", 570) == (a1, a2)
        assert grid.cells_by_key["emp-1|570"] == (a1, a2)
        assert grid.unassigned == (orphan,)
        assert grid.booking_counts == {"emp-1": 2, "emp-2": 0}
        assert all(orphan not in cell for cell in grid.cells_by_key.values())

    def test_build_is_idempotent(self, view_model, roster, make_appointment):
        appointments = [make_appointment("a1", "09:30", "10:00"), make_appointment("a2", "15:00", "16:00")]

        assert view_model.build(roster, appointments) == view_model.build(roster, appointments)

    def test_error_state(self, view_model):
        """Upstream failure renders an error grid, never raises."""
        grid = view_model.build([], [], error="Unauthorized")

        assert grid.status is LoadStatus.ERROR
        assert grid.error_message == "Unauthorized"
        assert grid.cells_by_key == {}
        assert len(grid.buckets) == 24

    def test_loading_state(self, view_model):
        assert view_model.build([], [], loading=True).status is LoadStatus.LOADING

    def test_empty_state(self, view_model, make_appointment):
        grid = view_model.build([], [make_appointment("a1", "09:30", "10:00")])

        assert grid.status is LoadStatus.EMPTY


class TestPills:
    """Test render data for appointments."""

    def test_height_scales_with_duration(self, view_model, make_appointment):
        pill = view_model.pill_for(make_appointment("a1", "09:30", "11:00"))

        assert pill.duration_minutes == 90
        assert pill.height_px == 72
        assert pill.time_label == "09:30 - 11:00"

    def test_non_positive_duration_uses_default(self, view_model, make_appointment):
        pill = view_model.pill_for(make_appointment("a1", "09:30", "09:30"))

        assert pill.duration_minutes == 30
        assert pill.height_px == 24

    def test_status_class(self, view_model, make_appointment):
        pill = view_model.pill_for(make_appointment("a1", "09:30", "10:00", status="cancelled"))

        assert pill.status_class == "appt-status-cancelled"

    def test_labels(self, make_appointment):
        both = make_appointment("a1", "09:30", "10:00", client_name="Eva", service_names=["Cut", "Wash"])
        client_only = make_appointment("a2", "09:30", "10:00", client_name="Eva")
        services_only = make_appointment("a3", "09:30", "10:00", service_names=["Cut"])
        neither = make_appointment("a4", "09:30", "10:00")

        assert pill_label(both) == "Eva - Cut, Wash"
        assert pill_label(client_only) == "Eva"
        assert pill_label(services_only) == "Cut"
        assert pill_label(neither) == "Appointment"

    def test_pills_for_cell(self, view_model, roster, make_appointment):
        grid = view_model.build(roster, [make_appointment("a1", "09:30", "10:00")])

        pills = view_model.pills_for(grid, "emp-1", 570)

        assert [p.appointment_id for p in pills] == ["a1"]
        assert view_model.pills_for(grid, "emp-2", 570) == ()


class TestLocations:
    """Test grouping the roster into location cards."""

    def test_groups_in_roster_order_with_counts(self):
        staff = [
            Resource(id="emp-1", location_id="loc-b", location_name="Buda"),
            Resource(id="emp-2", location_id="loc-a", location_name="Pest"),
            Resource(id="emp-3", location_id="loc-b", location_name="Buda"),
        ]

        groups = group_by_location(staff)

        assert [g.name for g in groups] == ["Buda", "Pest"]
        assert groups[0].resource_ids == ("emp-1", "emp-3")
        assert [g.employee_count for g in groups] == [2, 1]

    def test_unlocated_staff_form_trailing_group(self):
        staff = [
            Resource(id="emp-1"),
            Resource(id="emp-2", location_id="loc-a"),
        ]

        groups = group_by_location(staff)

        assert [g.location_id for g in groups] == ["loc-a", None]
        assert groups[0].name == "loc-a"
        assert groups[1].name == "No location"
        assert groups[1].employee_count == 1

    def test_grid_carries_locations(self, view_model, roster):
        grid = view_model.build(roster, [])

        assert len(grid.locations) == 1
        assert grid.locations[0].location_id is None
        assert grid.locations[0].resource_ids == ("emp-1", "emp-2")

    def test_empty_roster_has_no_locations(self, view_model):
        assert view_model.build([], []).locations == ()


class TestOpenCell:
    """Test opening a session from the view model."""

    def test_uses_salon_settings(self, selected_day, service_catalog):
        salon = ScheduleConfig(default_duration_minutes=60, placeholder_title="Booking")
        view_model = DayScheduleViewModel(selected_day, schedule_config=salon)

        session = view_model.open_cell("emp-2", 600, service_catalog)

        assert session.day == "2025-01-15"
        assert session.resource_id == "emp-2"
        assert session.end_time == "11:00"
        assert session.save()["title"] == "Booking"
