"""Default settings for the salon scheduling grid.

All business defaults centralized here - a salon can override them through
ScheduleConfig without touching code.
"""

BUSINESS_HOURS = {
    "start_time": "08:00",
    "end_time": "20:00",
}

SLOT_SIZE_MINUTES = 30

# Used when no service (or no numeric duration) is selected
DEFAULT_DURATION_MINUTES = 30

# Booking step for snapping typed times (15 min)
SNAP_STEP_MINUTES = 15

# Shortest interval accepted by validate_interval
MIN_INTERVAL_MINUTES = 5

# Pixel height of one slot-sized appointment pill
PILL_HEIGHT_PX = 24

# Literal fallbacks
PLACEHOLDER_TITLE = "Appointment"
RESOURCE_FALLBACK_LABEL = "Staff member"
PILL_FALLBACK_LABEL = "Appointment"
UNLOCATED_LABEL = "No location"

# Wall-clock formats shared with the persistence layer
DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"
WALL_CLOCK_FORMAT = f"{DATE_FORMAT} {TIME_FORMAT}"
