"""
Per-salon schedule configuration schema.

Supports:
- Custom business window (opening/closing wall-clock time)
- Slot size for grid rows
- Default appointment duration and booking step
- Display tweaks (pill height, placeholder literals)
"""
import re
from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from salon_schedule import config

HHMM_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$|^24:00$")


def hhmm_to_minutes(value: str) -> int:
    """Convert a validated "HH:MM" string to minutes since midnight."""
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


class ScheduleConfig(BaseModel):
    """Schedule configuration for one salon."""
    salon_id: str = Field(default="default", min_length=1, max_length=100, description="Salon identifier")
    salon_name: str = Field(default="", max_length=200, description="Display name")
    day_start: str = Field(default=config.BUSINESS_HOURS["start_time"], description="Opening time (HH:MM)")
    day_end: str = Field(default=config.BUSINESS_HOURS["end_time"], description="Closing time (HH:MM, exclusive)")
    slot_size_minutes: int = Field(default=config.SLOT_SIZE_MINUTES, gt=0, le=1440, description="Grid row size")
    default_duration_minutes: int = Field(default=config.DEFAULT_DURATION_MINUTES, gt=0, le=1440)
    snap_step_minutes: int = Field(default=config.SNAP_STEP_MINUTES, gt=0, le=1440)
    min_interval_minutes: int = Field(default=config.MIN_INTERVAL_MINUTES, ge=0)
    pill_height_px: int = Field(default=config.PILL_HEIGHT_PX, gt=0)
    placeholder_title: str = Field(default=config.PLACEHOLDER_TITLE, min_length=1)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "salon_id": "salon-downtown",
                "salon_name": "Downtown Salon",
                "day_start": "09:00",
                "day_end": "18:00",
                "slot_size_minutes": 15,
            }
        }
    )

    @field_validator("day_start", "day_end")
    @classmethod
    def validate_hhmm(cls, v: str) -> str:
        """Accept only zero-padded 24h wall-clock values."""
        if not HHMM_PATTERN.match(v):
            raise ValueError(f"Invalid time '{v}', expected HH:MM")
        return v

    @model_validator(mode="after")
    def check_window(self) -> "ScheduleConfig":
        if hhmm_to_minutes(self.day_start) >= hhmm_to_minutes(self.day_end):
            raise ValueError("day_start must be before day_end")
        return self

    @property
    def window(self) -> Tuple[int, int]:
        """Business window as (start_minute, end_minute_exclusive)."""
        return hhmm_to_minutes(self.day_start), hhmm_to_minutes(self.day_end)
