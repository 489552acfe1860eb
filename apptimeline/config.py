"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import Dict, List

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.exceptions import WorkingHoursError
from .domain.models import (
    CLOCK_FORMATS,
    WEEKDAY_NAMES,
    AppointmentStatus,
    BreakPeriod,
    DaySchedule,
    LayoutOptions,
    WorkingHours,
)
from .domain.parsing import parse_clock_time


def _validate_clock_time(value: str) -> str:
    try:
        parse_clock_time(value)
    except WorkingHoursError as exc:
        raise ValueError(str(exc)) from exc
    return value


class BreakConfig(BaseModel):
    """A break inside a working day."""
    start: str
    end: str
    label: str = "Break"

    @field_validator("start", "end")
    @classmethod
    def validate_time(cls, value: str) -> str:
        """Validate HH:MM format."""
        return _validate_clock_time(value)

    def to_domain(self) -> BreakPeriod:
        return BreakPeriod(
            start=parse_clock_time(self.start),
            end=parse_clock_time(self.end),
            label=self.label,
        )


class DayScheduleConfig(BaseModel):
    """Working hours of one weekday."""
    enabled: bool = True
    start: str = "09:00"
    end: str = "17:00"
    breaks: List[BreakConfig] = Field(default_factory=list)

    @field_validator("start", "end")
    @classmethod
    def validate_time(cls, value: str) -> str:
        """Validate HH:MM format."""
        return _validate_clock_time(value)

    def to_domain(self) -> DaySchedule:
        return DaySchedule(
            enabled=self.enabled,
            start=parse_clock_time(self.start),
            end=parse_clock_time(self.end),
            breaks=tuple(item.to_domain() for item in self.breaks),
        )


class LayoutConfig(BaseModel):
    """Geometry and range settings of the timeline."""
    row_height_px: float = 80.0
    minimum_block_height_px: float = 40.0
    floor_hour: int = 0
    ceiling_hour: int = 23
    padding_hours: int = 1
    default_start_hour: int = 9
    default_end_hour: int = 20
    tick_seconds: int = 60
    clock_format: str = "12h"

    @field_validator("row_height_px")
    @classmethod
    def validate_row_height(cls, value: float) -> float:
        """Ensure one hour has a positive height."""
        if value <= 0:
            raise ValueError("row_height_px must be greater than zero")
        return value

    @field_validator("minimum_block_height_px")
    @classmethod
    def validate_minimum_height(cls, value: float) -> float:
        if value < 0:
            raise ValueError("minimum_block_height_px must not be negative")
        return value

    @field_validator("floor_hour", "ceiling_hour", "default_start_hour", "default_end_hour")
    @classmethod
    def validate_hour(cls, v: int) -> int:
        """Validate hour is between 0 and 23."""
        if not 0 <= v <= 23:
            raise ValueError(f"Hour must be between 0 and 23, got {v}")
        return v

    @field_validator("padding_hours")
    @classmethod
    def validate_padding(cls, value: int) -> int:
        if value < 0:
            raise ValueError("padding_hours must not be negative")
        return value

    @field_validator("tick_seconds")
    @classmethod
    def validate_tick(cls, value: int) -> int:
        """Keep the marker refresh between 30 and 60 seconds."""
        if not 30 <= value <= 60:
            raise ValueError(f"tick_seconds must be between 30 and 60, got {value}")
        return value

    @field_validator("clock_format")
    @classmethod
    def validate_clock_format(cls, value: str) -> str:
        if value not in CLOCK_FORMATS:
            raise ValueError(f"clock_format must be one of {', '.join(CLOCK_FORMATS)}")
        return value

    @model_validator(mode="after")
    def validate_hours_order(self) -> "LayoutConfig":
        """Ensure floor/ceiling and the default window are not inverted."""
        if self.ceiling_hour < self.floor_hour:
            raise ValueError("ceiling_hour must not be earlier than floor_hour")
        if self.default_end_hour < self.default_start_hour:
            raise ValueError("default_end_hour must not be earlier than default_start_hour")
        return self

    def to_options(self, timezone: str) -> LayoutOptions:
        return LayoutOptions(
            row_height_px=self.row_height_px,
            minimum_block_height_px=self.minimum_block_height_px,
            floor_hour=self.floor_hour,
            ceiling_hour=self.ceiling_hour,
            padding_hours=self.padding_hours,
            default_start_hour=self.default_start_hour,
            default_end_hour=self.default_end_hour,
            timezone=timezone,
            clock_format=self.clock_format,
        )


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "Europe/Berlin"
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    visible_statuses: List[AppointmentStatus] = Field(
        default_factory=lambda: [AppointmentStatus.CONFIRMED, AppointmentStatus.PENDING]
    )
    working_hours: Dict[str, DayScheduleConfig] = Field(default_factory=dict)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA name."""
        try:
            pendulum.timezone(value)
        except (ValueError, KeyError) as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("visible_statuses")
    @classmethod
    def validate_visible_statuses(cls, value: List[AppointmentStatus]) -> List[AppointmentStatus]:
        """Deduplicate while preserving order."""
        seen: set[AppointmentStatus] = set()
        deduped: List[AppointmentStatus] = []
        for status in value:
            if status not in seen:
                deduped.append(status)
                seen.add(status)
        return deduped

    @field_validator("working_hours")
    @classmethod
    def validate_weekdays(cls, value: Dict[str, DayScheduleConfig]) -> Dict[str, DayScheduleConfig]:
        """Ensure keys are weekday names and normalise them to lowercase."""
        normalized: Dict[str, DayScheduleConfig] = {}
        for key, schedule in value.items():
            name = key.strip().lower()
            if name not in WEEKDAY_NAMES:
                raise ValueError(
                    f"Unknown weekday '{key}'. Use one of: {', '.join(WEEKDAY_NAMES)}"
                )
            normalized[name] = schedule
        return normalized

    def layout_options(self) -> LayoutOptions:
        return self.layout.to_options(self.timezone)

    def to_working_hours(self) -> WorkingHours | None:
        """Domain working hours, or None when no weekday is configured."""
        if not self.working_hours:
            return None
        return WorkingHours(
            days={name: schedule.to_domain() for name, schedule in self.working_hours.items()}
        )

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
