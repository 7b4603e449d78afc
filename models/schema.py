from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator
from pydantic.alias_generators import to_camel

from utils.date import WEEKDAYS, format_duration, parse_time


class PunchType(str, Enum):
    PUNCH = "punch"
    WEEKEND = "weekend"
    HOLIDAY = "holiday"
    DAY_OFF = "dayOff"
    ABSENCE = "absence"
    VACATION = "vacation"
    NON_WORKING_DAY = "nonWorkingDay"


class DatabaseOperation(str, Enum):
    INSERTED = "Inserted"
    UPDATED = "Updated"
    DUPLICATE = "Duplicate"
    DELETED = "Deleted"


class Punch(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: PunchType = PunchType.PUNCH
    time: str
    predicted: bool = False

    @field_validator("time")
    @classmethod
    def _check_time(cls, value: str) -> str:
        parse_time(value)
        return value


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ScheduleDay(_CamelModel):
    """Expected shape of a workday: clock times plus the durations between them.

    ``durations[0]`` and ``durations[-1]`` are work periods, the ones in between
    are breaks.
    """

    punches: List[str] = Field(default_factory=list)
    durations: List[timedelta] = Field(default_factory=list)

    @field_validator("punches")
    @classmethod
    def _check_punches(cls, value: List[str]) -> List[str]:
        for item in value:
            parse_time(item)
        return value

    @model_validator(mode="after")
    def _check_shape(self) -> "ScheduleDay":
        expected = max(len(self.punches) - 1, 0)
        if len(self.durations) != expected:
            raise ValueError(
                f"schedule with {len(self.punches)} punches needs {expected} durations, got {len(self.durations)}"
            )
        return self

    @field_serializer("durations")
    def _dump_durations(self, value: List[timedelta]) -> List[str]:
        return [format_duration(item) for item in value]


class DurationLimits(_CamelModel):
    lunch: timedelta = timedelta(hours=1, minutes=10)
    max_lunch: timedelta = timedelta(hours=2)
    max_shift: timedelta = timedelta(hours=6)
    max_work: timedelta = timedelta(hours=10)

    @field_serializer("lunch", "max_lunch", "max_shift", "max_work")
    def _dump(self, value: timedelta) -> str:
        return format_duration(value)


class NotificationSettings(_CamelModel):
    enabled: bool = True
    end_of_day_notice: timedelta = timedelta(minutes=10)

    @field_serializer("end_of_day_notice")
    def _dump(self, value: timedelta) -> str:
        return format_duration(value)


class AdpSettings(_CamelModel):
    enabled: bool = False
    username: Optional[str] = None


def _default_hours_to_work() -> Dict[int, ScheduleDay]:
    workday = {
        "punches": ["07:45", "12:00", "13:10", "16:55"],
        "durations": ["PT4H15M", "PT1H10M", "PT3H45M"],
    }
    schedule = {weekday: ScheduleDay.model_validate(workday) for weekday in range(1, 6)}
    schedule[6] = ScheduleDay()
    schedule[7] = ScheduleDay()
    return schedule


class Config(_CamelModel):
    first_day_of_month: int = Field(default=16, ge=1, le=31)
    hours_to_work: Dict[int, ScheduleDay] = Field(default_factory=_default_hours_to_work)
    duration: DurationLimits = Field(default_factory=DurationLimits)
    notification: NotificationSettings = Field(default_factory=NotificationSettings)
    adp: AdpSettings = Field(default_factory=AdpSettings)

    @field_validator("hours_to_work")
    @classmethod
    def _check_weekdays(cls, value: Dict[int, ScheduleDay]) -> Dict[int, ScheduleDay]:
        if set(value) != set(WEEKDAYS):
            raise ValueError(f"hoursToWork must define weekdays 1..7, got {sorted(value)}")
        return dict(sorted(value.items()))

    def get_schedule_for_weekday(self, weekday: int) -> ScheduleDay:
        if weekday not in WEEKDAYS:
            raise ValueError(f"weekday must be 1..7, got {weekday}")
        return self.hours_to_work[weekday]


class DayAccounting(_CamelModel):
    configured_work_shift: ScheduleDay
    hours_to_be_worked: timedelta
    hours_worked: timedelta
    overtime_worked: timedelta
    has_overtime: bool
    has_unworked_time: bool
    has_inconsistency: bool

    @field_serializer("hours_to_be_worked", "hours_worked", "overtime_worked")
    def _dump(self, value: timedelta) -> str:
        return format_duration(value)


class Reminder(BaseModel):
    at: datetime
    slot: int
    title: str
    body: str


class WeeklyReminder(BaseModel):
    weekday: int
    hour: int
    minute: int
    title: str
    body: str
