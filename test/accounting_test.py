from datetime import date, datetime, time, timedelta

import pytest

from engine import account_day, account_for_date, account_period, hours_to_be_worked, predict_daily_punches, worked_time_from_punches
from models.schema import Config, Punch, PunchType, ScheduleDay

CONFIG = Config()
FRIDAY = date(2024, 2, 9)
NEXT_DAY = date(2024, 2, 10)
SCHEDULE = CONFIG.get_schedule_for_weekday(5)


def punches(*times):
    return [Punch(time=value) for value in times]


def test_hours_to_be_worked_skips_breaks():
    assert hours_to_be_worked(FRIDAY, CONFIG) == timedelta(hours=8)
    assert hours_to_be_worked("2024-02-10", CONFIG) == timedelta(0)


def test_worked_time_sums_pairs():
    worked = worked_time_from_punches(FRIDAY, punches("07:45", "12:00", "13:10", "16:55"))

    assert worked == timedelta(hours=8)


def test_open_shift_is_not_counted_without_now():
    assert worked_time_from_punches(FRIDAY, punches("07:45", "12:00", "13:10")) == timedelta(hours=4, minutes=15)


def test_now_closes_the_open_shift():
    day_punches = punches("08:00")
    now = datetime.combine(FRIDAY, time(10, 30))

    assert worked_time_from_punches(FRIDAY, day_punches, now) == timedelta(hours=2, minutes=30)
    assert day_punches == punches("08:00")


def test_now_on_another_day_is_ignored():
    now = datetime.combine(NEXT_DAY, time(10, 30))

    assert worked_time_from_punches(FRIDAY, punches("08:00"), now) == timedelta(0)


def test_status_markers_are_not_worked_time():
    day_punches = [Punch(type=PunchType.HOLIDAY, time="00:00")]
    now = datetime.combine(FRIDAY, time(10, 30))

    assert worked_time_from_punches(FRIDAY, day_punches, now) == timedelta(0)


def test_overtime():
    result = account_day(FRIDAY, punches("07:00", "12:00", "13:00", "17:00"), SCHEDULE, today=NEXT_DAY)

    assert result.hours_worked == timedelta(hours=9)
    assert result.overtime_worked == timedelta(hours=1)
    assert result.has_overtime
    assert not result.has_unworked_time
    assert not result.has_inconsistency


def test_exact_day_has_no_overtime():
    result = account_day(FRIDAY, punches("07:45", "12:00", "13:10", "16:55"), SCHEDULE, today=NEXT_DAY)

    assert result.overtime_worked == timedelta(0)
    assert not result.has_overtime
    assert not result.has_inconsistency


def test_unworked_time_is_an_inconsistency_for_past_days():
    day_punches = punches("08:00", "12:00", "13:00", "16:00")

    past = account_day(FRIDAY, day_punches, SCHEDULE, today=NEXT_DAY)
    assert past.overtime_worked == timedelta(hours=-1)
    assert past.has_unworked_time
    assert past.has_inconsistency

    current = account_day(FRIDAY, day_punches, SCHEDULE, today=FRIDAY)
    assert current.has_unworked_time
    assert not current.has_inconsistency


def test_odd_punch_count():
    day_punches = punches("08:00", "12:00", "13:00")

    assert account_day(FRIDAY, day_punches, SCHEDULE, today=NEXT_DAY).has_inconsistency
    assert not account_day(FRIDAY, day_punches, SCHEDULE, today=FRIDAY).has_inconsistency


def test_mixed_types_with_wrong_count():
    day_punches = [Punch(type=PunchType.ABSENCE, time="00:00"), Punch(time="13:10")]

    assert account_day(FRIDAY, day_punches, SCHEDULE, today=NEXT_DAY).has_inconsistency


def test_mixed_types_matching_the_schedule_are_consistent():
    schedule = ScheduleDay(punches=["08:00", "12:00"], durations=[timedelta(hours=4)])
    day_punches = [Punch(type=PunchType.HOLIDAY, time="00:00"), Punch(time="08:00")]

    result = account_day(FRIDAY, day_punches, schedule, today=NEXT_DAY)

    assert not result.has_unworked_time
    assert not result.has_inconsistency


def test_mixed_types_with_wrong_count_and_full_hours():
    day_punches = [Punch(type=PunchType.ABSENCE, time="00:00")] + punches("07:00", "12:00", "13:00", "17:00")

    result = account_day(FRIDAY, day_punches, SCHEDULE, today=NEXT_DAY)

    assert result.hours_worked == timedelta(hours=9)
    assert not result.has_unworked_time
    assert result.has_inconsistency


def test_mixed_types_with_the_scheduled_count_and_full_hours():
    day_punches = [Punch(type=PunchType.ABSENCE, time="00:00")] + punches("07:00", "15:00", "16:00")

    result = account_day(FRIDAY, day_punches, SCHEDULE, today=NEXT_DAY)

    assert result.hours_worked == timedelta(hours=8)
    assert not result.has_inconsistency


def test_status_day_is_consistent():
    day_punches = [Punch(type=PunchType.HOLIDAY, time="00:00")]
    result = account_day(FRIDAY, day_punches, SCHEDULE, today=NEXT_DAY)

    assert result.hours_worked == timedelta(0)
    assert not result.has_unworked_time
    assert not result.has_inconsistency


def test_future_days_are_never_inconsistent():
    result = account_day(NEXT_DAY, punches("08:00"), SCHEDULE, today=FRIDAY)

    assert not result.has_inconsistency


def test_live_accounting_for_today():
    now = datetime.combine(FRIDAY, time(17, 55))
    punches_map = {"2024-02-09": punches("07:45", "12:00", "13:10")}

    result = account_for_date(FRIDAY, punches_map, CONFIG, today=FRIDAY, now=now)

    assert result.hours_worked == timedelta(hours=9)
    assert result.has_overtime
    assert result.model_dump(mode="json")["overtime_worked"] == "PT1H0M"


def test_single_punch_example():
    punches_map = {"2024-02-09": punches("07:45")}

    recorded = account_for_date(FRIDAY, punches_map, CONFIG, today=NEXT_DAY)
    assert recorded.model_dump(mode="json")["hours_worked"] == "PT0H0M"
    assert recorded.has_inconsistency

    predicted = predict_daily_punches(FRIDAY, punches_map, CONFIG)
    assert worked_time_from_punches(FRIDAY, predicted) == timedelta(hours=8)


def test_serialized_durations():
    result = account_day(FRIDAY, punches("08:00", "12:00", "13:00", "15:30"), SCHEDULE, today=NEXT_DAY)
    dumped = result.model_dump(mode="json")

    assert dumped["hours_to_be_worked"] == "PT8H0M"
    assert dumped["hours_worked"] == "PT6H30M"
    assert dumped["overtime_worked"] == "-PT1H30M"
    assert dumped["configured_work_shift"]["durations"] == ["PT4H15M", "PT1H10M", "PT3H45M"]


def test_account_period():
    punches_map = {"2024-02-08": punches("08:00", "12:00")}
    result = account_period(["2024-02-08", "2024-02-10"], punches_map, CONFIG, today=FRIDAY)

    assert result["2024-02-08"].hours_worked == timedelta(hours=4)
    assert result["2024-02-08"].has_inconsistency
    assert result["2024-02-10"].hours_to_be_worked == timedelta(0)


def test_invalid_date_is_rejected():
    with pytest.raises(ValueError):
        account_for_date("09/02/2024", {}, CONFIG, today=FRIDAY)


def test_aliased_dump_uses_camel_case():
    result = account_day(FRIDAY, punches("07:45", "12:00", "13:10", "16:55"), SCHEDULE, today=NEXT_DAY)
    dumped = result.model_dump(mode="json", by_alias=True)

    assert dumped["hoursWorked"] == "PT8H0M"
    assert dumped["hasInconsistency"] is False
    assert dumped["configuredWorkShift"]["punches"] == ["07:45", "12:00", "13:10", "16:55"]
