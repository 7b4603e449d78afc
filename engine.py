import logging
from datetime import date, datetime, timedelta
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from models.schema import Config, DayAccounting, Punch, PunchType, ScheduleDay
from utils.date import WEEKEND, DateLike, combine, format_time, iso_day, parse_time, to_date, weekday_of

PunchesMap = Mapping[str, Sequence[Punch]]

ZERO = timedelta(0)
COMPLETE_DAY_PUNCHES = 4


def _work_and_lunch(schedule: ScheduleDay):
    durations = schedule.durations
    if not durations:
        return ZERO, ZERO
    if len(durations) == 1:
        return durations[0], ZERO
    return durations[0] + durations[-1], durations[1]


def _predicted(value: datetime) -> Punch:
    return Punch(type=PunchType.PUNCH, time=format_time(value), predicted=True)


def predict_daily_punches(day: DateLike, punches: PunchesMap, config: Config) -> List[Punch]:
    """Complete punch sequence for ``day``: recorded punches plus predictions for the gaps.

    Predicted punches keep the day's worked time equal to the schedule's work
    duration (first period plus last period), whatever the morning's real length.
    """
    day = to_date(day)
    recorded = list(punches.get(day.isoformat(), []))
    weekday = weekday_of(day)
    schedule = config.get_schedule_for_weekday(weekday)

    if not recorded and not schedule.punches:
        status = PunchType.WEEKEND if weekday in WEEKEND else PunchType.NON_WORKING_DAY
        return [Punch(type=status, time="00:00", predicted=True)]

    if len(recorded) >= COMPLETE_DAY_PUNCHES or any(punch.type != PunchType.PUNCH for punch in recorded):
        return recorded

    if not schedule.punches:
        return recorded

    work, lunch = _work_and_lunch(schedule)
    result: List[Punch] = []

    for index, expected in enumerate(schedule.punches):
        if index < len(recorded):
            result.append(recorded[index])
            continue

        if index == 2 and len(recorded) > 1:
            result.append(_predicted(parse_time(recorded[1].time) + lunch))
            continue

        if index == 3 and len(recorded) > 2:
            enter, lunch_out, lunch_in = (parse_time(punch.time) for punch in recorded[:3])
            result.append(_predicted(lunch_in + (work - (lunch_out - enter))))
            continue

        if index == 3 and recorded:
            result.append(_predicted(parse_time(recorded[0].time) + work + lunch))
            continue

        result.append(Punch(type=PunchType.PUNCH, time=expected, predicted=True))

    # recorded punches past the schedule's last slot are kept as they are
    result.extend(recorded[len(schedule.punches):])

    logging.debug(f"Predicted {len(result) - len(recorded)} punches for {day.isoformat()}")
    return result


def get_daily_punches(punches: PunchesMap, config: Config, today: date) -> Callable[[DateLike], List[Punch]]:
    """Punch lookup for list and calendar views: predictions only for ``today``."""

    def daily(day: DateLike) -> List[Punch]:
        day = to_date(day)
        if day != today:
            return list(punches.get(day.isoformat(), []))
        return predict_daily_punches(day, punches, config)

    return daily


def hours_to_be_worked(day: DateLike, config: Config) -> timedelta:
    schedule = config.get_schedule_for_weekday(weekday_of(day))
    return sum(schedule.durations[::2], ZERO)


def worked_time_from_punches(day: DateLike, punches: Sequence[Punch], now: Optional[datetime] = None) -> timedelta:
    """Sum of every complete in/out pair among the day's ``punch`` entries.

    With ``now`` on the same day and a shift still open, ``now`` closes it for
    this computation only.
    """
    day = to_date(day)
    stamps = [combine(day, punch.time) for punch in punches if punch.type == PunchType.PUNCH]
    starts = stamps[0::2]
    ends = stamps[1::2]

    if now is not None and len(starts) != len(ends) and now.date() == day:
        ends.append(now.replace(tzinfo=None))

    return sum((end - start for start, end in zip(starts, ends)), ZERO)


def _has_inconsistency(punches: Sequence[Punch], schedule: ScheduleDay, has_unworked_time: bool) -> bool:
    if punches:
        kinds = {punch.type == PunchType.PUNCH for punch in punches}
        if kinds == {True, False} and len(punches) != len(schedule.punches):
            return True
        if kinds == {True} and len(punches) % 2 != 0:
            return True
    return has_unworked_time


def account_day(
    day: DateLike,
    punches: Sequence[Punch],
    schedule: ScheduleDay,
    *,
    today: date,
    now: Optional[datetime] = None,
) -> DayAccounting:
    day = to_date(day)
    to_be_worked = sum(schedule.durations[::2], ZERO)
    worked = worked_time_from_punches(day, punches, now)
    overtime = worked - to_be_worked
    has_unworked_time = ZERO < worked < to_be_worked and overtime < ZERO

    # only days already over can be flagged
    has_inconsistency = day < today and _has_inconsistency(punches, schedule, has_unworked_time)
    if has_inconsistency:
        logging.info(f"Inconsistent punches on {day.isoformat()}")

    return DayAccounting(
        configured_work_shift=schedule,
        hours_to_be_worked=to_be_worked,
        hours_worked=worked,
        overtime_worked=overtime,
        has_overtime=overtime > ZERO,
        has_unworked_time=has_unworked_time,
        has_inconsistency=has_inconsistency,
    )


def account_for_date(
    day: DateLike,
    punches: PunchesMap,
    config: Config,
    *,
    today: date,
    now: Optional[datetime] = None,
) -> DayAccounting:
    day = to_date(day)
    schedule = config.get_schedule_for_weekday(weekday_of(day))
    return account_day(day, list(punches.get(iso_day(day), [])), schedule, today=today, now=now)


def account_period(days: Sequence[DateLike], punches: PunchesMap, config: Config, *, today: date, now: Optional[datetime] = None) -> Dict[str, DayAccounting]:
    return {iso_day(day): account_for_date(day, punches, config, today=today, now=now) for day in days}
