from datetime import date
from typing import List, Optional, Sequence

from models.schema import Config, Punch, PunchType, Reminder, WeeklyReminder
from utils.date import combine, parse_time

REMINDER_TEXTS = {
    0: (
        "Time to Start Work",
        "It's time to start your workday. Please clock in now to begin your shift.",
    ),
    1: ("Lunch Break", "It's time for your lunch break. Don't forget to clock out!"),
    2: ("Back from Lunch", "Welcome back! Don't forget to clock in to resume your work."),
    3: (
        "End of Workday Reminder",
        "Your workday will end soon. Please ensure all tasks are completed and remember to clock out on time.",
    ),
}


def _text(slot: int):
    return REMINDER_TEXTS.get(slot, REMINDER_TEXTS[3])


def first_punch_reminders(config: Config) -> List[WeeklyReminder]:
    reminders = []
    title, body = REMINDER_TEXTS[0]
    for weekday, schedule in config.hours_to_work.items():
        if not schedule.punches:
            continue
        first = parse_time(schedule.punches[0])
        reminders.append(WeeklyReminder(weekday=weekday, hour=first.hour, minute=first.minute, title=title, body=body))
    return reminders


def next_reminder(day: date, punches: Sequence[Punch], config: Config) -> Optional[Reminder]:
    """Reminder for the first predicted punch of a predicted day.

    The last punch of the day is announced ahead of time by the configured notice.
    """
    if not config.notification.enabled:
        return None

    slot = next(
        (index for index, punch in enumerate(punches) if punch.predicted and punch.type == PunchType.PUNCH),
        None,
    )
    if slot is None:
        return None

    at = combine(day, punches[slot].time)
    if slot == len(punches) - 1:
        at -= config.notification.end_of_day_notice

    title, body = _text(slot)
    return Reminder(at=at, slot=slot, title=title, body=body)
