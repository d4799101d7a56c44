from datetime import datetime, timedelta

# --- Core Calculation Logic ---

def as_day(value):
    if isinstance(value, datetime):
        return value.date()
    return value


def _holiday_days(holidays):
    return {as_day(h) for h in holidays}


def is_working_day(day, holidays=(), skip_weekends=True):
    """A day counts as work unless it is a holiday or (optionally) a weekend."""
    day = as_day(day)
    if day in _holiday_days(holidays):
        return False
    if skip_weekends and day.weekday() >= 5:
        return False
    return True


def end_date_for(start_date, person_days, holidays=(), skip_weekends=True):
    """
    Returns the date of the last working day needed to spend `person_days`
    starting on `start_date`. The start date itself is only counted if it
    is a working day.
    """
    if person_days < 1:
        raise ValueError(f"person_days must be at least 1, got {person_days}")

    skipped = _holiday_days(holidays)
    current = as_day(start_date) - timedelta(days=1)
    remaining = person_days
    while remaining > 0:
        current += timedelta(days=1)
        if current in skipped:
            continue
        if skip_weekends and current.weekday() >= 5:
            continue
        remaining -= 1
    return current


def person_days_between(start_date, end_date, holidays=(), skip_weekends=True):
    """Counts the working days between two dates, inclusive."""
    start_date = as_day(start_date)
    end_date = as_day(end_date)
    if start_date > end_date:
        return 0

    skipped = _holiday_days(holidays)
    work_days = 0
    current_date = start_date
    while current_date <= end_date:
        if current_date not in skipped and not (skip_weekends and current_date.weekday() >= 5):
            work_days += 1
        current_date += timedelta(days=1)
    return work_days


def non_working_days(start_date, end_date, holidays=(), skip_weekends=True):
    """Lists every non-working day between two dates, inclusive."""
    days = []
    current_date = as_day(start_date)
    end_date = as_day(end_date)
    skipped = _holiday_days(holidays)
    while current_date <= end_date:
        if current_date in skipped or (skip_weekends and current_date.weekday() >= 5):
            days.append(current_date)
        current_date += timedelta(days=1)
    return days


def calendar_kwargs(schedule):
    """The (holidays, skip_weekends) context of a schedule, for keyword unpacking."""
    return {"holidays": schedule.holidays, "skip_weekends": schedule.skip_weekends}
