"""
Direct edits of a task's scheduling fields.

Person days and the scheduled date pair are never edited independently:
each helper changes one of them and re-derives the other against the
schedule's calendar.
"""
from dataclasses import replace

from core_logic import calendar_kwargs, end_date_for, person_days_between
from models import Milestone


def with_person_days(task, person_days, schedule):
    if isinstance(task, Milestone):
        return task
    if person_days < 0:
        raise ValueError(f"person_days cannot be negative, got {person_days}")

    if person_days == 0:
        end_date = task.scheduled_start_date
    else:
        end_date = end_date_for(task.scheduled_start_date, person_days, **calendar_kwargs(schedule))
    return replace(task, scheduled_end_date=end_date, person_days=person_days)


def with_scheduled_end(task, end_date, schedule):
    if isinstance(task, Milestone):
        return task
    if end_date < task.scheduled_start_date:
        end_date = task.scheduled_start_date
    person_days = person_days_between(task.scheduled_start_date, end_date, **calendar_kwargs(schedule))
    return replace(task, scheduled_end_date=end_date, person_days=person_days)


def with_scheduled_start(task, start_date, schedule):
    if isinstance(task, Milestone):
        return replace(task, scheduled_date=start_date)

    if task.person_days >= 1:
        end_date = end_date_for(start_date, task.person_days, **calendar_kwargs(schedule))
    else:
        end_date = max(start_date, task.scheduled_end_date)
    return replace(task, scheduled_start_date=start_date, scheduled_end_date=end_date)
