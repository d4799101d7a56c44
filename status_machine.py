"""
Task lifecycle transitions.

`transition(task, target)` returns the task re-shaped into the target
status variant, deriving the fields the new variant needs from the old
one. Undefined and identity transitions return the task unchanged.
"""
import logging

from models import ActiveTask, DoneTask, Milestone, NewTask, TaskStatus

logger = logging.getLogger(__name__)


def _common(task):
    return {
        "task_id": task.task_id,
        "section_id": task.section_id,
        "task_name": task.task_name,
        "assignee": task.assignee,
    }


def _scheduling(task):
    return {
        "scheduled_start_date": task.scheduled_start_date,
        "scheduled_end_date": task.scheduled_end_date,
        "person_days": task.person_days,
    }


def _single_day(milestone):
    # A milestone becoming a dated task gets a one-day placeholder schedule.
    return {
        "scheduled_start_date": milestone.scheduled_date,
        "scheduled_end_date": milestone.scheduled_date,
        "person_days": 1,
    }


def _to_new(task):
    if isinstance(task, (ActiveTask, DoneTask)):
        return NewTask(**_common(task), **_scheduling(task))
    if isinstance(task, Milestone):
        return NewTask(**_common(task), **_single_day(task))
    return task


def _to_active(task):
    if isinstance(task, (NewTask, DoneTask)):
        progress = 0 if isinstance(task, NewTask) else task.progress
        return ActiveTask(
            **_common(task), **_scheduling(task),
            actual_start_date=task.scheduled_start_date,
            progress=progress,
        )
    if isinstance(task, Milestone):
        return ActiveTask(
            **_common(task), **_single_day(task),
            actual_start_date=task.actual_date or task.scheduled_date,
            progress=0,
        )
    return task


def _to_done(task):
    if isinstance(task, NewTask):
        return DoneTask(
            **_common(task), **_scheduling(task),
            actual_start_date=task.scheduled_start_date,
            actual_end_date=task.scheduled_end_date,
        )
    if isinstance(task, ActiveTask):
        return DoneTask(
            **_common(task), **_scheduling(task),
            actual_start_date=task.actual_start_date,
            actual_end_date=task.scheduled_end_date,
        )
    if isinstance(task, Milestone):
        return DoneTask(
            **_common(task), **_single_day(task),
            actual_start_date=task.actual_date or task.scheduled_date,
            actual_end_date=task.actual_date or task.scheduled_date,
        )
    return task


def _to_milestone(task):
    if isinstance(task, Milestone):
        return task
    actual_date = task.actual_end_date if isinstance(task, DoneTask) else None
    return Milestone(**_common(task), scheduled_date=task.scheduled_start_date, actual_date=actual_date)


_TRANSITIONS = {
    TaskStatus.NEW: _to_new,
    TaskStatus.ACTIVE: _to_active,
    TaskStatus.DONE: _to_done,
    TaskStatus.MILESTONE: _to_milestone,
}


def transition(task, target_status):
    try:
        target = TaskStatus(target_status)
    except ValueError:
        logger.debug("Ignoring unknown status %r for task %s", target_status, task.task_id)
        return task

    result = _TRANSITIONS[target](task)
    if result is not task:
        logger.debug("Task %s: %s -> %s", task.task_id, task.status.value, target.value)
    return result
