"""
The schedule store.

`reduce(schedule, action)` is a pure function producing the next schedule
revision. `ScheduleStore` owns the current revision, applies actions
through `dispatch` and notifies listeners after every committed action so
they can recompute the timeline.
"""
from dataclasses import dataclass, replace
from datetime import date
import logging

from models import Schedule, Section

logger = logging.getLogger(__name__)


# --- Actions ---

@dataclass(frozen=True)
class SetSchedule:
    schedule: Schedule


@dataclass(frozen=True)
class AddSection:
    section: Section


@dataclass(frozen=True)
class UpdateSection:
    section: Section


@dataclass(frozen=True)
class RemoveSection:
    section_id: str


@dataclass(frozen=True)
class AddTask:
    task: object


@dataclass(frozen=True)
class UpdateTask:
    task: object


@dataclass(frozen=True)
class RemoveTask:
    task_id: str


@dataclass(frozen=True)
class ReorderTask:
    task_id: str
    new_index: int


@dataclass(frozen=True)
class AddHoliday:
    day: date


@dataclass(frozen=True)
class RemoveHoliday:
    day: date


@dataclass(frozen=True)
class SetSkipWeekends:
    skip_weekends: bool


@dataclass(frozen=True)
class SetEditable:
    editable: bool


# --- Reducer helpers ---

def merge_with_overwrite(items, key):
    """
    Collapses entries sharing a key. Each key keeps the position of its
    first occurrence and the value of its last one.
    """
    merged = {}
    for item in items:
        merged[key(item)] = item
    return tuple(merged.values())


def _section_key(section):
    return section.section_id


def _task_key(task):
    return task.task_id


def _append_unique(items, new_item, key, kind):
    new_key = key(new_item)
    if any(key(item) == new_key for item in items):
        logger.warning("Ignoring %s with duplicate id '%s'", kind, new_key)
        return items
    return items + (new_item,)


def _replace_by_key(items, new_item, key):
    new_key = key(new_item)
    updated = [new_item if key(item) == new_key else item for item in items]
    return merge_with_overwrite(updated, key)


def _reorder(tasks, task_id, new_index):
    task_to_move = next((t for t in tasks if t.task_id == task_id), None)
    if task_to_move is None:
        return tasks

    remaining = [t for t in tasks if t.task_id != task_id]
    new_index = max(0, new_index)
    return tuple(remaining[:new_index] + [task_to_move] + remaining[new_index:])


def reduce(schedule, action):
    if isinstance(action, SetSchedule):
        return action.schedule

    if isinstance(action, AddSection):
        return replace(schedule, sections=_append_unique(schedule.sections, action.section, _section_key, "section"))

    if isinstance(action, UpdateSection):
        return replace(schedule, sections=_replace_by_key(schedule.sections, action.section, _section_key))

    if isinstance(action, RemoveSection):
        # Tasks that referenced the section are left in place.
        return replace(schedule, sections=tuple(s for s in schedule.sections if s.section_id != action.section_id))

    if isinstance(action, AddTask):
        return replace(schedule, tasks=_append_unique(schedule.tasks, action.task, _task_key, "task"))

    if isinstance(action, UpdateTask):
        return replace(schedule, tasks=_replace_by_key(schedule.tasks, action.task, _task_key))

    if isinstance(action, RemoveTask):
        return replace(schedule, tasks=tuple(t for t in schedule.tasks if t.task_id != action.task_id))

    if isinstance(action, ReorderTask):
        if schedule.find_task(action.task_id) is None:
            return schedule
        return replace(schedule, tasks=_reorder(schedule.tasks, action.task_id, action.new_index))

    if isinstance(action, AddHoliday):
        if any(_same_value(h, action.day) for h in schedule.holidays):
            return schedule
        return replace(schedule, holidays=schedule.holidays + (action.day,))

    if isinstance(action, RemoveHoliday):
        # Exact value match: a datetime never matches the plain date of the same day.
        return replace(schedule, holidays=tuple(h for h in schedule.holidays if not _same_value(h, action.day)))

    if isinstance(action, SetSkipWeekends):
        return replace(schedule, skip_weekends=bool(action.skip_weekends))

    raise TypeError(f"Unknown schedule action: {action!r}")


def _same_value(a, b):
    return type(a) is type(b) and a == b


# --- Store ---

class ScheduleStore:
    def __init__(self, schedule=None, editable=False):
        self.schedule = schedule if schedule is not None else Schedule()
        self.editable = editable
        self._listeners = []

    def subscribe(self, listener):
        """Registers `listener(store)`; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def dispatch(self, action):
        if isinstance(action, SetEditable):
            self.editable = bool(action.editable)
        else:
            self.schedule = reduce(self.schedule, action)
        logger.debug("Dispatched %s", type(action).__name__)

        for listener in list(self._listeners):
            listener(self)
        return self.schedule
