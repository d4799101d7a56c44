from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional, Tuple, Union
import uuid

# --- Schedule Data Model ---

SCHEDULE_VERSION = "1.0"


class TaskStatus(str, Enum):
    NEW = "new"
    ACTIVE = "active"
    DONE = "done"
    MILESTONE = "milestone"


def generate_id():
    """Random short id for new sections and tasks."""
    return uuid.uuid4().hex[:13]


@dataclass(frozen=True)
class Section:
    section_id: str
    section_name: str = ""


@dataclass(frozen=True, kw_only=True)
class BaseTask:
    task_id: str
    section_id: str
    task_name: str = ""
    assignee: str = ""


@dataclass(frozen=True, kw_only=True)
class ScheduledTask(BaseTask):
    """Shared scheduling fields of every non-milestone task."""
    scheduled_start_date: date
    scheduled_end_date: date
    person_days: int = 0

    def __post_init__(self):
        if self.scheduled_end_date < self.scheduled_start_date:
            raise ValueError(
                f"Task '{self.task_id}' ends ({self.scheduled_end_date}) before it starts ({self.scheduled_start_date})."
            )
        if self.person_days < 0:
            raise ValueError(f"Task '{self.task_id}' has negative person days: {self.person_days}")


@dataclass(frozen=True, kw_only=True)
class NewTask(ScheduledTask):
    status = TaskStatus.NEW

    @property
    def progress(self):
        return 0


@dataclass(frozen=True, kw_only=True)
class ActiveTask(ScheduledTask):
    status = TaskStatus.ACTIVE
    actual_start_date: date
    progress: int = 0

    def __post_init__(self):
        super().__post_init__()
        if not 0 <= self.progress <= 100:
            raise ValueError(f"Task '{self.task_id}' progress must be within 0-100, got {self.progress}")


@dataclass(frozen=True, kw_only=True)
class DoneTask(ScheduledTask):
    status = TaskStatus.DONE
    actual_start_date: date
    actual_end_date: date

    @property
    def progress(self):
        return 100


@dataclass(frozen=True, kw_only=True)
class Milestone(BaseTask):
    status = TaskStatus.MILESTONE
    scheduled_date: date
    actual_date: Optional[date] = None


Task = Union[NewTask, ActiveTask, DoneTask, Milestone]


@dataclass(frozen=True)
class Schedule:
    sections: Tuple[Section, ...] = ()
    tasks: Tuple[Task, ...] = ()
    holidays: Tuple[date, ...] = ()
    skip_weekends: bool = True
    version: str = field(default=SCHEDULE_VERSION)

    def find_task(self, task_id):
        return next((t for t in self.tasks if t.task_id == task_id), None)

    def find_section(self, section_id):
        return next((s for s in self.sections if s.section_id == section_id), None)


def task_dates(task):
    """All dates a task places on the timeline."""
    if isinstance(task, Milestone):
        dates = [task.scheduled_date]
        if task.actual_date is not None:
            dates.append(task.actual_date)
        return dates

    dates = [task.scheduled_start_date, task.scheduled_end_date]
    if isinstance(task, (ActiveTask, DoneTask)):
        dates.append(task.actual_start_date)
    if isinstance(task, DoneTask):
        dates.append(task.actual_end_date)
    return dates


# --- Factories ---

def new_section(section_name=""):
    return Section(section_id=generate_id(), section_name=section_name)


def new_task(section_id, today, task_name="New Task"):
    return NewTask(
        task_id=generate_id(),
        section_id=section_id,
        task_name=task_name,
        scheduled_start_date=today,
        scheduled_end_date=today,
        person_days=0,
    )
