"""
Loading and saving schedules as JSON documents.

Documents use the camelCase keys of the planner's file format; dates are
written as YYYY-MM-DD and read from any ISO date or timestamp string.
A document is either loaded completely or rejected with a
ScheduleDocumentError; nothing is ever partially applied.
"""
from datetime import date, datetime
import json
import logging

import config
from exceptions import DocumentFormatError, UnsupportedVersionError
from models import (SCHEDULE_VERSION, ActiveTask, DoneTask, Milestone, NewTask, Schedule, Section,
                    TaskStatus)

logger = logging.getLogger(__name__)


# --- Reading ---

def parse_date(value, field_name):
    """
    Reads a YYYY-MM-DD date or an ISO timestamp. Timestamps carrying an
    offset are read as the local calendar day.
    """
    if not isinstance(value, str) or len(value) < 10:
        raise DocumentFormatError(f"Invalid date for '{field_name}': {value!r}")
    try:
        if len(value) == 10:
            return date.fromisoformat(value)
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        stamp = datetime.fromisoformat(value)
    except ValueError:
        raise DocumentFormatError(f"Invalid date for '{field_name}': {value!r}")
    if stamp.tzinfo is not None:
        stamp = stamp.astimezone()
    return stamp.date()


def _optional_date(raw, key):
    value = raw.get(key)
    if value in (None, ""):
        return None
    return parse_date(value, key)


def _required_date(raw, key):
    if key not in raw:
        raise DocumentFormatError(f"Task '{raw.get('taskId')}' is missing '{key}'")
    return parse_date(raw[key], key)


def _infer_status(raw):
    # Documents written before tasks carried a status.
    if raw.get("scheduledDate") and not raw.get("scheduledStartDate"):
        return TaskStatus.MILESTONE.value
    if raw.get("actualEndDate"):
        return TaskStatus.DONE.value
    if raw.get("actualStartDate"):
        return TaskStatus.ACTIVE.value
    return TaskStatus.NEW.value


def task_from_dict(raw):
    if not isinstance(raw, dict):
        raise DocumentFormatError(f"Task entries must be objects, got {type(raw).__name__}")
    try:
        common = {
            "task_id": str(raw["taskId"]),
            "section_id": str(raw["sectionId"]),
            "task_name": str(raw.get("taskName", "")),
            "assignee": str(raw.get("assignee", "")),
        }
    except KeyError as e:
        raise DocumentFormatError(f"Task is missing {e}")

    status = raw.get("status") or _infer_status(raw)
    try:
        if status == TaskStatus.MILESTONE.value:
            return Milestone(**common, scheduled_date=_required_date(raw, "scheduledDate"),
                             actual_date=_optional_date(raw, "actualDate"))

        scheduling = {
            "scheduled_start_date": _required_date(raw, "scheduledStartDate"),
            "scheduled_end_date": _required_date(raw, "scheduledEndDate"),
            "person_days": int(raw.get("personDays", 0)),
        }
        if status == TaskStatus.NEW.value:
            return NewTask(**common, **scheduling)
        if status == TaskStatus.ACTIVE.value:
            return ActiveTask(**common, **scheduling,
                              actual_start_date=_required_date(raw, "actualStartDate"),
                              progress=int(raw.get("progress", 0)))
        if status == TaskStatus.DONE.value:
            return DoneTask(**common, **scheduling,
                            actual_start_date=_required_date(raw, "actualStartDate"),
                            actual_end_date=_required_date(raw, "actualEndDate"))
    except (TypeError, ValueError) as e:
        raise DocumentFormatError(f"Invalid task '{common['task_id']}': {e}")

    raise DocumentFormatError(f"Unknown status for task '{common['task_id']}': {status!r}")


def section_from_dict(raw):
    try:
        return Section(section_id=str(raw["sectionId"]), section_name=str(raw.get("sectionName", "")))
    except (KeyError, TypeError, AttributeError):
        raise DocumentFormatError(f"Invalid section: {raw!r}")


def schedule_from_dict(raw):
    if not isinstance(raw, dict):
        raise DocumentFormatError("The document must contain a JSON object.")

    version = raw.get("version")
    if version != SCHEDULE_VERSION:
        raise UnsupportedVersionError(version)

    try:
        sections = tuple(section_from_dict(s) for s in raw.get("sections", []))
        tasks = tuple(task_from_dict(t) for t in raw.get("tasks", []))
        holidays = tuple(dict.fromkeys(parse_date(h, "holidays") for h in raw.get("holidays", [])))
    except TypeError:
        raise DocumentFormatError("Sections, tasks and holidays must be lists.")

    task_ids = [t.task_id for t in tasks]
    if len(set(task_ids)) != len(task_ids):
        raise DocumentFormatError("Task ids must be unique.")
    section_ids = [s.section_id for s in sections]
    if len(set(section_ids)) != len(section_ids):
        raise DocumentFormatError("Section ids must be unique.")

    return Schedule(
        sections=sections,
        tasks=tasks,
        holidays=holidays,
        skip_weekends=bool(raw.get("skipWeekends", True)),
        version=version,
    )


def load_schedule(text):
    try:
        raw = json.loads(text)
    except ValueError as e:
        raise DocumentFormatError(f"Not a valid JSON document: {e}")
    schedule = schedule_from_dict(raw)
    logger.info("Loaded schedule with %d sections and %d tasks", len(schedule.sections), len(schedule.tasks))
    return schedule


def read_schedule(filepath):
    with open(filepath, 'r', encoding='utf-8') as f:
        return load_schedule(f.read())


# --- Writing ---

def format_date(value):
    return value.strftime(config.DOCUMENT_DATE_FORMAT)


def task_to_dict(task):
    data = {
        "sectionId": task.section_id,
        "taskId": task.task_id,
        "taskName": task.task_name,
        "status": task.status.value,
        "assignee": task.assignee,
    }
    if isinstance(task, Milestone):
        data["scheduledDate"] = format_date(task.scheduled_date)
        if task.actual_date is not None:
            data["actualDate"] = format_date(task.actual_date)
        return data

    data["scheduledStartDate"] = format_date(task.scheduled_start_date)
    data["scheduledEndDate"] = format_date(task.scheduled_end_date)
    data["personDays"] = task.person_days
    if isinstance(task, (ActiveTask, DoneTask)):
        data["actualStartDate"] = format_date(task.actual_start_date)
    if isinstance(task, DoneTask):
        data["actualEndDate"] = format_date(task.actual_end_date)
    data["progress"] = task.progress
    return data


def schedule_to_dict(schedule):
    return {
        "version": schedule.version,
        "sections": [{"sectionId": s.section_id, "sectionName": s.section_name} for s in schedule.sections],
        "tasks": [task_to_dict(t) for t in schedule.tasks],
        "holidays": [format_date(h) for h in schedule.holidays],
        "skipWeekends": schedule.skip_weekends,
    }


def dump_schedule(schedule):
    return json.dumps(schedule_to_dict(schedule), indent=2, ensure_ascii=False)


def save_filename(today=None):
    today = today or datetime.now().date()
    return config.SAVE_FILENAME_PATTERN.format(date=format_date(today))


def write_schedule(schedule, filepath):
    with open(filepath, 'w', encoding='utf-8') as f:
        f.write(dump_schedule(schedule))
    logger.info("Saved schedule to %s", filepath)
