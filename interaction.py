"""
Interaction resolver: turns pixel-space gestures into schedule changes.

Edge drags resize a task bar by whole days, the wheel adjusts the day
width and the zoom gesture rescales the timeline without touching task
data.
"""
from dataclasses import replace
from datetime import timedelta
import logging

import config
from core_logic import calendar_kwargs, person_days_between
from layout import clamp_day_width
from models import Milestone
from store import UpdateTask

logger = logging.getLogger(__name__)


def day_offset(dx, day_width):
    return int(round(dx / day_width))


def resize_start(task, dx, day_width):
    """
    Moves the scheduled start by the dragged number of days. Returns None
    if the new start would not stay strictly before the scheduled end.
    """
    new_start = task.scheduled_start_date + timedelta(days=day_offset(dx, day_width))
    if new_start >= task.scheduled_end_date:
        return None
    return replace(task, scheduled_start_date=new_start)


def resize_end(task, dx, day_width):
    """Moves the scheduled end by the dragged number of days, keeping at least one day."""
    new_end = task.scheduled_end_date + timedelta(days=day_offset(dx, day_width))
    earliest = task.scheduled_start_date + timedelta(days=1)
    return replace(task, scheduled_end_date=max(new_end, earliest))


def wheel_day_width(day_width, delta_y):
    return clamp_day_width(day_width - delta_y * config.WHEEL_FACTOR)


class DragSession:
    """
    One edge-drag gesture on a task bar. The candidate task is updated on
    every `move` and only reaches the store on `commit`.
    """

    def __init__(self, store, task_id, edge, day_width):
        if edge not in ("start", "end"):
            raise ValueError(f"Unknown resize edge: {edge!r}")
        task = store.schedule.find_task(task_id)
        if task is None or isinstance(task, Milestone):
            raise ValueError(f"Task '{task_id}' has no resizable bar")

        self.store = store
        self.edge = edge
        self.day_width = day_width
        self.original = task
        self.candidate = task

    def move(self, dx):
        """`dx` is the cumulative pointer delta since the drag began."""
        if self.edge == "start":
            resized = resize_start(self.original, dx, self.day_width)
            if resized is None:
                logger.debug("Rejected start drag of %s by %.1fpx", self.original.task_id, dx)
                return self.candidate
            self.candidate = resized
        else:
            self.candidate = resize_end(self.original, dx, self.day_width)
        return self.candidate

    def commit(self):
        """Re-derives person days and dispatches the candidate. Returns the committed task or None."""
        if self.candidate == self.original:
            return None
        schedule = self.store.schedule
        person_days = person_days_between(
            self.candidate.scheduled_start_date, self.candidate.scheduled_end_date, **calendar_kwargs(schedule)
        )
        committed = replace(self.candidate, person_days=person_days)
        self.store.dispatch(UpdateTask(committed))
        logger.info("Resized task %s to %s - %s", committed.task_id,
                    committed.scheduled_start_date, committed.scheduled_end_date)
        return committed

    def cancel(self):
        self.candidate = self.original


class InteractionResolver:
    """
    Routes gestures to the store and the timeline view and keeps the
    current layout up to date. Every committed store action triggers a
    full relayout.
    """

    def __init__(self, store, view, today=None):
        self.store = store
        self.view = view
        self.today = today
        self.drag = None
        self.layout = None
        store.subscribe(lambda _store: self.relayout())
        self.relayout()

    def relayout(self):
        self.layout = self.view.relayout(self.store.schedule, today=self.today, editable=self.store.editable)
        return self.layout

    # --- Edge Drags ---

    def begin_drag(self, handle):
        if not self.store.editable:
            return None
        self.drag = DragSession(self.store, handle.task_id, handle.edge, self.view.effective_day_width)
        return self.drag

    def drag_to(self, dx):
        """Previews the drag without committing; returns the candidate task."""
        if self.drag is None:
            return None
        candidate = self.drag.move(dx)
        preview = replace(self.store.schedule, tasks=tuple(
            candidate if t.task_id == candidate.task_id else t for t in self.store.schedule.tasks
        ))
        self.layout = self.view.relayout(preview, today=self.today, editable=self.store.editable)
        return candidate

    def end_drag(self):
        if self.drag is None:
            return None
        session, self.drag = self.drag, None
        committed = session.commit()
        if committed is None:
            self.relayout()
        return committed

    def cancel_drag(self):
        if self.drag is None:
            return
        self.drag.cancel()
        self.drag = None
        self.relayout()

    # --- View Gestures ---

    def wheel(self, delta_y):
        self.view.set_day_width(wheel_day_width(self.view.day_width, delta_y))
        return self.relayout()

    def zoom(self, factor, anchor_x=0.0):
        self.view.zoom_by(factor, anchor_x)
        return self.relayout()

    def pan(self, dx):
        self.view.pan_by(dx)
        return self.relayout()
