"""
Timeline layout engine.

Maps the schedule's tasks onto a pixel coordinate space: a linear
date->x scale, month/day header bands, daily grid lines, non-working day
shading, one bar or diamond per task row and the progress indicator line.

Coordinates are local to the plotting area: x = 0 is the scale's minimum
date, y = 0 is the top of the first task row, and the header bands sit at
negative y. The drawing surface places that origin at
(MARGIN_LEFT + pan_x, MARGIN_TOP).
"""
from dataclasses import dataclass, field
from datetime import date, timedelta
import logging
import math
from typing import List, Optional, Tuple

import config
from core_logic import as_day, non_working_days
from models import ActiveTask, DoneTask, Milestone, NewTask, task_dates

logger = logging.getLogger(__name__)


def clamp(value, lower, upper):
    return max(lower, min(upper, value))


def clamp_day_width(day_width):
    return clamp(day_width, config.MIN_DAY_WIDTH, config.MAX_DAY_WIDTH)


# --- Scale & Transforms ---

@dataclass(frozen=True)
class ZoomTransform:
    """Horizontal-only zoom: x' = x + k * x0."""
    k: float = 1.0
    x: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "k", clamp(self.k, config.MIN_ZOOM, config.MAX_ZOOM))

    def apply(self, px):
        return self.x + self.k * px

    def scaled(self, factor, anchor_x=0.0):
        """Zooms by `factor`, keeping the point under `anchor_x` fixed."""
        new_k = clamp(self.k * factor, config.MIN_ZOOM, config.MAX_ZOOM)
        new_x = anchor_x - (anchor_x - self.x) * new_k / self.k
        return ZoomTransform(new_k, new_x)


class TimeScale:
    def __init__(self, min_date, max_date, day_width=config.DEFAULT_DAY_WIDTH, zoom=None):
        self.min_date = as_day(min_date)
        self.max_date = as_day(max_date)
        self.day_width = day_width
        self.zoom = zoom or ZoomTransform()

    @property
    def total_days(self):
        return (self.max_date - self.min_date).days

    @property
    def range(self):
        return (0, self.total_days * self.day_width)

    @property
    def pixels_per_day(self):
        return self.day_width * self.zoom.k

    def __call__(self, day):
        offset = (as_day(day) - self.min_date).days
        return self.zoom.apply(offset * self.day_width)

    def invert(self, x):
        """The day whose column contains `x`, clamped to the domain."""
        lower, upper = self.range
        px = clamp((x - self.zoom.x) / self.zoom.k, lower, upper)
        return self.min_date + timedelta(days=math.floor(px / self.day_width))


# --- Drawing Primitives ---

@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    def contains(self, px, py):
        return self.x <= px <= self.x + self.width and self.y <= py <= self.y + self.height


@dataclass(frozen=True)
class HeaderBand:
    day: date
    rect: Rect
    label: str
    label_x: float
    label_y: float


@dataclass(frozen=True)
class GridLine:
    x1: float
    y1: float
    x2: float
    y2: float


@dataclass(frozen=True)
class TaskBar:
    task_id: str
    row: int
    status: str
    rect: Rect
    label: str
    tooltip: str

    def contains(self, px, py):
        return self.rect.contains(px, py)


@dataclass(frozen=True)
class MilestoneMarker:
    task_id: str
    row: int
    cx: float
    cy: float
    size: float
    label: str
    tooltip: str
    status: str = "milestone"

    @property
    def points(self):
        s = self.size
        return [(self.cx, self.cy - s), (self.cx + s, self.cy), (self.cx, self.cy + s), (self.cx - s, self.cy)]

    def contains(self, px, py):
        return abs(px - self.cx) + abs(py - self.cy) <= self.size


@dataclass(frozen=True)
class ResizeHandle:
    task_id: str
    edge: str  # "start" or "end"
    rect: Rect

    def contains(self, px, py):
        return self.rect.contains(px, py)


@dataclass
class Layout:
    viewport_width: float
    height: float
    scale: Optional[TimeScale] = None
    pan_x: float = 0.0
    month_bands: List[HeaderBand] = field(default_factory=list)
    day_bands: List[HeaderBand] = field(default_factory=list)
    grid_lines: List[GridLine] = field(default_factory=list)
    non_working: List[Rect] = field(default_factory=list)
    rows: list = field(default_factory=list)
    handles: List[ResizeHandle] = field(default_factory=list)
    progress_line: List[Tuple[float, float]] = field(default_factory=list)

    @property
    def origin(self):
        return (config.MARGIN_LEFT + self.pan_x, config.MARGIN_TOP)

    def hit_test(self, x, y):
        """
        Returns the handle or row item under a local point, handles first.
        Both lists are searched topmost-first, so where the start and end
        handles of a one-day bar overlap the end handle wins.
        """
        for handle in reversed(self.handles):
            if handle.contains(x, y):
                return handle
        for item in reversed(self.rows):
            if item.contains(x, y):
                return item
        return None

    def row_for(self, task_id):
        return next((r for r in self.rows if r.task_id == task_id), None)


# --- Layout Computation ---

def date_range(tasks):
    all_dates = [as_day(d) for task in tasks for d in task_dates(task)]
    if not all_dates:
        return None, None
    return min(all_dates), max(all_dates)


def _month_start(day):
    return day.replace(day=1)


def _next_month(day):
    if day.month == 12:
        return date(day.year + 1, 1, 1)
    return date(day.year, day.month + 1, 1)


def _days(start, end):
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def month_bands(scale):
    bands = []
    month = _month_start(scale.min_date)
    while month <= scale.max_date:
        x = scale(month)
        width = scale(_next_month(month)) - x
        band_y = -config.MARGIN_TOP
        bands.append(HeaderBand(
            day=month,
            rect=Rect(x, band_y, width, config.HEADER_BAND_HEIGHT),
            label=month.strftime(config.MONTH_LABEL_FORMAT),
            label_x=x + 5,
            label_y=band_y + 15,
        ))
        month = _next_month(month)
    return bands


def day_bands(scale):
    bands = []
    band_y = -config.MARGIN_TOP + config.HEADER_BAND_HEIGHT
    for day in _days(scale.min_date, scale.max_date):
        x = scale(day)
        width = scale(day + timedelta(days=1)) - x
        bands.append(HeaderBand(
            day=day,
            rect=Rect(x, band_y, width, config.HEADER_BAND_HEIGHT),
            label=str(day.day),
            label_x=x + 2,
            label_y=band_y + 15,
        ))
    return bands


def grid_lines(scale, row_count):
    rows_height = row_count * config.ROW_HEIGHT
    return [GridLine(scale(day), 0, scale(day), rows_height) for day in _days(scale.min_date, scale.max_date)]


def non_working_bands(scale, row_count, holidays, skip_weekends):
    rows_height = row_count * config.ROW_HEIGHT
    bands = []
    for day in non_working_days(scale.min_date, scale.max_date, holidays, skip_weekends):
        x = scale(day)
        bands.append(Rect(x, 0, scale(day + timedelta(days=1)) - x, rows_height))
    return bands


def tooltip_text(task):
    fmt = config.TOOLTIP_DATE_FORMAT
    if isinstance(task, Milestone):
        lines = [task.task_name, f"Date: {task.scheduled_date.strftime(fmt)}"]
        if task.actual_date is not None:
            lines.append(f"Actual: {task.actual_date.strftime(fmt)}")
        return "\n".join(lines)
    return "\n".join([
        task.task_name,
        f"Start: {task.scheduled_start_date.strftime(fmt)}",
        f"End: {task.scheduled_end_date.strftime(fmt)}",
        f"Progress: {task.progress}%",
    ])


def row_geometry(task, row, scale, with_handles=True):
    """The bar/diamond for one task row, plus its resize handles."""
    top = row * config.ROW_HEIGHT
    center_y = top + config.ROW_HEIGHT / 2

    if isinstance(task, Milestone):
        marker = MilestoneMarker(
            task_id=task.task_id, row=row,
            cx=scale(task.scheduled_date), cy=center_y, size=config.DIAMOND_SIZE,
            label=task.task_name, tooltip=tooltip_text(task),
        )
        return marker, []

    x0 = scale(task.scheduled_start_date)
    x1 = scale(task.scheduled_end_date)
    bar_height = config.ROW_HEIGHT - 2 * config.BAR_PADDING
    bar = TaskBar(
        task_id=task.task_id, row=row, status=task.status.value,
        rect=Rect(x0, top + config.BAR_PADDING, x1 - x0, bar_height),
        label=task.task_name, tooltip=tooltip_text(task),
    )
    if not with_handles:
        return bar, []

    half = config.HANDLE_WIDTH / 2
    handles = [
        ResizeHandle(task.task_id, "start", Rect(x0 - half, top + config.BAR_PADDING, config.HANDLE_WIDTH, bar_height)),
        ResizeHandle(task.task_id, "end", Rect(x1 - half, top + config.BAR_PADDING, config.HANDLE_WIDTH, bar_height)),
    ]
    return bar, handles


def progress_x(task, scale, today):
    if isinstance(task, NewTask):
        return scale(task.scheduled_start_date) if task.scheduled_start_date <= today else scale(today)
    if isinstance(task, ActiveTask):
        return scale(task.actual_start_date)
    if isinstance(task, Milestone):
        return scale(task.scheduled_date) if task.scheduled_date <= today else scale(today)
    if isinstance(task, DoneTask):
        return scale(today)
    raise TypeError(f"Not a task: {task!r}")


def progress_line(tasks, scale, today):
    return [
        (progress_x(task, scale, today), row * config.ROW_HEIGHT + config.ROW_HEIGHT / 2)
        for row, task in enumerate(tasks)
    ]


def compute_layout(schedule, viewport_width, day_width=config.DEFAULT_DAY_WIDTH, zoom=None,
                   pan_x=0.0, today=None, editable=True):
    """Full recompute of the timeline geometry for the current schedule."""
    tasks = schedule.tasks
    today = as_day(today or date.today())
    height = config.MARGIN_TOP + len(tasks) * config.ROW_HEIGHT + config.MARGIN_BOTTOM
    layout = Layout(viewport_width=viewport_width, height=height, pan_x=pan_x)

    min_date, max_date = date_range(tasks)
    if min_date is None:
        logger.debug("No tasks to lay out")
        return layout

    scale = TimeScale(min_date, max_date, clamp_day_width(day_width), zoom)
    layout.scale = scale
    layout.month_bands = month_bands(scale)
    layout.day_bands = day_bands(scale)
    layout.grid_lines = grid_lines(scale, len(tasks))
    layout.non_working = non_working_bands(scale, len(tasks), schedule.holidays, schedule.skip_weekends)

    for row, task in enumerate(tasks):
        item, handles = row_geometry(task, row, scale, with_handles=editable)
        layout.rows.append(item)
        layout.handles.extend(handles)

    layout.progress_line = progress_line(tasks, scale, today)
    logger.debug("Laid out %d rows over %d days (%s to %s)", len(tasks), scale.total_days, min_date, max_date)
    return layout


# --- View State ---

class TimelineView:
    """The adjustable view parameters: day width, zoom and horizontal pan."""

    def __init__(self, viewport_width=1200, day_width=config.DEFAULT_DAY_WIDTH):
        self.viewport_width = viewport_width
        self.day_width = clamp_day_width(day_width)
        self.zoom = ZoomTransform()
        self.pan_x = 0.0

    @property
    def effective_day_width(self):
        return self.day_width * self.zoom.k

    def set_day_width(self, day_width):
        self.day_width = clamp_day_width(day_width)

    def zoom_by(self, factor, anchor_x=0.0):
        self.zoom = self.zoom.scaled(factor, anchor_x)

    def pan_by(self, dx):
        self.pan_x += dx

    def reset(self):
        self.zoom = ZoomTransform()
        self.pan_x = 0.0

    def relayout(self, schedule, today=None, editable=True):
        return compute_layout(
            schedule, self.viewport_width, day_width=self.day_width, zoom=self.zoom,
            pan_x=self.pan_x, today=today, editable=editable,
        )
