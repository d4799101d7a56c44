from datetime import date, timedelta

from models import ActiveTask, Milestone, NewTask, Schedule, Section

# --- Default Data ---

def default_schedule(today=None):
    """The sample project shown on startup, dated relative to today."""
    today = today or date.today()

    def day(offset):
        return today + timedelta(days=offset)

    sections = (
        Section("prep", "Preparation"),
        Section("foundation", "Foundation Work"),
        Section("structure", "Structural Work"),
        Section("finishing", "Finishing Work"),
    )
    tasks = (
        ActiveTask(task_id="t1", section_id="prep", task_name="Site Survey", assignee="Assignee A",
                   scheduled_start_date=day(0), scheduled_end_date=day(2), person_days=3,
                   actual_start_date=day(0), progress=40),
        Milestone(task_id="m-permit", section_id="prep", task_name="Permit Approval", scheduled_date=day(3)),
        NewTask(task_id="t2", section_id="foundation", task_name="Excavation", assignee="Assignee B",
                scheduled_start_date=day(4), scheduled_end_date=day(7), person_days=4),
        NewTask(task_id="t3", section_id="foundation", task_name="Concrete Pouring", assignee="Assignee C",
                scheduled_start_date=day(8), scheduled_end_date=day(10), person_days=3),
        NewTask(task_id="t4", section_id="structure", task_name="Frame Assembly", assignee="Assignee D",
                scheduled_start_date=day(11), scheduled_end_date=day(17), person_days=7),
        Milestone(task_id="m-roof", section_id="structure", task_name="Roof Installed", scheduled_date=day(18)),
        NewTask(task_id="t5", section_id="finishing", task_name="Interior Finishing", assignee="Assignee E",
                scheduled_start_date=day(19), scheduled_end_date=day(25), person_days=7),
        Milestone(task_id="m-final", section_id="finishing", task_name="Final Inspection", scheduled_date=day(26)),
    )
    return Schedule(sections=sections, tasks=tasks, holidays=(), skip_weekends=True)


status_colors = {
    'new': '#c0504d',
    'active': '#4f81bd',
    'done': '#5cb85c',
    'milestone': '#f0ad4e',
}

status_labels = {
    'new': 'New',
    'active': 'Active',
    'done': 'Done',
    'milestone': 'Milestone',
}

# --- Timeline Layout ---

ROW_HEIGHT = 30
MARGIN_TOP = 60
MARGIN_RIGHT = 20
MARGIN_BOTTOM = 20
MARGIN_LEFT = 50
HEADER_BAND_HEIGHT = 20

DEFAULT_DAY_WIDTH = 40
MIN_DAY_WIDTH = 10
MAX_DAY_WIDTH = 100
WHEEL_FACTOR = 0.1

MIN_ZOOM = 0.5
MAX_ZOOM = 3

HANDLE_WIDTH = 10
BAR_PADDING = 5
DIAMOND_SIZE = 8

MONTH_LABEL_FORMAT = "%b %Y"
TOOLTIP_DATE_FORMAT = "%d-%m-%Y"

header_colors = {
    'month': '#bbbbbb',
    'day': '#dddddd',
    'grid': '#aaaaaa',
    'non_working': '#e8e8e8',
    'progress_line': 'orange',
}

# --- Files ---

DOCUMENT_DATE_FORMAT = "%Y-%m-%d"
SAVE_FILENAME_PATTERN = "schedule_{date}.json"

# --- Logging ---

LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
