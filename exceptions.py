"""
Exceptions raised by the schedule planner.

The UI layer catches these and turns them into messagebox errors.
"""


class ScheduleError(Exception):
    """Base class for all schedule planner errors."""
    pass


class ScheduleDocumentError(ScheduleError):
    """A schedule document could not be loaded."""
    pass


class DocumentFormatError(ScheduleDocumentError):
    """The document is not valid JSON or is missing/garbling required fields."""
    pass


class UnsupportedVersionError(ScheduleDocumentError):
    """The document declares a schedule version this planner cannot read."""

    def __init__(self, version):
        self.version = version
        super().__init__(f"Unsupported schedule version: {version!r}")
