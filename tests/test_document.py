"""
Unit tests for the document module.

Tests cover loading, validation and saving of JSON schedule documents.
"""

import json
import pytest
import time
from datetime import date, datetime, timezone
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import default_schedule
from document import (dump_schedule, load_schedule, parse_date, read_schedule, save_filename,
                      schedule_to_dict, write_schedule)
from exceptions import DocumentFormatError, ScheduleDocumentError, UnsupportedVersionError
from models import ActiveTask, DoneTask, Milestone, NewTask


def make_document(**overrides):
    doc = {
        "version": "1.0",
        "sections": [{"sectionId": "s1", "sectionName": "Foundation"}],
        "tasks": [
            {"sectionId": "s1", "taskId": "t1", "taskName": "Excavation", "status": "active",
             "assignee": "Alice", "scheduledStartDate": "2025-03-03T00:00:00",
             "scheduledEndDate": "2025-03-07T00:00:00.000", "personDays": 5,
             "actualStartDate": "2025-03-04", "progress": 20},
            {"sectionId": "s1", "taskId": "m1", "taskName": "Permit", "status": "milestone",
             "scheduledDate": "2025-03-10"},
        ],
        "holidays": ["2025-03-05"],
        "skipWeekends": True,
    }
    doc.update(overrides)
    return json.dumps(doc)


class TestParseDate:

    def test_plain_date(self):
        assert parse_date("2025-03-03", "d") == date(2025, 3, 3)

    def test_naive_timestamp_keeps_its_day(self):
        assert parse_date("2025-03-03T23:30:00.000", "d") == date(2025, 3, 3)

    def test_utc_timestamp_read_as_local_day(self):
        expected = datetime(2025, 3, 2, 15, 0, tzinfo=timezone.utc).astimezone().date()
        assert parse_date("2025-03-02T15:00:00.000Z", "d") == expected

    def test_offset_timestamp_read_as_local_day(self):
        expected = datetime(2025, 3, 3, 6, 30, tzinfo=timezone.utc).astimezone().date()
        assert parse_date("2025-03-03T15:30:00+09:00", "d") == expected

    @pytest.mark.skipif(not hasattr(time, "tzset"), reason="needs POSIX time zones")
    def test_utc_timestamp_in_tokyo(self, monkeypatch):
        """Midnight in Tokyo is stored as the previous UTC evening."""
        monkeypatch.setenv("TZ", "JST-9")
        time.tzset()
        try:
            assert parse_date("2025-03-02T15:00:00.000Z", "d") == date(2025, 3, 3)
        finally:
            monkeypatch.undo()
            time.tzset()

    @pytest.mark.parametrize("value", ["03/03/2025", "2025-13-01", "", None, 20250303])
    def test_invalid(self, value):
        with pytest.raises(DocumentFormatError):
            parse_date(value, "d")


class TestLoadSchedule:

    def test_loads_tasks(self):
        schedule = load_schedule(make_document())
        task = schedule.find_task("t1")
        assert isinstance(task, ActiveTask)
        assert task.scheduled_start_date == date(2025, 3, 3)
        assert task.actual_start_date == date(2025, 3, 4)
        assert task.progress == 20
        assert isinstance(schedule.find_task("m1"), Milestone)
        assert schedule.holidays == (date(2025, 3, 5),)
        assert schedule.sections[0].section_name == "Foundation"

    def test_repeated_holidays_collapsed(self):
        schedule = load_schedule(make_document(holidays=["2025-03-05", "2025-03-06", "2025-03-05"]))
        assert schedule.holidays == (date(2025, 3, 5), date(2025, 3, 6))

    def test_unsupported_version(self):
        with pytest.raises(UnsupportedVersionError) as excinfo:
            load_schedule(make_document(version="2.0"))
        assert excinfo.value.version == "2.0"

    def test_missing_version(self):
        doc = json.loads(make_document())
        del doc["version"]
        with pytest.raises(UnsupportedVersionError):
            load_schedule(json.dumps(doc))

    def test_not_json(self):
        with pytest.raises(DocumentFormatError):
            load_schedule("{not json")

    def test_not_an_object(self):
        with pytest.raises(DocumentFormatError):
            load_schedule("[]")

    def test_tasks_must_be_a_list(self):
        with pytest.raises(DocumentFormatError):
            load_schedule(make_document(tasks=5))

    def test_duplicate_task_ids(self):
        task = {"sectionId": "s1", "taskId": "t1", "status": "milestone", "scheduledDate": "2025-03-10"}
        with pytest.raises(DocumentFormatError):
            load_schedule(make_document(tasks=[task, task]))

    def test_task_ending_before_start(self):
        task = {"sectionId": "s1", "taskId": "t1", "status": "new",
                "scheduledStartDate": "2025-03-07", "scheduledEndDate": "2025-03-03"}
        with pytest.raises(DocumentFormatError):
            load_schedule(make_document(tasks=[task]))

    def test_unknown_status(self):
        task = {"sectionId": "s1", "taskId": "t1", "status": "archived",
                "scheduledStartDate": "2025-03-03", "scheduledEndDate": "2025-03-07"}
        with pytest.raises(DocumentFormatError):
            load_schedule(make_document(tasks=[task]))

    def test_errors_share_a_base_class(self):
        with pytest.raises(ScheduleDocumentError):
            load_schedule(make_document(version="0.9"))

    def test_status_inferred_for_legacy_tasks(self):
        tasks = [
            {"sectionId": "s1", "taskId": "a", "scheduledStartDate": "2025-03-03", "scheduledEndDate": "2025-03-04"},
            {"sectionId": "s1", "taskId": "b", "scheduledStartDate": "2025-03-03", "scheduledEndDate": "2025-03-04",
             "actualStartDate": "2025-03-03", "actualEndDate": "2025-03-04"},
            {"sectionId": "s1", "taskId": "c", "scheduledDate": "2025-03-03"},
        ]
        schedule = load_schedule(make_document(tasks=tasks))
        assert [type(t) for t in schedule.tasks] == [NewTask, DoneTask, Milestone]


class TestSaveSchedule:

    def test_dates_written_as_plain_days(self):
        data = schedule_to_dict(load_schedule(make_document()))
        task = data["tasks"][0]
        assert task["scheduledStartDate"] == "2025-03-03"
        assert task["status"] == "active"
        assert data["holidays"] == ["2025-03-05"]
        assert data["version"] == "1.0"

    def test_milestone_keys(self):
        data = schedule_to_dict(load_schedule(make_document()))
        milestone = data["tasks"][1]
        assert milestone["scheduledDate"] == "2025-03-10"
        assert "actualDate" not in milestone
        assert "personDays" not in milestone

    def test_dump_then_load_restores_schedule(self):
        schedule = default_schedule(today=date(2025, 3, 3))
        assert load_schedule(dump_schedule(schedule)) == schedule

    def test_write_and_read_file(self, tmp_path):
        schedule = default_schedule(today=date(2025, 3, 3))
        path = tmp_path / save_filename(date(2025, 3, 6))
        write_schedule(schedule, path)
        assert path.name == "schedule_2025-03-06.json"
        assert read_schedule(path) == schedule
