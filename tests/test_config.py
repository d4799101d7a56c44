"""
Unit tests for the sample schedule and display settings in config.
"""

from datetime import date
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import config
from models import TaskStatus, task_dates


class TestDefaultSchedule:

    def test_dated_relative_to_today(self):
        schedule = config.default_schedule(today=date(2025, 3, 3))
        dates = [d for task in schedule.tasks for d in task_dates(task)]
        assert min(dates) == date(2025, 3, 3)
        assert max(dates) == date(2025, 3, 29)

    def test_ids_unique_and_sections_known(self):
        schedule = config.default_schedule(today=date(2025, 3, 3))
        task_ids = [t.task_id for t in schedule.tasks]
        assert len(task_ids) == len(set(task_ids))
        section_ids = {s.section_id for s in schedule.sections}
        assert all(t.section_id in section_ids for t in schedule.tasks)

    def test_every_status_has_a_color_and_label(self):
        for status in TaskStatus:
            assert status.value in config.status_colors
            assert status.value in config.status_labels
