"""
Unit tests for the interaction module.

Tests cover edge-drag resizing, the drag session commit and the
resolver's view gestures.
"""

import pytest
from datetime import date
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from interaction import (DragSession, InteractionResolver, day_offset, resize_end, resize_start,
                         wheel_day_width)
from layout import TimelineView
from models import Milestone, NewTask, Schedule
from store import ScheduleStore, SetEditable

TODAY = date(2025, 3, 6)


def make_task():
    return NewTask(task_id="t1", section_id="s1", task_name="Excavation",
                   scheduled_start_date=date(2025, 3, 3), scheduled_end_date=date(2025, 3, 7), person_days=5)


def make_store(editable=True):
    milestone = Milestone(task_id="m1", section_id="s1", scheduled_date=date(2025, 3, 10))
    return ScheduleStore(Schedule(tasks=(make_task(), milestone)), editable=editable)


class TestResize:
    """Pixel deltas -> whole-day date changes."""

    def test_day_offset_rounds(self):
        assert day_offset(50, 40) == 1
        assert day_offset(70, 40) == 2
        assert day_offset(-90, 40) == -2

    def test_resize_start_earlier(self):
        assert resize_start(make_task(), -80, 40).scheduled_start_date == date(2025, 3, 1)

    def test_resize_start_onto_end_rejected(self):
        assert resize_start(make_task(), 160, 40) is None

    def test_resize_end_later(self):
        assert resize_end(make_task(), 160, 40).scheduled_end_date == date(2025, 3, 11)

    def test_resize_end_keeps_one_day(self):
        """Dragging the end past the start stops one day after the start."""
        assert resize_end(make_task(), -400, 40).scheduled_end_date == date(2025, 3, 4)

    def test_resize_leaves_person_days_alone(self):
        assert resize_end(make_task(), 160, 40).person_days == 5


class TestWheel:

    def test_wheel_down_shrinks_days(self):
        assert wheel_day_width(40, 100) == 30

    def test_wheel_bounded(self):
        assert wheel_day_width(40, -10000) == 100
        assert wheel_day_width(40, 10000) == 10


class TestDragSession:

    def test_commit_rederives_person_days(self):
        """Extending to Tuesday of the next week gives seven working days."""
        store = make_store()
        session = DragSession(store, "t1", "end", 40)
        session.move(160)
        committed = session.commit()
        assert committed.scheduled_end_date == date(2025, 3, 11)
        assert committed.person_days == 7
        assert store.schedule.find_task("t1") == committed

    def test_start_drag_over_weekend(self):
        store = make_store()
        session = DragSession(store, "t1", "start", 40)
        session.move(-80)
        assert session.commit().person_days == 5

    def test_moves_are_cumulative_from_origin(self):
        session = DragSession(make_store(), "t1", "end", 40)
        session.move(40)
        session.move(80)
        assert session.candidate.scheduled_end_date == date(2025, 3, 9)

    def test_rejected_start_keeps_previous_candidate(self):
        session = DragSession(make_store(), "t1", "start", 40)
        session.move(40)
        session.move(200)
        assert session.candidate.scheduled_start_date == date(2025, 3, 4)

    def test_unchanged_drag_commits_nothing(self):
        store = make_store()
        schedule = store.schedule
        session = DragSession(store, "t1", "end", 40)
        session.move(10)
        assert session.commit() is None
        assert store.schedule is schedule

    def test_cancel(self):
        session = DragSession(make_store(), "t1", "end", 40)
        session.move(160)
        session.cancel()
        assert session.commit() is None

    def test_milestone_not_draggable(self):
        with pytest.raises(ValueError):
            DragSession(make_store(), "m1", "end", 40)

    def test_unknown_edge(self):
        with pytest.raises(ValueError):
            DragSession(make_store(), "t1", "middle", 40)


class TestInteractionResolver:

    def test_initial_layout(self):
        resolver = InteractionResolver(make_store(), TimelineView(viewport_width=1000), today=TODAY)
        assert len(resolver.layout.rows) == 2
        assert len(resolver.layout.handles) == 2

    def test_drag_previews_then_commits(self):
        store = make_store()
        resolver = InteractionResolver(store, TimelineView(viewport_width=1000), today=TODAY)
        handle = resolver.layout.handles[1]
        assert handle.edge == "end"

        resolver.begin_drag(handle)
        resolver.drag_to(160)
        assert resolver.layout.row_for("t1").rect.width == 320
        assert store.schedule.find_task("t1").scheduled_end_date == date(2025, 3, 7)

        committed = resolver.end_drag()
        assert committed.person_days == 7
        assert store.schedule.find_task("t1").scheduled_end_date == date(2025, 3, 11)
        assert resolver.drag is None

    def test_drag_uses_zoomed_day_width(self):
        store = make_store()
        view = TimelineView(viewport_width=1000)
        view.zoom_by(2)
        resolver = InteractionResolver(store, view, today=TODAY)
        resolver.begin_drag(resolver.layout.handles[1])
        resolver.drag_to(160)
        assert resolver.end_drag().scheduled_end_date == date(2025, 3, 9)

    def test_cancel_restores_layout(self):
        store = make_store()
        resolver = InteractionResolver(store, TimelineView(viewport_width=1000), today=TODAY)
        resolver.begin_drag(resolver.layout.handles[1])
        resolver.drag_to(160)
        resolver.cancel_drag()
        assert resolver.layout.row_for("t1").rect.width == 160
        assert store.schedule.find_task("t1") == make_task()

    def test_read_only_blocks_drags(self):
        store = make_store(editable=False)
        resolver = InteractionResolver(store, TimelineView(viewport_width=1000), today=TODAY)
        assert resolver.layout.handles == []
        store.dispatch(SetEditable(True))
        handle = resolver.layout.handles[0]
        store.dispatch(SetEditable(False))
        assert resolver.begin_drag(handle) is None

    def test_wheel_relayouts(self):
        resolver = InteractionResolver(make_store(), TimelineView(viewport_width=1000), today=TODAY)
        layout = resolver.wheel(100)
        assert layout.scale.day_width == 30

    def test_zoom_and_pan(self):
        resolver = InteractionResolver(make_store(), TimelineView(viewport_width=1000), today=TODAY)
        resolver.zoom(2)
        layout = resolver.pan(15)
        assert layout.scale.pixels_per_day == 80
        assert layout.pan_x == 15

    def test_one_day_bar_can_be_lengthened(self):
        """Grabbing the right edge of a one-day bar drags its end date."""
        task = NewTask(task_id="t1", section_id="s1", scheduled_start_date=date(2025, 3, 3),
                       scheduled_end_date=date(2025, 3, 3), person_days=1)
        store = ScheduleStore(Schedule(tasks=(task,)), editable=True)
        resolver = InteractionResolver(store, TimelineView(viewport_width=1000), today=TODAY)
        handle = resolver.layout.hit_test(resolver.layout.row_for("t1").rect.x + 2, 15)
        resolver.begin_drag(handle)
        resolver.drag_to(120)
        committed = resolver.end_drag()
        assert committed.scheduled_end_date == date(2025, 3, 6)
        assert committed.person_days == 4
