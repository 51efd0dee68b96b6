# tests/unit/test_daily.py
"""Tests for the daily scheduling functions and DailySchedule."""

import pytest

from daymap.errors import NoFurtherDay, TaskNotFound
from daymap.schedule.daily import (
    DailySchedule,
    available_dates,
    day_progress,
    merge_tasks,
    push_to_tomorrow,
    reorder,
    replace_task,
    resolve_selected_date,
    set_completion,
    tasks_for_date,
    toggle_complete,
)


class TestDerivedState:
    def test_available_dates_sorted_and_distinct(self, sample_project):
        assert available_dates(reversed(sample_project.tasks)) == [
            "2024-01-01",
            "2024-01-02",
            "2024-01-05",
        ]

    def test_resolve_keeps_existing_selection(self):
        assert resolve_selected_date(["2024-01-01", "2024-01-02"], "2024-01-02") == "2024-01-02"

    def test_resolve_orphan_falls_back_to_first(self):
        assert resolve_selected_date(["2024-01-01", "2024-01-02"], "2023-12-31") == "2024-01-01"
        assert resolve_selected_date(["2024-01-01"], None) == "2024-01-01"

    def test_resolve_without_dates(self):
        assert resolve_selected_date([], None) is None

    def test_tasks_for_date_ordered(self, make_task):
        tasks = [make_task("b", order_index=1), make_task("a", order_index=0), make_task("c", date="2024-01-02")]
        assert [t.id for t in tasks_for_date(tasks, "2024-01-01")] == ["a", "b"]

    def test_progress_is_rounded_mean(self, make_task):
        tasks = [make_task("a", completion_percent=45), make_task("b", completion_percent=50)]
        assert day_progress(tasks, "2024-01-01") == 48

    def test_progress_rounds_down_below_half(self, make_task):
        tasks = [make_task(str(i), completion_percent=p) for i, p in enumerate([33, 33, 34])]
        assert day_progress(tasks, "2024-01-01") == 33

    def test_progress_zero_without_tasks(self, make_task):
        assert day_progress([make_task()], "2024-02-01") == 0
        assert day_progress([], None) == 0


class TestTaskUpdates:
    def test_replace_task_overwrites_by_id(self, sample_project):
        updated = sample_project.tasks[1].model_copy(update={"notes": "ch. 1-3"})
        result = replace_task(sample_project.tasks, updated)
        assert result[1].notes == "ch. 1-3"
        assert replace_task(result, updated) == result

    def test_replace_unknown_task(self, sample_project, make_task):
        with pytest.raises(TaskNotFound):
            replace_task(sample_project.tasks, make_task("missing"))

    def test_merge_keeps_positions(self, sample_project):
        changed = sample_project.tasks[2].model_copy(update={"completion_percent": 100})
        merged = merge_tasks(sample_project.tasks, [changed])
        assert [t.id for t in merged] == ["t1", "t2", "t3", "t4"]
        assert merged[2].completion_percent == 100
        assert merged[0] is sample_project.tasks[0]

    def test_toggle_partial_completes(self, make_task):
        assert toggle_complete(make_task(completion_percent=45)).completion_percent == 100

    def test_toggle_complete_resets(self, make_task):
        assert toggle_complete(make_task(completion_percent=100)).completion_percent == 0

    @pytest.mark.parametrize("value,expected", [(0, 0), (47, 45), (48, 50), (100, 100), (98, 100)])
    def test_set_completion_snaps(self, make_task, value, expected):
        assert set_completion(make_task(), value).completion_percent == expected

    @pytest.mark.parametrize("value", [-5, 101])
    def test_set_completion_range(self, make_task, value):
        with pytest.raises(ValueError):
            set_completion(make_task(), value)

    def test_push_moves_to_next_scheduled_date(self, sample_project):
        dates = available_dates(sample_project.tasks)
        pushed = push_to_tomorrow(sample_project.tasks[2], dates)
        # next entry in the list, not the next calendar day
        assert pushed.date == "2024-01-05"
        assert sample_project.tasks[2].date == "2024-01-02"

    def test_push_on_last_date_rejected(self, sample_project):
        dates = available_dates(sample_project.tasks)
        with pytest.raises(NoFurtherDay) as exc_info:
            push_to_tomorrow(sample_project.tasks[3], dates)
        assert exc_info.value.date == "2024-01-05"


class TestReorder:
    def test_move_and_renumber(self, make_task):
        day = [make_task(str(i), order_index=i) for i in range(4)]
        result = reorder(day, 0, 2)
        assert [t.id for t in result] == ["1", "2", "0", "3"]
        assert [t.order_index for t in result] == [0, 1, 2, 3]

    def test_order_index_is_bijection(self, make_task):
        day = [make_task(str(i), order_index=i * 3) for i in range(5)]
        result = reorder(day, 4, 1)
        assert sorted(t.order_index for t in result) == list(range(5))

    def test_out_of_range(self, make_task):
        with pytest.raises(IndexError):
            reorder([make_task()], 0, 1)

    def test_multiple_dates_rejected(self, make_task):
        with pytest.raises(ValueError):
            reorder([make_task("a"), make_task("b", date="2024-01-02")], 0, 1)


class TestDailySchedule:
    def test_defaults_to_first_date(self, sample_project):
        schedule = DailySchedule(sample_project.tasks)
        assert schedule.selected_date == "2024-01-01"
        assert [t.id for t in schedule.daily_tasks] == ["t1", "t2"]

    def test_orphan_selection_recovers(self, sample_project):
        schedule = DailySchedule(sample_project.tasks, selected_date="2024-01-05")
        schedule.refresh([t for t in sample_project.tasks if t.date != "2024-01-05"])
        assert schedule.selected_date == "2024-01-01"

    def test_empty_schedule(self):
        schedule = DailySchedule()
        assert schedule.dates == []
        assert schedule.selected_date is None
        assert schedule.daily_tasks == []
        assert schedule.progress == 0

    def test_toggle_updates_progress(self, sample_project):
        schedule = DailySchedule(sample_project.tasks)
        task = schedule.toggle_complete("t1")
        assert task.completion_percent == 100
        assert schedule.progress == 50

    def test_notes_and_content(self, sample_project):
        schedule = DailySchedule(sample_project.tasks)
        schedule.set_notes("t2", "skim")
        task = schedule.edit_content("t2", "Read chapter 2")
        assert (task.notes, task.content) == ("skim", "Read chapter 2")

    def test_push_appends_to_destination_day(self, sample_project):
        schedule = DailySchedule(sample_project.tasks, selected_date="2024-01-02")
        pushed = schedule.push_to_tomorrow("t3")
        assert (pushed.date, pushed.order_index) == ("2024-01-05", 1)
        schedule.select("2024-01-05")
        assert [t.id for t in schedule.daily_tasks] == ["t4", "t3"]

    def test_push_last_date_leaves_state(self, sample_project):
        schedule = DailySchedule(sample_project.tasks, selected_date="2024-01-05")
        with pytest.raises(NoFurtherDay):
            schedule.push_to_tomorrow("t4")
        assert schedule.tasks == tuple(sample_project.tasks)

    def test_reorder_selected_day(self, sample_project):
        schedule = DailySchedule(sample_project.tasks)
        day = schedule.reorder(1, 0)
        assert [t.id for t in day] == ["t2", "t1"]
        assert [t.id for t in schedule.daily_tasks] == ["t2", "t1"]
