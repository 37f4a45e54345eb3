"""
Tests for the critical path calculation.
"""
from datetime import timedelta

import pytest

from youtrack_timeline.app.models import ProjectGraph
from youtrack_timeline.tests.factories import day, depends, make_task
from youtrack_timeline.tools.cpa.engine.cpa import SINK_OWN_FINISH, calculate_critical_path, task_duration


def _metrics(result):
    return {m.human_id: m for m in result.per_task_metrics}


class TestTaskDuration:
    """Test duration resolution."""

    def test_from_dates(self):
        task = make_task("P-1", start_date=day(1), due_date=day(3), estimated_minutes=10)
        assert task_duration(task) == timedelta(days=2)

    def test_from_estimate(self):
        assert task_duration(make_task("P-1", estimated_minutes=960)) == timedelta(minutes=960)

    def test_zero_estimate_is_kept(self):
        assert task_duration(make_task("P-1", estimated_minutes=0)) == timedelta(0)

    def test_default_when_unestimated(self):
        assert task_duration(make_task("P-1")) == timedelta(hours=8)
        assert task_duration(make_task("P-1"), default_minutes=60) == timedelta(hours=1)

    def test_negative_window_floors_at_zero(self):
        task = make_task("P-1", start_date=day(5), due_date=day(3))
        assert task_duration(task) == timedelta(0)


class TestCriticalPath:
    """Test forward/backward passes, slack and the critical chain."""

    def test_abc_example(self, abc_graph):
        result = calculate_critical_path(abc_graph)
        metrics = _metrics(result)
        assert result.ordered_critical_tasks == ["PROJ-A", "PROJ-B"]
        assert result.total_duration_days == pytest.approx(5.0)
        assert metrics["PROJ-C"].slack_days == pytest.approx(2.0)
        assert metrics["PROJ-A"].slack_days == pytest.approx(0.0)
        assert metrics["PROJ-B"].earliest_start == day(3)
        assert metrics["PROJ-B"].earliest_finish == day(6)
        assert metrics["PROJ-C"].latest_start == day(5)

    def test_metrics_sorted_by_slack(self, abc_graph):
        result = calculate_critical_path(abc_graph)
        slacks = [m.slack_days for m in result.per_task_metrics]
        assert slacks == sorted(slacks)
        assert result.per_task_metrics[-1].human_id == "PROJ-C"

    def test_own_finish_sink_anchor(self, abc_graph):
        result = calculate_critical_path(abc_graph, sink_anchor=SINK_OWN_FINISH)
        assert _metrics(result)["PROJ-C"].slack_days == pytest.approx(0.0)
        assert result.ordered_critical_tasks == ["PROJ-A", "PROJ-B", "PROJ-C"]
        assert result.total_duration_days == pytest.approx(5.0)

    def test_empty_graph(self):
        result = calculate_critical_path(ProjectGraph())
        assert result.ordered_critical_tasks == []
        assert result.total_duration_days == 0.0
        assert result.per_task_metrics == []

    def test_unknown_project_is_empty(self, abc_graph):
        result = calculate_critical_path(abc_graph, project="NOPE")
        assert result.per_task_metrics == []

    def test_project_scope(self, abc_graph):
        other = make_task("OTHER-1", project_id="0-9", start_date=day(1), due_date=day(30))
        graph = ProjectGraph(tasks=abc_graph.tasks + [other], edges=abc_graph.edges)
        result = calculate_critical_path(graph, project="PROJ")
        assert "OTHER-1" not in _metrics(result)
        assert result.total_duration_days == pytest.approx(5.0)

    def test_cycle_terminates(self):
        graph = ProjectGraph(
            tasks=[
                make_task("P-1", start_date=day(1), due_date=day(2)),
                make_task("P-2", start_date=day(1), due_date=day(2)),
                make_task("P-3", start_date=day(1), due_date=day(2)),
            ],
            edges=[depends("P-1", "P-2"), depends("P-2", "P-3"), depends("P-3", "P-1"), depends("P-1", "P-1")],
        )
        result = calculate_critical_path(graph)
        assert len(result.per_task_metrics) == 3

    def test_undated_tasks_use_earliest_known_anchor(self):
        graph = ProjectGraph(
            tasks=[
                make_task("P-1", start_date=day(2), due_date=day(3)),
                make_task("P-2", estimated_minutes=24 * 60),
            ],
        )
        metrics = _metrics(calculate_critical_path(graph))
        assert metrics["P-2"].earliest_start == day(2)

    def test_no_anchor_at_all_uses_now(self):
        now = day(10)
        result = calculate_critical_path(ProjectGraph(tasks=[make_task("P-1")]), now=now)
        metrics = _metrics(result)
        assert metrics["P-1"].earliest_start == now
        assert metrics["P-1"].duration_days == pytest.approx(1 / 3)
        assert result.ordered_critical_tasks == ["P-1"]

    def test_tolerance(self, abc_graph):
        result = calculate_critical_path(abc_graph, tolerance_days=2.5)
        assert "PROJ-C" in result.ordered_critical_tasks
