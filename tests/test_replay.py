"""Tests for stm.replay — scenario-driven sessions."""

from __future__ import annotations

import pytest

from stm.notify import ConsoleNotifier
from stm.projects.controller import ViewState
from stm.replay import ScenarioError, run_scenario

PROJECT = {
    "id": "p1",
    "name": "Roads",
    "owner": {"id": "u1", "name": "Maria"},
    "users": [{"id": "u2", "name": "Peter"}],
    "tasks": [
        {"id": "T1", "processPoints": 0, "maxProcessPoints": 10},
        {"id": "T2", "processPoints": 5, "maxProcessPoints": 10},
    ],
}


def _scenario(viewer: str, *events: dict, failures: list[str] | None = None) -> dict:
    return {"viewer": viewer, "project": PROJECT, "events": list(events), "failures": failures or []}


class TestScenarios:
    def test_open_only(self):
        r = run_scenario(_scenario("u1"), notifier=ConsoleNotifier())
        assert r.state == ViewState.ACTIVE
        assert r.selected_task == "T1"
        assert r.navigations == []

    def test_owner_removed(self):
        r = run_scenario(
            _scenario("u1", {"type": "projectUserRemoved", "id": "p1"}),
            notifier=ConsoleNotifier(),
        )
        assert r.state == ViewState.EVICTED
        assert r.warnings == ["You have been removed from this project"]
        assert r.navigations == ["/manager"]

    def test_deleted_as_member_and_owner(self):
        deleted = {"type": "projectDeleted", "id": "p1"}
        member = run_scenario(_scenario("u2", deleted), notifier=ConsoleNotifier())
        owner = run_scenario(_scenario("u1", deleted), notifier=ConsoleNotifier())
        assert member.warnings == ["This project has been removed"]
        assert owner.warnings == []
        assert member.navigations == owner.navigations == ["/manager"]

    def test_viewer_override(self):
        r = run_scenario(
            _scenario("u1", {"type": "projectDeleted", "id": "p1"}),
            viewer="u2",
            notifier=ConsoleNotifier(),
        )
        assert r.viewer == "u2"
        assert r.warnings == ["This project has been removed"]

    def test_changed_snapshot_updates_selection(self):
        changed = dict(PROJECT, tasks=[
            {"id": "T1", "processPoints": 3, "maxProcessPoints": 10, "assignedUser": "u2"},
        ])
        r = run_scenario(
            _scenario("u2", {"type": "projectChanged", "project": changed}),
            notifier=ConsoleNotifier(),
        )
        assert r.state == ViewState.ACTIVE
        assert r.selected_task == "T1"

    def test_select_and_intents(self):
        r = run_scenario(
            _scenario(
                "u2",
                {"type": "selectTask", "taskId": "T2"},
                {"type": "assignTask", "taskId": "T2"},
                {"type": "setProcessPoints", "taskId": "T2", "points": 7},
                {"type": "inviteUser", "user": {"id": "u3", "name": "Clara"}},
                failures=["inviteUser"],
            ),
            notifier=ConsoleNotifier(),
        )
        assert r.selected_task == "T2"
        assert [op for op, _ in r.requests] == ["assignTask", "setProcessPoints", "inviteUser"]
        assert r.errors == ["Could not invite user 'Clara'"]

    def test_progress_totals(self):
        r = run_scenario(_scenario("u2"), notifier=ConsoleNotifier())
        assert r.events == 0
        assert (r.task_count, r.tasks_done, r.tasks_assigned) == (2, 0, 0)
        assert (r.done_points, r.total_points) == (5, 20)

    def test_task_changed_replaces_one_task(self):
        r = run_scenario(
            _scenario(
                "u2",
                {"type": "taskChanged", "task": {
                    "id": "T1", "processPoints": 10, "maxProcessPoints": 10, "assignedUser": "u2",
                }},
            ),
            notifier=ConsoleNotifier(),
        )
        assert r.events == 1
        assert r.selected_task == "T1"
        assert (r.task_count, r.tasks_done, r.tasks_assigned) == (2, 1, 1)
        assert (r.done_points, r.total_points) == (15, 20)

    def test_invite_existing_member_warns(self):
        r = run_scenario(
            _scenario("u1", {"type": "inviteUser", "user": {"id": "u2", "name": "Peter"}}),
            notifier=ConsoleNotifier(),
        )
        assert r.requests == []
        assert r.warnings == ["'Peter' is already a member of this project"]

    def test_remove_user_failure(self):
        r = run_scenario(
            _scenario("u1", {"type": "removeUser", "userId": "u2"}, failures=["removeUser"]),
            notifier=ConsoleNotifier(),
        )
        assert r.errors == ["Could not remove user"]
        assert r.state == ViewState.ACTIVE


class TestInvalidScenarios:
    def test_not_an_object(self):
        with pytest.raises(ScenarioError):
            run_scenario([])  # type: ignore[arg-type]

    def test_missing_viewer(self):
        with pytest.raises(ScenarioError, match="viewer"):
            run_scenario({"project": PROJECT})

    def test_bad_project(self):
        with pytest.raises(ScenarioError, match="project"):
            run_scenario({"viewer": "u1", "project": {"name": "no id"}})

    def test_unknown_event(self):
        with pytest.raises(ScenarioError, match="unknown event type"):
            run_scenario(_scenario("u1", {"type": "explode"}), notifier=ConsoleNotifier())

    def test_missing_field(self):
        with pytest.raises(ScenarioError, match="missing field"):
            run_scenario(_scenario("u1", {"type": "projectDeleted"}), notifier=ConsoleNotifier())

    def test_select_unknown_task(self):
        with pytest.raises(ScenarioError, match="no task"):
            run_scenario(_scenario("u1", {"type": "selectTask", "taskId": "T9"}), notifier=ConsoleNotifier())

    def test_task_changed_unknown_task(self):
        event = {"type": "taskChanged", "task": {"id": "T9", "maxProcessPoints": 3}}
        with pytest.raises(ScenarioError, match="no task T9"):
            run_scenario(_scenario("u1", event), notifier=ConsoleNotifier())

    def test_task_changed_out_of_range(self):
        event = {"type": "taskChanged", "task": {"id": "T1", "processPoints": 11, "maxProcessPoints": 10}}
        with pytest.raises(ScenarioError, match="taskChanged"):
            run_scenario(_scenario("u1", event), notifier=ConsoleNotifier())
