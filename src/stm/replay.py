"""Replay a JSON scenario of bus events and user intents against one session.

A scenario looks like::

    {
      "viewer": "u1",
      "project": {"id": "p1", "owner": {"id": "u1", "name": "Maria"}, "tasks": [...]},
      "failures": ["removeUser"],
      "events": [
        {"type": "projectChanged", "project": {...}},
        {"type": "taskChanged", "task": {"id": "t1", "processPoints": 4, "maxProcessPoints": 10}},
        {"type": "removeUser", "userId": "u2"},
        {"type": "projectUserRemoved", "id": "p1"}
      ]
    }

Intents go to an offline transport that succeeds unless the operation is
listed under ``failures``.
"""

from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Any, Mapping

from stm import log
from stm.config import Config
from stm.model import Project, Task, User
from stm.notify import ConsoleNotifier, make_notifier
from stm.ports import submit_failed
from stm.projects.controller import ProjectViewController, ViewState
from stm.session import ConsoleNavigator, Session, StaticAuthenticator

EVENT_TYPES = (
    "projectChanged",
    "projectDeleted",
    "projectUserRemoved",
    "taskChanged",
    "selectTask",
    "removeUser",
    "inviteUser",
    "leaveProject",
    "deleteProject",
    "assignTask",
    "unassignTask",
    "setProcessPoints",
)


class ScenarioError(ValueError):
    """The scenario file does not describe a runnable replay."""


@dataclass
class ReplayResult:
    project_id: str
    viewer: str
    state: ViewState
    selected_task: str | None = None
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    navigations: list[str] = field(default_factory=list)
    requests: list[tuple[str, tuple[Any, ...]]] = field(default_factory=list)
    events: int = 0
    task_count: int = 0
    tasks_done: int = 0
    tasks_assigned: int = 0
    done_points: int = 0
    total_points: int = 0


class ReplayTransport:
    """Offline transport: records every request and resolves it immediately."""

    def __init__(self, failures: tuple[str, ...] | list[str] = ()) -> None:
        self.failures = set(failures)
        self.requests: list[tuple[str, tuple[Any, ...]]] = []

    def _call(self, op: str, *args: Any) -> Future:
        self.requests.append((op, args))
        if op in self.failures:
            return submit_failed(op, f"{op} rejected by replay scenario")
        f: Future = Future()
        f.set_result(None)
        return f

    def remove_user(self, project_id: str, user_id: str) -> Future:
        return self._call("removeUser", project_id, user_id)

    def invite_user(self, project_id: str, user_id: str) -> Future:
        return self._call("inviteUser", project_id, user_id)

    def leave_project(self, project_id: str) -> Future:
        return self._call("leaveProject", project_id)

    def delete_project(self, project_id: str) -> Future:
        return self._call("deleteProject", project_id)

    def assign_task(self, task_id: str, user_id: str) -> Future:
        return self._call("assignTask", task_id, user_id)

    def unassign_task(self, task_id: str, user_id: str) -> Future:
        return self._call("unassignTask", task_id, user_id)

    def set_process_points(self, task_id: str, points: int) -> Future:
        return self._call("setProcessPoints", task_id, points)

    def get_project(self, project_id: str) -> Future:
        return submit_failed("getProject", f"replay has no project {project_id}")


def _parse_project(raw: Any, where: str) -> Project:
    if not isinstance(raw, Mapping):
        raise ScenarioError(f"{where}: project must be an object")
    try:
        return Project.from_dto(raw)
    except (KeyError, TypeError, ValueError) as e:
        raise ScenarioError(f"{where}: invalid project ({e})") from e


def _apply(session: Session, view: ProjectViewController, viewer: User, event: Mapping[str, Any]) -> None:
    bus = session.bus
    registry = session.registry
    match event.get("type"):
        case "projectChanged":
            bus.emit_project_changed(_parse_project(event.get("project"), "projectChanged"))
        case "projectDeleted":
            bus.emit_project_deleted(str(event["id"]))
        case "projectUserRemoved":
            bus.emit_project_user_removed(str(event["id"]))
        case "taskChanged":
            raw = event["task"]
            if not isinstance(raw, Mapping):
                raise ScenarioError("taskChanged: task must be an object")
            task = Task.from_dto(raw)
            if view.project.get_task(task.id) is None:
                raise ScenarioError(f"taskChanged: no task {task.id} in project")
            bus.emit_project_changed(view.project.with_task(task))
        case "selectTask":
            task = view.project.get_task(str(event["taskId"]))
            if task is None:
                raise ScenarioError(f"selectTask: no task {event['taskId']} in project")
            registry.select_task(task)
        case "removeUser":
            view.on_user_removed(str(event["userId"]))
        case "inviteUser":
            raw = event["user"]
            if isinstance(raw, Mapping):
                user = User(id=str(raw["id"]), name=raw.get("name") or "")
            else:
                user = User(id=str(raw))
            view.on_user_invited(user)
        case "leaveProject":
            view.leave_project()
        case "deleteProject":
            view.delete_project()
        case "assignTask":
            registry.assign(str(event["taskId"]), viewer)
        case "unassignTask":
            registry.unassign(str(event["taskId"]), viewer)
        case "setProcessPoints":
            registry.set_process_points(str(event["taskId"]), int(event["points"]))
        case other:
            raise ScenarioError(f"unknown event type {other!r} (expected one of {', '.join(EVENT_TYPES)})")


def run_scenario(
    data: Mapping[str, Any],
    *,
    viewer: str = "",
    config: Config | None = None,
    notifier: ConsoleNotifier | None = None,
) -> ReplayResult:
    """Open the scenario's project as *viewer* (or the scenario's own) and feed its events."""
    if not isinstance(data, Mapping):
        raise ScenarioError("scenario must be a JSON object")
    cfg = config or Config()
    viewer_id = viewer or str(data.get("viewer") or "")
    if not viewer_id:
        raise ScenarioError("no viewer: set 'viewer' in the scenario or pass --as")

    project = _parse_project(data.get("project"), "project")
    member = project.get_member(viewer_id)
    viewer_user = member if member is not None else User(id=viewer_id)

    events = data.get("events") or []
    if not isinstance(events, list):
        raise ScenarioError("'events' must be a list")

    transport = ReplayTransport(data.get("failures") or [])
    navigator = ConsoleNavigator()
    notifier = notifier or make_notifier(bool(cfg.desktop_notifications))
    session = Session(
        StaticAuthenticator(viewer_id),
        transport,
        navigator,
        notifier,
        config=cfg,
    )

    view = session.open_project(project)
    for i, event in enumerate(events):
        if not isinstance(event, Mapping):
            raise ScenarioError(f"event {i}: must be an object")
        log.debug(f"Event {i}: {event.get('type')}")
        try:
            _apply(session, view, viewer_user, event)
        except ScenarioError:
            raise
        except KeyError as e:
            raise ScenarioError(f"event {i} ({event.get('type')}): missing field {e}") from e
        except (TypeError, ValueError) as e:
            raise ScenarioError(f"event {i} ({event.get('type')}): {e}") from e

    final = view.project
    selected = session.registry.get_selected_task().id if session.registry.has_selection else None
    return ReplayResult(
        project_id=final.id,
        viewer=viewer_id,
        state=view.state,
        selected_task=selected,
        warnings=list(notifier.warnings),
        errors=list(notifier.errors),
        navigations=list(navigator.history),
        requests=list(transport.requests),
        events=len(events),
        task_count=len(final.tasks),
        tasks_done=sum(1 for t in final.tasks if t.is_done),
        tasks_assigned=sum(1 for t in final.tasks if t.is_assigned),
        done_points=final.done_process_points,
        total_points=final.total_process_points,
    )
