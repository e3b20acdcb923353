"""Shared fixtures for stm tests.

Collaborators:
- FakeTransport records every request; failures are configured per
  operation, and ``defer=True`` keeps futures pending for manual completion.
- ConsoleNotifier / ConsoleNavigator from the package double as recorders.
"""

from __future__ import annotations

from concurrent.futures import Future
from typing import Any

import pytest

from stm.bus import ProjectEventBus
from stm.errors import RemoteFailure
from stm.model import Project, Task, User
from stm.notify import ConsoleNotifier
from stm.projects.controller import ProjectViewController
from stm.session import ConsoleNavigator, StaticAuthenticator
from stm.tasks.registry import TaskRegistry


class FakeTransport:
    def __init__(self, fail: dict[str, str] | None = None, defer: bool = False) -> None:
        self.fail = dict(fail or {})
        self.defer = defer
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.futures: list[Future] = []
        self.projects: dict[str, Project] = {}

    def _call(self, op: str, *args: Any, result: Any = None) -> Future:
        self.calls.append((op, args))
        f: Future = Future()
        self.futures.append(f)
        if self.defer:
            return f
        if op in self.fail:
            f.set_exception(RemoteFailure(op, self.fail[op]))
        else:
            f.set_result(result)
        return f

    def ops(self) -> list[str]:
        return [op for op, _ in self.calls]

    def remove_user(self, project_id, user_id):
        return self._call("remove_user", project_id, user_id)

    def invite_user(self, project_id, user_id):
        return self._call("invite_user", project_id, user_id)

    def leave_project(self, project_id):
        return self._call("leave_project", project_id)

    def delete_project(self, project_id):
        return self._call("delete_project", project_id)

    def assign_task(self, task_id, user_id):
        return self._call("assign_task", task_id, user_id)

    def unassign_task(self, task_id, user_id):
        return self._call("unassign_task", task_id, user_id)

    def set_process_points(self, task_id, points):
        return self._call("set_process_points", task_id, points)

    def get_project(self, project_id):
        if project_id not in self.projects and "get_project" not in self.fail:
            self.fail["get_project"] = f"project {project_id} not found"
        return self._call("get_project", project_id, result=self.projects.get(project_id))


U1 = User("u1", "Maria")
U2 = User("u2", "Peter")
U3 = User("u3", "Clara")


def _make_task(
    id: str,
    name: str = "",
    process_points: int = 0,
    max_process_points: int = 10,
    assigned_user: str | None = None,
) -> Task:
    return Task(
        id=id,
        name=name or f"Task {id}",
        process_points=process_points,
        max_process_points=max_process_points,
        geometry={"type": "Feature", "id": id},
        assigned_user=assigned_user,
    )


def _make_project(
    id: str = "p1",
    owner: User = U1,
    members: list[User] | None = None,
    tasks: list[Task] | None = None,
    name: str = "",
) -> Project:
    return Project(
        id=id,
        name=name or f"Project {id}",
        owner=owner,
        members=frozenset(members if members is not None else [U1, U2]),
        tasks=tuple(tasks if tasks is not None else [_make_task("t1"), _make_task("t2")]),
    )


@pytest.fixture
def make_task():
    """Factory fixture that creates Task instances."""
    return _make_task


@pytest.fixture
def make_project():
    """Factory fixture that creates Project instances (owner u1, tasks t1, t2)."""
    return _make_project


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def deferred_transport() -> FakeTransport:
    """Transport whose futures stay pending until the test completes them."""
    return FakeTransport(defer=True)


@pytest.fixture
def notifier() -> ConsoleNotifier:
    return ConsoleNotifier()


@pytest.fixture
def navigator() -> ConsoleNavigator:
    return ConsoleNavigator()


@pytest.fixture
def bus() -> ProjectEventBus:
    return ProjectEventBus()


@pytest.fixture
def registry(transport, notifier) -> TaskRegistry:
    return TaskRegistry(transport, notifier)


@pytest.fixture
def make_view(bus, registry, transport, navigator, notifier):
    """Build an opened ProjectViewController for *project* as *viewer*."""

    def _make(project: Project, viewer: str = "u1", open: bool = True) -> ProjectViewController:
        view = ProjectViewController(
            project,
            bus=bus,
            registry=registry,
            authenticator=StaticAuthenticator(viewer),
            transport=transport,
            navigator=navigator,
            notifier=notifier,
        )
        if open:
            view.open()
        return view

    return _make
