"""Session-scoped holder of the selected task plus task intents.

The registry never edits a Task itself. ``assign``, ``unassign`` and
``set_process_points`` only ask the transport; the confirmed task comes
back inside the next ``projectChanged`` snapshot and reaches the registry
through :meth:`TaskRegistry.refresh_from`.
"""

from __future__ import annotations

from typing import Callable

from stm import log
from stm.bus import Channel, Subscription
from stm.errors import (
    NotSelected,
    RemoteFailure,
    failure_text,
    looks_like_already_assigned,
    looks_like_out_of_range,
    looks_like_permission_denied,
)
from stm.model import Project, Task, User
from stm.ports import Notifier, Transport, on_failure


class TaskRegistry:
    """Holds the selected task for one session.

    Usage::

        registry = TaskRegistry(transport, notifier)
        sub = registry.on_selection_changed(view.show)
        registry.select_task(project.tasks[0])   # view.show(task) runs now
        registry.get_selected_task()             # -> project.tasks[0]
        sub.cancel()
    """

    def __init__(self, transport: Transport, notifier: Notifier) -> None:
        self._transport = transport
        self._notifier = notifier
        self._selected: Task | None = None
        self.selection_changed: Channel[Task] = Channel("selectedTaskChanged")

    # ── selection ────────────────────────────────────────────────

    @property
    def has_selection(self) -> bool:
        return self._selected is not None

    def select_task(self, task: Task) -> None:
        self._selected = task
        log.debug(f"Selected task {task.id}")
        self.selection_changed.publish(task)

    def get_selected_task(self) -> Task:
        if self._selected is None:
            raise NotSelected()
        return self._selected

    def on_selection_changed(self, callback: Callable[[Task], None]) -> Subscription:
        """Call *callback* for every later selection. No history is replayed."""
        return self.selection_changed.subscribe(callback)

    def clear(self) -> None:
        self._selected = None

    def refresh_from(self, project: Project) -> None:
        """Re-select the selected task if *project* carries a newer version of it."""
        if self._selected is None:
            return
        updated = project.get_task(self._selected.id)
        if updated is None:
            log.debug(f"Selected task {self._selected.id} not in project {project.id}")
            return
        if updated == self._selected:
            return
        self.select_task(updated)

    # ── intents ──────────────────────────────────────────────────

    def assign(self, task_id: str, user: User) -> None:
        who = user.name or user.id

        def _failed(failure: RemoteFailure) -> None:
            text = failure_text(failure)
            if looks_like_already_assigned(text):
                self._notifier.add_error(f"Task {task_id} is already assigned")
            elif looks_like_permission_denied(text):
                self._notifier.add_error(f"You are not allowed to change task {task_id}")
            else:
                self._notifier.add_error(f"Could not assign user '{who}' to task {task_id}")

        log.debug(f"Requesting assignment of {user.id} to task {task_id}")
        on_failure(self._transport.assign_task(task_id, user.id), "assign task", _failed)

    def unassign(self, task_id: str, user: User) -> None:
        who = user.name or user.id

        def _failed(failure: RemoteFailure) -> None:
            if looks_like_permission_denied(failure_text(failure)):
                self._notifier.add_error(f"You are not allowed to change task {task_id}")
            else:
                self._notifier.add_error(f"Could not unassign user '{who}' from task {task_id}")

        log.debug(f"Requesting unassignment of {user.id} from task {task_id}")
        on_failure(self._transport.unassign_task(task_id, user.id), "unassign task", _failed)

    def set_process_points(self, task_id: str, points: int) -> None:
        known = self._selected if self._selected and self._selected.id == task_id else None
        if points < 0 or (known is not None and points > known.max_process_points):
            max_points = known.max_process_points if known else "?"
            self._notifier.add_error(f"Process points out of range ({points} / {max_points})")
            return

        def _failed(failure: RemoteFailure) -> None:
            if looks_like_out_of_range(failure_text(failure)):
                self._notifier.add_error(f"Process points out of range ({points})")
            elif looks_like_permission_denied(failure_text(failure)):
                self._notifier.add_error(f"You are not allowed to change task {task_id}")
            else:
                self._notifier.add_error(f"Could not set process points of task {task_id}")

        log.debug(f"Requesting process points {points} on task {task_id}")
        on_failure(
            self._transport.set_process_points(task_id, points),
            "set process points",
            _failed,
        )
