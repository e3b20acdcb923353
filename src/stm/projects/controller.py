"""State machine for one opened project view.

``loading -> active -> {evicted, closed}``. While active, the controller
follows the session's project event bus; leaving ``active`` releases all
of its subscriptions at once, after which every handler is a no-op.
"""

from __future__ import annotations

from enum import Enum

from stm import log
from stm.bus import ProjectEventBus
from stm.config import Config
from stm.model import Project, User
from stm.ports import Authenticator, Navigator, Notifier, Transport, on_failure
from stm.projects import policy
from stm.subscriptions import SubscriptionScope
from stm.tasks.registry import TaskRegistry


class ViewState(str, Enum):
    LOADING = "loading"
    ACTIVE = "active"
    EVICTED = "evicted"
    CLOSED = "closed"


class ProjectViewController:
    """Keeps the local copy of one project in line with bus events.

    Usage::

        view = ProjectViewController(project, bus=bus, registry=registry, ...)
        view.open()                  # loading -> active, first task selected
        bus.emit_project_deleted(project.id)
        view.state                   # ViewState.EVICTED, navigated to manager
    """

    def __init__(
        self,
        project: Project,
        *,
        bus: ProjectEventBus,
        registry: TaskRegistry,
        authenticator: Authenticator,
        transport: Transport,
        navigator: Navigator,
        notifier: Notifier,
        config: Config | None = None,
    ) -> None:
        self._project = project
        self._bus = bus
        self._registry = registry
        self._auth = authenticator
        self._transport = transport
        self._navigator = navigator
        self._notifier = notifier
        self.cfg = config or Config()
        self._state = ViewState.LOADING
        self._scope = SubscriptionScope()

    # ── state queries ────────────────────────────────────────────

    @property
    def project(self) -> Project:
        return self._project

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state == ViewState.ACTIVE

    def is_owner(self) -> bool:
        return policy.is_owner(self._project, self._auth.get_current_user_id())

    # ── transitions ──────────────────────────────────────────────

    def _set_state(self, new: ViewState, reason: str = "") -> None:
        old = self._state
        self._state = new
        log.transition(self._project.id, old.value, new.value, reason)

    def open(self) -> None:
        if self._state != ViewState.LOADING:
            raise RuntimeError(
                f"Project view {self._project.id} cannot open from state {self._state.value}"
            )
        self._scope.add(
            self._bus.project_changed.subscribe(self._on_project_changed),
            self._bus.project_deleted.subscribe(self._on_project_deleted),
            self._bus.project_user_removed.subscribe(self._on_project_user_removed),
        )
        self._set_state(ViewState.ACTIVE)

        first = self._project.first_task
        if first is None:
            log.debug(f"Project {self._project.id} has no tasks; nothing selected")
            self._registry.clear()
        else:
            self._registry.select_task(first)

    def close(self) -> None:
        if self._state in (ViewState.EVICTED, ViewState.CLOSED):
            return
        self._scope.release()
        self._set_state(ViewState.CLOSED)
        self._release_selection()

    def _evict(self, reason: str, warning: str | None) -> None:
        self._scope.release()
        self._set_state(ViewState.EVICTED, reason)
        if warning:
            try:
                self._notifier.add_warning(warning)
            except Exception as exc:
                log.error(f"Notifier failed for project {self._project.id}: {exc!r}")
        self._release_selection()
        self._navigator.navigate_to(self.cfg.manager_route)

    def _release_selection(self) -> None:
        """Drop the registry's selection if it points into this project."""
        if not self._registry.has_selection:
            return
        selected = self._registry.get_selected_task()
        if self._project.get_task(selected.id) is not None:
            self._registry.clear()

    # ── bus handlers ─────────────────────────────────────────────

    def _on_project_changed(self, project: Project) -> None:
        if not self.is_active:
            return
        if project.id != self._project.id:
            log.dropped("projectChanged", project.id, self._project.id)
            return
        self._project = project
        log.debug(f"Project {project.id} replaced ({len(project.tasks)} tasks)")
        self._registry.refresh_from(project)

    def _on_project_deleted(self, project_id: str) -> None:
        if not self.is_active:
            return
        if project_id != self._project.id:
            log.dropped("projectDeleted", project_id, self._project.id)
            return
        user_id = self._auth.get_current_user_id()
        warning = None
        if policy.should_notify_on_deletion(self._project, user_id):
            warning = self.cfg.project_removed_message
        self._evict("project deleted", warning)

    def _on_project_user_removed(self, project_id: str) -> None:
        if not self.is_active:
            return
        if project_id != self._project.id:
            log.dropped("projectUserRemoved", project_id, self._project.id)
            return
        # The stream only fires for the viewer's own removal.
        self._evict("removed from project", self.cfg.removed_from_project_message)

    # ── remote intents ───────────────────────────────────────────

    def _can_request(self, action: str) -> bool:
        if self.is_active:
            return True
        log.warn(f"Ignoring {action} on project {self._project.id} ({self._state.value})")
        return False

    def on_user_removed(self, user_id: str) -> None:
        if not self._can_request("remove user"):
            return
        on_failure(
            self._transport.remove_user(self._project.id, user_id),
            "remove user",
            lambda _f: self._notifier.add_error(self.cfg.remove_user_error),
        )

    def on_user_invited(self, user: User) -> None:
        if not self._can_request("invite user"):
            return
        if policy.is_member(self._project, user.id):
            log.debug(f"User {user.id} already in project {self._project.id}; not inviting")
            self._notifier.add_warning(self.cfg.already_member_warning(user.name or user.id))
            return
        message = self.cfg.invite_user_error(user.name or user.id)
        on_failure(
            self._transport.invite_user(self._project.id, user.id),
            "invite user",
            lambda _f: self._notifier.add_error(message),
        )

    def leave_project(self) -> None:
        if not self._can_request("leave project"):
            return
        on_failure(
            self._transport.leave_project(self._project.id),
            "leave project",
            lambda _f: self._notifier.add_error(self.cfg.leave_project_error),
        )

    def delete_project(self) -> None:
        if not self._can_request("delete project"):
            return
        if not policy.can_delete(self._project, self._auth.get_current_user_id()):
            log.warn(f"Refusing to delete project {self._project.id}: not the owner")
            self._notifier.add_warning(self.cfg.delete_not_owner_warning)
            return
        on_failure(
            self._transport.delete_project(self._project.id),
            "delete project",
            lambda _f: self._notifier.add_error(self.cfg.delete_project_error),
        )
