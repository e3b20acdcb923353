"""Per-session wiring: one event bus, one task registry, at most one open view."""

from __future__ import annotations

from concurrent.futures import Future
from typing import Callable

from stm import log
from stm.bus import ProjectEventBus
from stm.config import Config
from stm.errors import RemoteFailure
from stm.model import Project
from stm.ports import Authenticator, Navigator, Notifier, Transport
from stm.projects.controller import ProjectViewController
from stm.tasks.registry import TaskRegistry


class StaticAuthenticator:
    """Authenticator for a session whose user is known up front."""

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id

    def get_current_user_id(self) -> str:
        return self.user_id


class ConsoleNavigator:
    """Navigator that records destinations and logs them."""

    def __init__(self) -> None:
        self.history: list[str] = []

    @property
    def current(self) -> str | None:
        return self.history[-1] if self.history else None

    def navigate_to(self, destination: str) -> None:
        self.history.append(destination)
        log.info(f"Navigate to {destination}")


def _run_now(fn: Callable[[], None]) -> None:
    fn()


class Session:
    """Owns the session-scoped bus and registry and hands them to views.

    Views, the bus and the registry are single-threaded. Transport futures
    may complete on another thread, so work triggered by their completion is
    handed to *dispatch*, which must run it on the session's own thread
    (for example an event loop's ``call_soon_threadsafe``). The default
    runs it immediately, which is only right when the transport completes
    its futures on the session thread.

    Usage::

        session = Session(auth, transport, navigator, notifier)
        view = session.open_project(project)
        session.bus.emit_project_changed(updated)   # view.project is updated
        session.close()
    """

    def __init__(
        self,
        authenticator: Authenticator,
        transport: Transport,
        navigator: Navigator,
        notifier: Notifier,
        *,
        config: Config | None = None,
        bus: ProjectEventBus | None = None,
        dispatch: Callable[[Callable[[], None]], None] | None = None,
    ) -> None:
        self.cfg = config or Config()
        self.authenticator = authenticator
        self.transport = transport
        self.navigator = navigator
        self.notifier = notifier
        self.bus = bus or ProjectEventBus()
        self.registry = TaskRegistry(transport, notifier)
        self._active: ProjectViewController | None = None
        self._dispatch = dispatch or _run_now

    @property
    def active_view(self) -> ProjectViewController | None:
        return self._active

    def open_project(self, project: Project) -> ProjectViewController:
        """Close the current view (if any) and open *project*."""
        if self._active is not None:
            self._active.close()
        view = ProjectViewController(
            project,
            bus=self.bus,
            registry=self.registry,
            authenticator=self.authenticator,
            transport=self.transport,
            navigator=self.navigator,
            notifier=self.notifier,
            config=self.cfg,
        )
        self._active = view
        view.open()
        log.debug(f"Opened project {project.id} as {self.authenticator.get_current_user_id()}")
        return view

    def open_project_by_id(self, project_id: str) -> Future[ProjectViewController]:
        """Fetch *project_id* through the transport, then open it via *dispatch*.

        On failure the user is told, sent back to the manager route, and the
        returned future carries the :class:`RemoteFailure`.        """
        result: Future[ProjectViewController] = Future()

        def _loaded(f: Future) -> None:
            if f.cancelled():
                failure = RemoteFailure("load project", "cancelled")
            elif f.exception() is not None:
                failure = RemoteFailure("load project", f.exception())
            else:
                failure = None
            if failure is not None:
                log.error(str(failure))
                self.notifier.add_error(self.cfg.load_project_error)
                self.navigator.navigate_to(self.cfg.manager_route)
                result.set_exception(failure)
                return
            try:
                result.set_result(self.open_project(f.result()))
            except Exception as err:
                log.error(f"Opening project {project_id} failed: {err!r}")
                result.set_exception(err)

        self.transport.get_project(project_id).add_done_callback(
            lambda f: self._dispatch(lambda: _loaded(f))
        )
        return result

    def close(self) -> None:
        if self._active is not None:
            self._active.close()
            self._active = None
        self.registry.clear()
