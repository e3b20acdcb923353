"""Contracts for the collaborators the core talks to.

Transport calls return :class:`concurrent.futures.Future` objects; the
core only attaches callbacks and never waits on them.
"""

from __future__ import annotations

from concurrent.futures import Future
from typing import Any, Callable, Protocol

from stm import log
from stm.errors import RemoteFailure
from stm.model import Project, Task


class Authenticator(Protocol):
    def get_current_user_id(self) -> str: ...


class Navigator(Protocol):
    def navigate_to(self, destination: str) -> None: ...


class Notifier(Protocol):
    def add_warning(self, message: str) -> None: ...

    def add_error(self, message: str) -> None: ...


class Transport(Protocol):
    """Remote service. Success of a mutating call is later confirmed by a
    ``projectChanged`` event on the bus, never by the returned value."""

    def remove_user(self, project_id: str, user_id: str) -> Future[Any]: ...

    def invite_user(self, project_id: str, user_id: str) -> Future[Any]: ...

    def leave_project(self, project_id: str) -> Future[Any]: ...

    def delete_project(self, project_id: str) -> Future[Any]: ...

    def assign_task(self, task_id: str, user_id: str) -> Future[Task]: ...

    def unassign_task(self, task_id: str, user_id: str) -> Future[Task]: ...

    def set_process_points(self, task_id: str, points: int) -> Future[Task]: ...

    def get_project(self, project_id: str) -> Future[Project]: ...


def on_failure(
    future: Future,
    operation: str,
    callback: Callable[[RemoteFailure], None],
) -> None:
    """Invoke *callback* once with a :class:`RemoteFailure` if *future* fails.

    Cancelled futures count as failures. Errors raised by *callback* are
    logged, never propagated into the transport's completion thread.
    """

    def _done(f: Future) -> None:
        if f.cancelled():
            failure = RemoteFailure(operation, "cancelled")
        else:
            exc = f.exception()
            if exc is None:
                log.debug(f"{operation} succeeded")
                return
            failure = exc if isinstance(exc, RemoteFailure) else RemoteFailure(operation, exc)
        log.error(str(failure))
        try:
            callback(failure)
        except Exception as exc:
            log.error(f"failure handler for {operation} raised: {exc!r}")

    future.add_done_callback(_done)


def submit_failed(operation: str, cause: BaseException | str) -> Future:
    """Return an already-failed future, for transports that reject up front."""
    f: Future = Future()
    f.set_exception(RemoteFailure(operation, cause))
    return f
