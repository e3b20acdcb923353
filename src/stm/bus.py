"""Synchronous publish/subscribe channels and the per-session project event bus."""

from __future__ import annotations

import itertools
from typing import Callable, Generic, TypeVar

from stm import log
from stm.model import Project

T = TypeVar("T")


class Subscription:
    """Cancellation handle returned by :meth:`Channel.subscribe`."""

    def __init__(self, channel: Channel, handle: int) -> None:
        self._channel = channel
        self._handle = handle
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        self._channel._remove(self._handle)


class Channel(Generic[T]):
    """Multicast relay: ``{handle: callback}``, delivered in subscription order.

    Usage::

        ch = Channel("project_deleted")
        sub = ch.subscribe(print)
        ch.publish("p1")     # print("p1") runs before publish returns
        sub.cancel()
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._subscribers: dict[int, Callable[[T], None]] = {}
        self._ids = itertools.count()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: Callable[[T], None]) -> Subscription:
        handle = next(self._ids)
        self._subscribers[handle] = callback
        return Subscription(self, handle)

    def _remove(self, handle: int) -> None:
        self._subscribers.pop(handle, None)

    def publish(self, payload: T) -> int:
        """Deliver *payload* to every subscriber; return how many received it.

        A subscriber that raises is logged and skipped so the rest of the
        fan-out still happens. Subscribers cancelled by an earlier callback
        during this publish are not called.
        """
        delivered = 0
        for handle, callback in list(self._subscribers.items()):
            if handle not in self._subscribers:
                continue
            try:
                callback(payload)
            except Exception as exc:
                log.error(f"{self.name} subscriber failed: {exc!r}")
                continue
            delivered += 1
        return delivered


class ProjectEventBus:
    """Three independent hot streams of project-level events.

    The bus stores nothing: it only relays already-built payloads to
    whoever is subscribed at the moment of emission.
    """

    def __init__(self) -> None:
        self.project_changed: Channel[Project] = Channel("projectChanged")
        self.project_deleted: Channel[str] = Channel("projectDeleted")
        self.project_user_removed: Channel[str] = Channel("projectUserRemoved")

    def emit_project_changed(self, project: Project) -> int:
        log.debug(f"projectChanged: {project.id}")
        return self.project_changed.publish(project)

    def emit_project_deleted(self, project_id: str) -> int:
        log.debug(f"projectDeleted: {project_id}")
        return self.project_deleted.publish(project_id)

    def emit_project_user_removed(self, project_id: str) -> int:
        log.debug(f"projectUserRemoved: {project_id}")
        return self.project_user_removed.publish(project_id)
