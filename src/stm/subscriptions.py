"""Scoped acquisition of bus subscriptions with release-all on exit."""

from __future__ import annotations

from stm.bus import Subscription


class SubscriptionScope:
    """Holds cancellation handles and releases them together.

    Once released, further :meth:`add` calls cancel the new handles
    immediately so nothing outlives the scope.
    """

    def __init__(self) -> None:
        self._subs: list[Subscription] = []
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def __len__(self) -> int:
        return len(self._subs)

    def add(self, *subs: Subscription) -> None:
        if self._released:
            for sub in subs:
                sub.cancel()
            return
        self._subs.extend(subs)

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        subs, self._subs = self._subs, []
        for sub in subs:
            sub.cancel()

    def __enter__(self) -> SubscriptionScope:
        return self

    def __exit__(self, *exc: object) -> None:
        self.release()
