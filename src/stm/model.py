"""User, Task and Project value types shared by the registry, bus and views."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping

from stm.errors import ProcessPointsOutOfRange


@dataclass(frozen=True)
class User:
    id: str
    name: str = field(default="", compare=False)


@dataclass(frozen=True)
class Task:
    id: str
    name: str = ""
    process_points: int = 0
    max_process_points: int = 1
    geometry: Any = None
    # Weak handle: the user id only, the User itself lives in the membership list
    assigned_user: str | None = None
    assigned_user_name: str | None = None

    def __post_init__(self) -> None:
        if (
            self.process_points < 0
            or self.max_process_points < 1
            or self.process_points > self.max_process_points
        ):
            raise ProcessPointsOutOfRange(self.process_points, self.max_process_points)

    @property
    def is_assigned(self) -> bool:
        return bool(self.assigned_user)

    @property
    def is_done(self) -> bool:
        return self.process_points == self.max_process_points

    @classmethod
    def from_dto(cls, dto: Mapping[str, Any]) -> Task:
        """Build a Task from the transport shape (camelCase keys)."""
        assigned = (dto.get("assignedUser") or "").strip() or None
        return cls(
            id=str(dto["id"]),
            name=dto.get("name") or "",
            process_points=int(dto.get("processPoints", 0)),
            max_process_points=int(dto.get("maxProcessPoints", 1)),
            geometry=dto.get("geometry"),
            assigned_user=assigned,
            assigned_user_name=(dto.get("assignedUserName") or None) if assigned else None,
        )


def _user_from_dto(raw: Any) -> User:
    if isinstance(raw, Mapping):
        return User(id=str(raw.get("id") or raw.get("uid")), name=raw.get("name") or "")
    return User(id=str(raw))


@dataclass(frozen=True)
class Project:
    id: str
    owner: User
    name: str = ""
    members: frozenset[User] = frozenset()
    tasks: tuple[Task, ...] = ()

    # ── membership ───────────────────────────────────────────────

    @property
    def all_members(self) -> frozenset[User]:
        """Members including the owner, who is always implicitly one."""
        return self.members | {self.owner}

    @property
    def member_ids(self) -> frozenset[str]:
        return frozenset(u.id for u in self.all_members)

    def has_member(self, user_id: str) -> bool:
        return user_id in self.member_ids

    def get_member(self, user_id: str) -> User | None:
        for u in self.all_members:
            if u.id == user_id:
                return u
        return None

    # ── tasks ────────────────────────────────────────────────────

    @property
    def first_task(self) -> Task | None:
        return self.tasks[0] if self.tasks else None

    def get_task(self, task_id: str) -> Task | None:
        for t in self.tasks:
            if t.id == task_id:
                return t
        return None

    @property
    def total_process_points(self) -> int:
        return sum(t.max_process_points for t in self.tasks)

    @property
    def done_process_points(self) -> int:
        return sum(t.process_points for t in self.tasks)

    def with_task(self, task: Task) -> Project:
        """Return a copy with the same-id task replaced, order preserved."""
        tasks = tuple(task if t.id == task.id else t for t in self.tasks)
        return replace(self, tasks=tasks)

    @classmethod
    def from_dto(cls, dto: Mapping[str, Any]) -> Project:
        """Build a Project from the transport shape.

        ``owner`` may be a user mapping or a bare id; members are read from
        ``members`` or, as the server names them, ``users``.
        """
        owner = _user_from_dto(dto["owner"])
        raw_members = dto.get("members", dto.get("users")) or []
        return cls(
            id=str(dto["id"]),
            name=dto.get("name") or "",
            owner=owner,
            members=frozenset(_user_from_dto(m) for m in raw_members),
            tasks=tuple(Task.from_dto(t) for t in dto.get("tasks") or []),
        )
