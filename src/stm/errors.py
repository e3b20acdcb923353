"""Error taxonomy and failure-text classification for remote task intents."""

from __future__ import annotations


class StmError(Exception):
    """Base class for errors raised by the stm core."""


class NotSelected(StmError, LookupError):
    """The task registry was queried before any task was selected."""

    def __init__(self) -> None:
        super().__init__("no task has been selected in this session")


class RemoteFailure(StmError):
    """A transport call failed.

    Only ever travels inside a future; the core turns it into a single
    error notification and never re-raises it.
    """

    def __init__(self, operation: str, cause: BaseException | str | None = None) -> None:
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"{operation} failed{detail}")


class ProcessPointsOutOfRange(StmError, ValueError):
    """Process points outside ``[0, max_process_points]``."""

    def __init__(self, points: int, max_points: int) -> None:
        self.points = points
        self.max_points = max_points
        super().__init__(
            f"process points of task are out of range ({points} / {max_points})"
        )


ALREADY_ASSIGNED_PATTERNS: tuple[str, ...] = (
    "already has an assigned",
    "already assigned",
    "cannot overwrite",
)

PERMISSION_PATTERNS: tuple[str, ...] = (
    "not a member",
    "not the owner",
    "not assigned",
    "permission",
    "forbidden",
    "403",
    "unauthorized",
    "401",
)

OUT_OF_RANGE_PATTERNS: tuple[str, ...] = (
    "out of range",
)


def _contains_any(text: str, patterns: tuple[str, ...]) -> bool:
    lower = text.lower()
    return any(pattern in lower for pattern in patterns)


def failure_text(exc: BaseException | None) -> str:
    """Flatten a failure (and a wrapped cause) into one searchable string."""
    if exc is None:
        return ""
    parts = [str(exc)]
    cause = getattr(exc, "cause", None)
    if cause is not None and str(cause) not in parts[0]:
        parts.append(str(cause))
    return " ".join(parts)


def looks_like_already_assigned(text: str) -> bool:
    """Return ``True`` when the server refused because the task has an assignee."""
    if not text:
        return False
    return _contains_any(text, ALREADY_ASSIGNED_PATTERNS)


def looks_like_permission_denied(text: str) -> bool:
    """Return ``True`` when the failure is a membership/assignment check."""
    if not text:
        return False
    return _contains_any(text, PERMISSION_PATTERNS)


def looks_like_out_of_range(text: str) -> bool:
    if not text:
        return False
    return _contains_any(text, OUT_OF_RANGE_PATTERNS)
