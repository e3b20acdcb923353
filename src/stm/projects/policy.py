"""Membership and ownership decisions. Pure functions, no side effects."""

from __future__ import annotations

from stm.model import Project


def is_owner(project: Project, user_id: str) -> bool:
    return user_id == project.owner.id


def should_notify_on_deletion(project: Project, user_id: str) -> bool:
    """Everyone except the owner is warned when a project disappears."""
    return not is_owner(project, user_id)


def is_member(project: Project, user_id: str) -> bool:
    return project.has_member(user_id)


def can_delete(project: Project, user_id: str) -> bool:
    return is_owner(project, user_id)
