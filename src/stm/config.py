"""Configuration defaults, env vars, and runtime options for the stm core."""

from __future__ import annotations

import os
from dataclasses import dataclass


VERSION = "1.0.0"

DEFAULT_MANAGER_ROUTE = "/manager"

_TRUTHY = ("1", "true", "yes", "on")


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in _TRUTHY


@dataclass
class Config:
    """Runtime configuration shared by a session and its project views."""

    # Routing
    manager_route: str = ""

    # User-visible messages
    removed_from_project_message: str = "You have been removed from this project"
    project_removed_message: str = "This project has been removed"
    remove_user_error: str = "Could not remove user"
    invite_user_error_template: str = "Could not invite user '{name}'"
    already_member_template: str = "'{name}' is already a member of this project"
    leave_project_error: str = "Could not leave project"
    delete_project_error: str = "Could not delete project"
    delete_not_owner_warning: str = "Only the owner can delete this project"
    load_project_error: str = "Could not load project"

    # Notifications
    desktop_notifications: bool | None = None

    def __post_init__(self) -> None:
        if not self.manager_route:
            self.manager_route = (
                os.environ.get("STM_MANAGER_ROUTE") or DEFAULT_MANAGER_ROUTE
            )
        if self.desktop_notifications is None:
            self.desktop_notifications = _env_flag("STM_DESKTOP_NOTIFY")

    def invite_user_error(self, name: str) -> str:
        return self.invite_user_error_template.format(name=name)

    def already_member_warning(self, name: str) -> str:
        return self.already_member_template.format(name=name)
