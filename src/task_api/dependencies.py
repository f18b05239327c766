from __future__ import annotations

from functools import lru_cache

from .clock import Clock, SystemClock
from .repositories import get_repository
from .schemas import UserProfile, UserRole
from .service import TaskService
from .settings import get_settings
from .users import UserDirectory


@lru_cache(maxsize=1)
def get_clock() -> Clock:
    return SystemClock()


@lru_cache(maxsize=1)
def get_user_directory() -> UserDirectory:
    """
    Build the user directory and mirror a profile for every identity that
    can authenticate, so those users can be assigned tasks.
    """
    settings = get_settings()
    directory = UserDirectory(get_repository("users"))
    for user_id, is_admin in settings.auth_tokens.values():
        if not directory.exists(user_id):
            directory.register(
                UserProfile(
                    id=user_id,
                    role=UserRole.ADMIN if is_admin else UserRole.USER,
                    timezone=settings.default_timezone,
                )
            )
    return directory


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_task_service() -> TaskService:
    """Return the process-wide TaskService wired from settings."""
    settings = get_settings()
    return TaskService(
        tasks=get_repository("tasks"),
        users=get_user_directory(),
        clock=get_clock(),
        default_timezone=settings.default_timezone,
        batch_max_workers=settings.batch_max_workers,
    )
