"""Visibility rules: who may see and act on which task."""
from __future__ import annotations

from .filters import MATCH_ALL, Filter
from .models import TaskRecord


# PUBLIC_INTERFACE
def resolve_scope(caller_id: str, is_admin: bool) -> Filter:
    """
    Return the filter restricting the tasks a caller may see.

    Admins see everything. Everyone else sees the tasks they created or that
    are assigned to them. Every list, search and statistics query ANDs this in.
    """
    if is_admin:
        return dict(MATCH_ALL)
    return {"$or": [{"created_by": caller_id}, {"assigned_to": caller_id}]}


def can_view(task: TaskRecord, caller_id: str, is_admin: bool) -> bool:
    return is_admin or caller_id in (task.created_by, task.assigned_to)


def can_update(task: TaskRecord, caller_id: str) -> bool:
    return caller_id in (task.created_by, task.assigned_to)


def can_delete(task: TaskRecord, caller_id: str) -> bool:
    return caller_id == task.created_by
