"""
Task backend package.

TaskService (``task_api.service``) composes the validators, access scope,
query, search, batch and statistics engines; the FastAPI application that
exposes it lives in ``task_api.main``.
"""

__version__ = "0.1.0"
