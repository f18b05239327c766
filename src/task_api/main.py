import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from .exceptions import (
    TaskServiceError,
    http_exception_handler,
    request_validation_error_handler,
    task_service_error_handler,
    unexpected_exception_handler,
)
from .routers import admin as admin_router
from .routers import stats as stats_router
from .routers import tasks as tasks_router
from .settings import get_settings

_settings = get_settings()

logging.basicConfig(
    level=_settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "tasks",
        "description": "Task CRUD, filtering, search and batch operations scoped to the caller.",
    },
    {"name": "statistics", "description": "Task counts by status, priority and overdue state."},
    {"name": "admin", "description": "Unrestricted task listing and statistics for admins."},
]

app = FastAPI(
    title="Task Backend",
    description="Task management API with per-user visibility, search, batch operations and statistics.",
    version="0.1.0",
    openapi_tags=openapi_tags,
)

# Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
allow_all = (_settings.cors_allow_origins == ["*"]) or (len(_settings.cors_allow_origins) == 0)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all else _settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(RequestValidationError, request_validation_error_handler)
app.add_exception_handler(TaskServiceError, task_service_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, unexpected_exception_handler)


# PUBLIC_INTERFACE
@app.get("/", summary="Health Check", tags=["health"])
def health_check():
    """
    Health check endpoint.

    Returns:
        A JSON object indicating service health.
    """
    return {"message": "Healthy", "backend": _settings.persistence_backend}


# Include routers
app.include_router(tasks_router.router)
app.include_router(stats_router.router)
app.include_router(admin_router.router)

logger.info("Task backend configured with %s persistence", _settings.persistence_backend)
