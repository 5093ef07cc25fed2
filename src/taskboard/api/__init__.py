"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Auth is applied at the include_router level using FastAPI's
dependencies parameter, so every task-list and to-do route requires an
identity before its handler runs. Handlers that need the user object
also declare Depends(get_current_user); FastAPI resolves it once per
request. Health and auth routers are open.
"""

from fastapi import APIRouter, Depends

from taskboard.api.auth import router as auth_router
from taskboard.api.health import router as health_router
from taskboard.api.task_lists import router as task_lists_router
from taskboard.api.todos import router as todos_router
from taskboard.auth.dependencies import get_current_user

# All protected routers require authentication
_auth = [Depends(get_current_user)]

api_router = APIRouter(prefix="/api/v1")

# Open routes, no auth required
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])

# Protected routes, require a valid token
api_router.include_router(task_lists_router, tags=["task-lists"], dependencies=_auth)
api_router.include_router(todos_router, tags=["todos"], dependencies=_auth)
