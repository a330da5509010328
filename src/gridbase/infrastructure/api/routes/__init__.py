"""API Routes for GridBase."""

from gridbase.infrastructure.api.routes.databases_router import router as databases_router
from gridbase.infrastructure.api.routes.entries_router import router as entries_router

__all__ = [
    "databases_router",
    "entries_router",
]
