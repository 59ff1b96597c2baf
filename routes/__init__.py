"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.imports import router as imports_router
from routes.products import router as products_router
from routes.projects import router as projects_router

__all__ = [
    "imports_router",
    "products_router",
    "projects_router",
]
