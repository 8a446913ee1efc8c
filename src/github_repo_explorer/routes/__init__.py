"""FastAPI route modules."""

from .files import router as files_router
from .view import router as view_router

__all__ = ["files_router", "view_router"]
