"""Route modules."""

from .articles import router as articles_router

__all__ = ["articles_router"]
