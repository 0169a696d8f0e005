"""API routers module."""

from .sets import router as sets_router
from .cards import router as cards_router
from .reviews import router as reviews_router
from .practice import router as practice_router
from .seed import router as seed_router

__all__ = [
    "sets_router",
    "cards_router",
    "reviews_router",
    "practice_router",
    "seed_router",
]
