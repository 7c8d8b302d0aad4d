"""
HTTP routers for the LearnPortal API.
"""

from .assignments import router as assignments_router
from .attempts import router as attempts_router
from .catalog import router as catalog_router
from .practice import router as practice_router
from .questions import router as questions_router
from .stats import router as stats_router

__all__ = [
    'assignments_router',
    'attempts_router',
    'catalog_router',
    'practice_router',
    'questions_router',
    'stats_router',
]
