"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.mapping_suggestions import router as mapping_suggestions_router

__all__ = [
    "mapping_suggestions_router",
]
