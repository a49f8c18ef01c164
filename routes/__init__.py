"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.products import router as products_router
from routes.sheets import router as sheets_router, viewer_router as shared_sheets_router

__all__ = [
    "products_router",
    "sheets_router",
    "shared_sheets_router",
]
