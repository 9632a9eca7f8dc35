"""
API routers.
"""

from immo_api.routers.properties import router as properties_router

__all__ = ["properties_router"]
