"""
API route modules.
"""

from .odds_routes import router as odds_router
from .picks_routes import router as picks_router

__all__ = ["odds_router", "picks_router"]
