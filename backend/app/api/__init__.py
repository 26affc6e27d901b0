"""
API module.
"""

from .routes import odds_router, picks_router

__all__ = [
    "odds_router",
    "picks_router",
]
