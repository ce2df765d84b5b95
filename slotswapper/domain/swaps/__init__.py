"""Swaps domain - swap requests between users' slots"""

from .router import router

__all__ = ["router"]
