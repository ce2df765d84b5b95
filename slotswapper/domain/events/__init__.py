"""Events domain - a user's own calendar slots"""

from .router import router

__all__ = ["router"]
