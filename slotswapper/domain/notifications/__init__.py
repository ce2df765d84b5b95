"""Notifications domain - in-app notifications produced by swap transitions"""

from .router import router

__all__ = ["router"]
