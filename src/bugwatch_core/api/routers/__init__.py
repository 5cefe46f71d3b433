"""API routers for Bugwatch Core."""

from . import organizations, projects, tokens

__all__ = ["organizations", "projects", "tokens"]
