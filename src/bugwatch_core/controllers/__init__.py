"""Repository-backed resource controllers."""
from .base import RepositoryController, Resource
from .organizations import OrganizationController
from .projects import ProjectController
from .tokens import TokenController

__all__ = [
    "RepositoryController",
    "Resource",
    "OrganizationController",
    "ProjectController",
    "TokenController",
]
