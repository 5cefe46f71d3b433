"""Token controller."""
from typing import Any, Iterable

from .. import models, schemas
from ..actor import ActorContext
from ..permissions import PermissionResult
from ..repositories import Repository
from ..results import ActionResult
from .base import RepositoryController, Resource


class TokenController(RepositoryController):
    """
    Api keys. A token either belongs to a project in the same organization
    (client key) or to a user (personal access token). Deletes are immediate.
    """

    resource = Resource(
        name="token",
        model=models.Token,
        new=schemas.TokenCreate,
        update=schemas.TokenUpdate,
        view=schemas.TokenResponse,
    )

    def __init__(self, repository: Repository, actor: ActorContext, *, projects: Repository, **kwargs: Any):
        super().__init__(repository, actor, **kwargs)
        self.projects = projects

    async def can_add(self, value: models.Token) -> PermissionResult:
        permission = await super().can_add(value)
        if not permission.allowed:
            return permission

        if value.project_id:
            project = await self.projects.get_by_id(value.project_id)
            if project is None or project.organization_id != value.organization_id:
                return PermissionResult.deny_with_message("Invalid project id specified.")

        if value.user_id and value.user_id != self.actor.user_id and not self.actor.is_global_admin:
            return PermissionResult.deny_with_message("Invalid user id specified.")

        return PermissionResult.allow()

    async def add_model(self, value: models.Token) -> models.Token:
        if not value.id:
            value.id = models.new_token()
        return await super().add_model(value)

    async def disable_many(self, ids: Iterable[str]) -> ActionResult:
        return await self.update_models(ids, lambda token: setattr(token, "is_disabled", True))

    async def enable_many(self, ids: Iterable[str]) -> ActionResult:
        return await self.update_models(ids, lambda token: setattr(token, "is_disabled", False))
