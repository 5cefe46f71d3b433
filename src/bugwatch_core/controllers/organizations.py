"""Organization controller."""
import logging
from typing import Any, Optional

from .. import models, schemas
from ..actor import ActorContext
from ..permissions import OrganizationEntityPermissions
from ..repositories import OrganizationMemberRepository, Repository
from ..work_items import RemoveOrganizationWorkItem, WorkItemQueue
from .base import RepositoryController, Resource

logger = logging.getLogger("bugwatch-core.organizations")


class OrganizationController(RepositoryController):
    """
    Organizations are the tenant boundary, so they are never organization-scoped
    themselves. Any user can create one and becomes its owner; updating or
    deleting one requires membership.
    """

    resource = Resource(
        name="organization",
        model=models.Organization,
        new=schemas.OrganizationCreate,
        update=schemas.OrganizationUpdate,
        view=schemas.OrganizationResponse,
        is_organization=True,
    )

    def __init__(
        self,
        repository: Repository,
        actor: ActorContext,
        *,
        members: OrganizationMemberRepository,
        work_queue: WorkItemQueue,
        permissions: Optional[OrganizationEntityPermissions] = None,
        **kwargs: Any,
    ):
        super().__init__(repository, actor, permissions=permissions or OrganizationEntityPermissions(actor), **kwargs)
        self.members = members
        self.work_queue = work_queue

    async def can_access_model(self, model: models.Organization) -> bool:
        return await self.permissions.can_access_organization(model.id)

    async def after_add(self, value: models.Organization) -> models.Organization:
        await self.members.add_member(value.id, self.actor.user_id, models.MemberRole.OWNER)
        logger.info(f"Added user {self.actor.user_id} as owner of organization {value.id}")
        return value

    async def after_result_map(self, views: list[schemas.OrganizationResponse]) -> None:
        roles = await self.members.get_user_roles(self.actor.user_id)
        for view in views:
            view.is_owner = roles.get(view.id) == models.MemberRole.OWNER

    async def delete_models(self, values: list[models.Organization]) -> list[str]:
        workers = []
        for organization in values:
            work_item_id = await self.work_queue.enqueue(
                RemoveOrganizationWorkItem(organization_id=organization.id, user_id=self.actor.user_id)
            )
            workers.append(work_item_id)
        return workers
