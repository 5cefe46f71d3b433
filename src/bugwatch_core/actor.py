"""The authenticated caller and organization access checks."""
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional


@dataclass(frozen=True)
class ActorContext:
    """
    Identity of the caller for one request.

    organization_ids is ordered; the first entry is the caller's default
    organization.
    """

    user_id: str
    email_address: str
    organization_ids: tuple[str, ...] = field(default_factory=tuple)
    is_global_admin: bool = False

    @property
    def default_organization_id(self) -> Optional[str]:
        return self.organization_ids[0] if self.organization_ids else None

    def is_in_organization(self, organization_id: Optional[str]) -> bool:
        if not organization_id:
            return False
        return organization_id in self.organization_ids


OrganizationAccessCheck = Callable[[ActorContext, Optional[str]], Awaitable[bool]]


async def can_access_organization(actor: ActorContext, organization_id: Optional[str]) -> bool:
    """Members of an organization and global admins can access it."""
    if not organization_id:
        return False
    return actor.is_global_admin or actor.is_in_organization(organization_id)
