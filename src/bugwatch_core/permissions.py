"""Organization ownership checks for create, update and delete.

Every check returns a PermissionResult instead of raising:
- allow: the operation may proceed
- deny_with_message: the caller gets a 400 with a human readable reason
- deny_with_not_found: the caller gets the same 404 as for a missing entity,
  so entities in other organizations are never confirmed to exist
"""
import logging
from dataclasses import dataclass
from typing import Any, Optional

from .actor import ActorContext, OrganizationAccessCheck, can_access_organization
from .patching import ChangeSet

logger = logging.getLogger("bugwatch-core.permissions")

ORGANIZATION_ID_FIELD = "organization_id"

INVALID_ORGANIZATION_MESSAGE = "Invalid organization id specified."
ORGANIZATION_ID_IMMUTABLE_MESSAGE = "OrganizationId cannot be modified."


@dataclass(frozen=True)
class PermissionResult:
    """Outcome of a single permission check."""

    allowed: bool
    id: Optional[str] = None
    message: Optional[str] = None
    status_code: int = 200

    @property
    def is_not_found(self) -> bool:
        return not self.allowed and self.status_code == 404

    @classmethod
    def allow(cls) -> "PermissionResult":
        return cls(allowed=True)

    @classmethod
    def deny_with_message(cls, message: str, id: Optional[str] = None) -> "PermissionResult":
        return cls(allowed=False, id=id, message=message, status_code=400)

    @classmethod
    def deny_with_not_found(cls, id: Optional[str] = None) -> "PermissionResult":
        return cls(allowed=False, id=id, status_code=404)


def is_organization_scoped(value: Any) -> bool:
    return bool(getattr(value, "is_organization_scoped", False))


class OrganizationPermissions:
    """
    Ownership checks for organization-scoped entities.

    Entities that are not organization-scoped are always allowed. When
    is_organization is set the controller manages organizations themselves
    and creation skips the ownership check.
    """

    def __init__(
        self,
        actor: ActorContext,
        *,
        is_organization: bool = False,
        access_check: OrganizationAccessCheck = can_access_organization,
    ):
        self.actor = actor
        self.is_organization = is_organization
        self._access_check = access_check

    async def can_access_organization(self, organization_id: Optional[str]) -> bool:
        return await self._access_check(self.actor, organization_id)

    async def can_add(self, value: Any) -> PermissionResult:
        if self.is_organization or not is_organization_scoped(value):
            return PermissionResult.allow()

        if not await self.can_access_organization(value.organization_id):
            logger.info(f"User {self.actor.user_id} denied create in organization {value.organization_id}")
            return PermissionResult.deny_with_message(INVALID_ORGANIZATION_MESSAGE)

        return PermissionResult.allow()

    async def can_update(self, original: Any, changes: ChangeSet) -> PermissionResult:
        if is_organization_scoped(original) and not await self.can_access_organization(original.organization_id):
            logger.info(f"User {self.actor.user_id} denied update of {original.id}")
            return PermissionResult.deny_with_message(INVALID_ORGANIZATION_MESSAGE, id=original.id)

        if ORGANIZATION_ID_FIELD in changes:
            return PermissionResult.deny_with_message(ORGANIZATION_ID_IMMUTABLE_MESSAGE, id=original.id)

        return PermissionResult.allow()

    async def can_delete(self, value: Any) -> PermissionResult:
        if is_organization_scoped(value) and not await self.can_access_organization(value.organization_id):
            logger.info(f"User {self.actor.user_id} denied delete of {value.id}")
            return PermissionResult.deny_with_not_found(value.id)

        return PermissionResult.allow()


class OrganizationEntityPermissions(OrganizationPermissions):
    """Checks for organizations themselves: the caller must belong to the organization."""

    def __init__(self, actor: ActorContext, *, access_check: OrganizationAccessCheck = can_access_organization):
        super().__init__(actor, is_organization=True, access_check=access_check)

    async def can_update(self, original: Any, changes: ChangeSet) -> PermissionResult:
        if not await self.can_access_organization(original.id):
            return PermissionResult.deny_with_not_found(original.id)

        return await super().can_update(original, changes)

    async def can_delete(self, value: Any) -> PermissionResult:
        if not await self.can_access_organization(value.id):
            return PermissionResult.deny_with_not_found(value.id)

        return await super().can_delete(value)
