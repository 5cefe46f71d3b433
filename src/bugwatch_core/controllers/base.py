"""Generic create / patch / delete pipeline over a repository.

A concrete controller declares its Resource (entity, input, update and view
types) and overrides hooks where the entity needs side effects. The
repository, permission checks and mapper are passed in, so a controller can
be exercised without a database or an HTTP request.

Per entity and request an entity moves Requested -> Loaded ->
Authorized or Denied -> Mutated -> Persisted -> Post-processed, never back.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Iterable, Optional

from pydantic import BaseModel

from .. import results
from ..actor import ActorContext
from ..bulk import BulkDeleteCoordinator, distinct_ids
from ..mapping import EntityMapper, default_mapper
from ..patching import ChangeSet, apply_changes
from ..permissions import OrganizationPermissions, PermissionResult, is_organization_scoped
from ..repositories import Repository
from ..results import ActionResult
from ..validation import EntityValidationError, validate_changes

logger = logging.getLogger("bugwatch-core.controllers")

LinkBuilder = Callable[[str], str]
ModelUpdate = Callable[[Any], None]


@dataclass(frozen=True)
class Resource:
    """Types handled by a controller. Without a view type the raw entity is returned."""

    name: str
    model: type
    new: type[BaseModel]
    update: Optional[type[BaseModel]] = None
    view: Optional[type[BaseModel]] = None
    is_organization: bool = False


class RepositoryController:
    resource: ClassVar[Resource]

    def __init__(
        self,
        repository: Repository,
        actor: ActorContext,
        *,
        permissions: Optional[OrganizationPermissions] = None,
        mapper: Optional[EntityMapper] = None,
        link_builder: Optional[LinkBuilder] = None,
    ):
        self.repository = repository
        self.actor = actor
        self.permissions = permissions or OrganizationPermissions(actor, is_organization=self.resource.is_organization)
        self.mapper = mapper or default_mapper
        self.link_builder = link_builder or self._default_link
        self.create_maps()

    def _default_link(self, id: str) -> str:
        return f"/{self.resource.name}s/{id}"

    def create_maps(self) -> None:
        self.mapper.register(self.resource.new, self.resource.model)
        if self.resource.view is not None:
            self.mapper.register(self.resource.model, self.resource.view)

    # ------------------------------------------------------------------
    # Mapping
    # ------------------------------------------------------------------

    async def map(self, value: Any, dest: type, is_result: bool = False) -> Any:
        mapped = self.mapper.map(value, dest)
        if is_result:
            await self.after_result_map([mapped])
        return mapped

    async def map_many(self, values: list[Any], dest: type, is_result: bool = False) -> list[Any]:
        mapped = self.mapper.map_many(values, dest)
        if is_result:
            await self.after_result_map(mapped)
        return mapped

    async def after_result_map(self, views: list[Any]) -> None:
        """Hook to decorate views before they are returned."""

    async def to_view(self, model: Any) -> Any:
        if self.resource.view is None:
            return model
        return await self.map(model, self.resource.view, is_result=True)

    async def to_views(self, models: list[Any]) -> list[Any]:
        if self.resource.view is None:
            return models
        return await self.map_many(models, self.resource.view, is_result=True)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_model(self, id: str) -> Optional[Any]:
        if not id:
            return None
        return await self.repository.get_by_id(id)

    async def get_models(self, ids: Iterable[str]) -> list[Any]:
        ids = distinct_ids(ids)
        if not ids:
            return []
        return await self.repository.get_by_ids(ids)

    async def can_access_model(self, model: Any) -> bool:
        if not is_organization_scoped(model):
            return True
        return await self.permissions.can_access_organization(model.organization_id)

    async def get(self, id: str) -> ActionResult:
        model = await self.get_model(id)
        if model is None or not await self.can_access_model(model):
            return results.not_found()
        return results.ok(await self.to_view(model))

    # ------------------------------------------------------------------
    # Permissions
    # ------------------------------------------------------------------

    async def can_add(self, value: Any) -> PermissionResult:
        return await self.permissions.can_add(value)

    async def can_update(self, original: Any, changes: ChangeSet) -> PermissionResult:
        return await self.permissions.can_update(original, changes)

    async def can_delete(self, value: Any) -> PermissionResult:
        return await self.permissions.can_delete(value)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def get_default_organization_id(self) -> Optional[str]:
        return self.actor.default_organization_id

    async def create(self, value: Optional[BaseModel]) -> ActionResult:
        if value is None:
            return results.bad_request()

        # if no organization id is specified, default to the user's 1st associated org.
        if (
            not self.resource.is_organization
            and is_organization_scoped(value)
            and not value.organization_id
            and self.actor.organization_ids
        ):
            value.organization_id = await self.get_default_organization_id()

        mapped = await self.map(value, self.resource.model)
        permission = await self.can_add(mapped)
        if not permission.allowed:
            return results.permission_denied(permission)

        try:
            model = await self.add_model(mapped)
            await self.after_add(model)
        except EntityValidationError as e:
            return results.validation_failed(e.errors)

        logger.info(f"Created {self.resource.name} {model.id} (user {self.actor.user_id})")
        return results.created(self.link_builder(model.id), await self.to_view(model))

    async def add_model(self, value: Any) -> Any:
        return await self.repository.add(value)

    async def after_add(self, value: Any) -> Any:
        return value

    # ------------------------------------------------------------------
    # Patch
    # ------------------------------------------------------------------

    async def patch(self, id: str, changes: Optional[ChangeSet]) -> ActionResult:
        original = await self.get_model(id)
        if original is None:
            return results.not_found()

        # if there are no changes in the change set, then ignore the request
        if changes is None or changes.is_empty():
            return results.ok(await self.to_view(original))

        permission = await self.can_update(original, changes)
        if not permission.allowed:
            return results.permission_denied(permission)

        try:
            changed = await self.update_model_changes(original, changes)
            await self.after_patch(original)
        except EntityValidationError as e:
            return results.validation_failed(e.errors)

        logger.info(f"Patched {self.resource.name} {id} fields {changed}")
        return results.ok(await self.to_view(original))

    async def update_model_changes(self, original: Any, changes: ChangeSet) -> list[str]:
        """Apply and save changes. Returns the names of the fields that were changed."""
        validate_changes(type(original), changes)
        _, changed = apply_changes(original, changes)
        await self.repository.save(original)
        return changed

    async def after_patch(self, value: Any) -> Any:
        return value

    # ------------------------------------------------------------------
    # Update by function
    # ------------------------------------------------------------------

    async def update_model(self, id: str, update: Optional[ModelUpdate]) -> ActionResult:
        model = await self.get_model(id)
        if model is None or not await self.can_access_model(model):
            return results.not_found()

        if update is not None:
            update(model)

        try:
            await self.repository.save(model)
            await self.after_update(model)
        except EntityValidationError as e:
            return results.validation_failed(e.errors)

        return results.ok(await self.to_view(model))

    async def update_models(self, ids: Iterable[str], update: Optional[ModelUpdate]) -> ActionResult:
        models = [model for model in await self.get_models(ids) if await self.can_access_model(model)]
        if not models:
            return results.not_found()

        if update is not None:
            for model in models:
                update(model)

        try:
            await self.repository.save(models)
            for model in models:
                await self.after_update(model)
        except EntityValidationError as e:
            return results.validation_failed(e.errors)

        return results.ok(await self.to_views(models))

    async def after_update(self, value: Any) -> Any:
        return value

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    async def delete(self, ids: Iterable[str]) -> ActionResult:
        ids = distinct_ids(ids)
        models = await self.get_models(ids)
        if not models:
            return results.not_found()

        coordinator = BulkDeleteCoordinator(
            self.actor,
            can_delete=self.can_delete,
            delete_models=self.delete_models,
        )
        return await coordinator.run(ids, models)

    async def delete_models(self, values: list[Any]) -> list[str]:
        """Remove values. Returns the ids of any background work started."""
        await self.repository.remove(values)
        return []
