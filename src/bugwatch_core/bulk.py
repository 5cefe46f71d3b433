"""Multi-id operations.

A bulk delete sorts every requested id into exactly one bucket:
- not_found: requested but not in persistence
- failure: found, but the permission check denied it
- success: found, permitted and handed to the delete hook
Work-item ids returned by the delete hook are listed under workers.

Response policy:
- nothing permitted, one denial      -> that denial as the response
- nothing permitted, several denials -> 400 with the full results
- some permitted, no denials         -> 202 with the work-item ids
- some permitted, some denials       -> 400 with the full results
- delete hook raised                 -> logged with the actor, 500
"""
import logging
from typing import Any, Awaitable, Callable, Iterable, Optional

from . import results
from .actor import ActorContext
from .permissions import PermissionResult
from .results import ActionResult

logger = logging.getLogger("bugwatch-core.bulk")

PermissionCheck = Callable[[Any], Awaitable[PermissionResult]]
DeleteModels = Callable[[list[Any]], Awaitable[Optional[list[str]]]]


def distinct_ids(ids: Iterable[str]) -> list[str]:
    """Drop duplicate and empty ids, keeping first-seen order."""
    seen: dict[str, None] = {}
    for id in ids:
        if id and id not in seen:
            seen[id] = None
    return list(seen)


def partition(requested_ids: Iterable[str], models: Iterable[Any]) -> tuple[list[Any], list[str]]:
    """Split requested ids into the models that were found and the ids that were not."""
    requested = distinct_ids(requested_ids)
    wanted = set(requested)
    found = [model for model in models if model.id in wanted]
    found_ids = {model.id for model in found}
    not_found = [id for id in requested if id not in found_ids]
    return found, not_found


class ModelActionResults:
    """Aggregate outcome of a bulk operation."""

    def __init__(self):
        self.success: list[str] = []
        self.workers: list[str] = []
        self.failure: list[PermissionResult] = []
        self.not_found: list[str] = []

    def add_not_found(self, ids: Iterable[str]) -> None:
        self.not_found.extend(ids)

    def to_dict(self) -> dict:
        return {
            "success": list(self.success),
            "workers": list(self.workers),
            "failure": [
                {"id": permission.id, "message": permission.message}
                for permission in self.failure
            ],
            "not_found": list(self.not_found),
        }


class BulkDeleteCoordinator:
    """Runs per-item permission checks and the delete hook for one request."""

    def __init__(self, actor: ActorContext, *, can_delete: PermissionCheck, delete_models: DeleteModels):
        self.actor = actor
        self._can_delete = can_delete
        self._delete_models = delete_models

    async def filter_permitted(self, models: list[Any], action_results: ModelActionResults) -> list[Any]:
        permitted = []
        for model in models:
            permission = await self._can_delete(model)
            if permission.allowed:
                permitted.append(model)
            else:
                action_results.failure.append(permission)
        return permitted

    async def run(self, requested_ids: Iterable[str], models: list[Any]) -> ActionResult:
        found, not_found = partition(requested_ids, models)

        action_results = ModelActionResults()
        action_results.add_not_found(not_found)

        permitted = await self.filter_permitted(found, action_results)
        if not permitted:
            if len(action_results.failure) == 1:
                return results.permission_denied(action_results.failure[0])
            return results.bulk_partial(action_results.to_dict())

        try:
            workers = await self._delete_models(permitted) or []
        except Exception:
            logger.error(
                f"Error deleting {len(permitted)} item(s) for user {self.actor.email_address}",
                exc_info=True,
                extra={"user": self.actor.email_address, "user_id": self.actor.user_id},
            )
            return results.server_error()

        if not action_results.failure:
            return results.work_in_progress(workers)

        action_results.workers.extend(workers)
        action_results.success.extend(model.id for model in permitted)
        return results.bulk_partial(action_results.to_dict())
