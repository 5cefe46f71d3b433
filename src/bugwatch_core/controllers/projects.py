"""Project controller."""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from .. import models, schemas
from ..actor import ActorContext
from ..repositories import Repository
from ..results import ActionResult
from ..work_items import RemoveProjectWorkItem, WorkItemQueue
from .base import RepositoryController, Resource

logger = logging.getLogger("bugwatch-core.projects")


def next_summary_end_of_day(now: Optional[datetime] = None) -> datetime:
    """01:00 UTC on the day after now."""
    now = now or datetime.now(timezone.utc)
    tomorrow = now.astimezone(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0) + timedelta(days=1)
    return (tomorrow + timedelta(hours=1)).replace(tzinfo=None)


class ProjectController(RepositoryController):
    resource = Resource(
        name="project",
        model=models.Project,
        new=schemas.ProjectCreate,
        update=schemas.ProjectUpdate,
        view=schemas.ProjectResponse,
    )

    def __init__(self, repository: Repository, actor: ActorContext, *, work_queue: WorkItemQueue, **kwargs: Any):
        super().__init__(repository, actor, **kwargs)
        self.work_queue = work_queue

    async def add_model(self, value: models.Project) -> models.Project:
        value.next_summary_end_of_day = next_summary_end_of_day()
        return await super().add_model(value)

    async def delete_models(self, values: list[models.Project]) -> list[str]:
        # Events and tokens are removed in the background.
        workers = []
        for project in values:
            work_item_id = await self.work_queue.enqueue(
                RemoveProjectWorkItem(
                    project_id=project.id,
                    organization_id=project.organization_id,
                    user_id=self.actor.user_id,
                )
            )
            workers.append(work_item_id)
        logger.info(f"Queued removal of {len(values)} project(s) for user {self.actor.user_id}")
        return workers

    async def set_setting(self, id: str, key: str, value: Optional[str]) -> ActionResult:
        """Set a single project setting. A None value removes the key."""
        def update(project: models.Project) -> None:
            # Reassign so the JSON column is marked dirty.
            settings = dict(project.settings or {})
            if value is None:
                settings.pop(key, None)
            else:
                settings[key] = value
            project.settings = settings

        return await self.update_model(id, update)
