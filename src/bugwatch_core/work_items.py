"""Background work triggered by deletes.

Removing a project or organization cascades to its dependent data, which
can be slow, so controllers enqueue a work item and return its id instead of
deleting inline. The in-process queue below is enough for a single API
instance; a real deployment swaps in a durable queue behind the same
enqueue contract.
"""
import asyncio
import logging
from typing import Optional, Protocol, Union
from uuid import uuid4

from pydantic import BaseModel
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from . import models

logger = logging.getLogger("bugwatch-core.work_items")


class RemoveProjectWorkItem(BaseModel):
    project_id: str
    organization_id: str
    user_id: Optional[str] = None


class RemoveOrganizationWorkItem(BaseModel):
    organization_id: str
    user_id: Optional[str] = None


WorkItem = Union[RemoveProjectWorkItem, RemoveOrganizationWorkItem]


class WorkItemQueue(Protocol):
    async def enqueue(self, item: WorkItem) -> str: ...


class InMemoryWorkItemQueue:
    """asyncio.Queue backed work-item queue. Items are lost on restart."""

    def __init__(self):
        self._queue: asyncio.Queue[tuple[str, WorkItem]] = asyncio.Queue()

    async def enqueue(self, item: WorkItem) -> str:
        work_item_id = uuid4().hex
        await self._queue.put((work_item_id, item))
        logger.info(f"Enqueued {type(item).__name__} {work_item_id}")
        return work_item_id

    async def dequeue(self) -> tuple[str, WorkItem]:
        return await self._queue.get()

    def task_done(self) -> None:
        self._queue.task_done()

    def qsize(self) -> int:
        return self._queue.qsize()


async def remove_project(db: AsyncSession, item: RemoveProjectWorkItem) -> None:
    await db.execute(delete(models.Token).where(models.Token.project_id == item.project_id))
    await db.execute(delete(models.Project).where(models.Project.id == item.project_id))
    await db.commit()
    logger.info(f"Removed project {item.project_id} and its tokens")


async def remove_organization(db: AsyncSession, item: RemoveOrganizationWorkItem) -> None:
    organization_id = item.organization_id
    await db.execute(delete(models.Token).where(models.Token.organization_id == organization_id))
    await db.execute(delete(models.Project).where(models.Project.organization_id == organization_id))
    await db.execute(delete(models.OrganizationMember).where(models.OrganizationMember.organization_id == organization_id))
    await db.execute(delete(models.Organization).where(models.Organization.id == organization_id))
    await db.commit()
    logger.info(f"Removed organization {organization_id} and its data")


async def handle_work_item(db: AsyncSession, item: WorkItem) -> None:
    if isinstance(item, RemoveProjectWorkItem):
        await remove_project(db, item)
    elif isinstance(item, RemoveOrganizationWorkItem):
        await remove_organization(db, item)
    else:
        raise TypeError(f"Unknown work item type: {type(item).__name__}")


class WorkItemWorker:
    """Drains an InMemoryWorkItemQueue, one session per work item."""

    def __init__(self, queue: InMemoryWorkItemQueue, sessions: async_sessionmaker[AsyncSession]):
        self.queue = queue
        self.sessions = sessions

    async def process_next(self) -> bool:
        """Process one item. Returns False if it failed."""
        work_item_id, item = await self.queue.dequeue()
        try:
            async with self.sessions() as db:
                await handle_work_item(db, item)
            return True
        except Exception:
            logger.error(f"Error processing work item {work_item_id} ({type(item).__name__})", exc_info=True)
            return False
        finally:
            self.queue.task_done()

    async def run(self) -> None:
        logger.info("Work item worker started")
        try:
            while True:
                await self.process_next()
        except asyncio.CancelledError:
            logger.info("Work item worker stopped")
            raise
