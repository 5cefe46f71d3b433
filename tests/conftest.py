"""Shared fixtures: in-memory repositories, queue and actors."""
from typing import Any, Iterable, Optional, Union

import pytest

from bugwatch_core import models
from bugwatch_core.actor import ActorContext
from bugwatch_core.validation import validate_entity


def apply_column_defaults(entity: Any) -> None:
    """Fill column defaults the way a flush would."""
    for column in entity.__table__.columns:
        if getattr(entity, column.key) is not None or column.default is None:
            continue
        default = column.default
        value = default.arg(None) if default.is_callable else default.arg
        setattr(entity, column.key, value)


class FakeRepository:
    """In-memory Repository. Validates like the SQLAlchemy one."""

    def __init__(self, entities: Iterable[Any] = ()):
        self.items: dict[str, Any] = {}
        self.saved: list[Any] = []
        self.removed: list[Any] = []
        for entity in entities:
            apply_column_defaults(entity)
            self.items[entity.id] = entity

    async def get_by_id(self, id: str) -> Optional[Any]:
        return self.items.get(id)

    async def get_by_ids(self, ids: Iterable[str]) -> list[Any]:
        return [self.items[id] for id in ids if id in self.items]

    async def add(self, entity: Any) -> Any:
        validate_entity(entity)
        apply_column_defaults(entity)
        self.items[entity.id] = entity
        return entity

    async def save(self, entities: Union[Any, list[Any]]) -> None:
        if not isinstance(entities, list):
            entities = [entities]
        for entity in entities:
            validate_entity(entity)
        now = models.utcnow()
        for entity in entities:
            entity.updated_at = now
        self.saved.extend(entities)

    async def remove(self, entities: list[Any]) -> None:
        for entity in entities:
            self.items.pop(entity.id, None)
        self.removed.extend(entities)


class FakeMemberRepository(FakeRepository):
    async def get_user_organization_ids(self, user_id: str) -> list[str]:
        return [m.organization_id for m in self.items.values() if m.user_id == user_id]

    async def get_user_roles(self, user_id: str) -> dict[str, models.MemberRole]:
        return {m.organization_id: m.role for m in self.items.values() if m.user_id == user_id}

    async def add_member(self, organization_id, user_id, role=models.MemberRole.MEMBER):
        return await self.add(models.OrganizationMember(organization_id=organization_id, user_id=user_id, role=role))


class FakeWorkItemQueue:
    def __init__(self):
        self.items: list[Any] = []

    async def enqueue(self, item: Any) -> str:
        self.items.append(item)
        return f"work-{len(self.items)}"


@pytest.fixture
def actor():
    """Member of org_a only."""
    return ActorContext(user_id="user_1", email_address="dev@example.com", organization_ids=("org_a",))


@pytest.fixture
def admin_actor():
    return ActorContext(user_id="admin_1", email_address="admin@example.com", is_global_admin=True)


@pytest.fixture
def work_queue():
    return FakeWorkItemQueue()


@pytest.fixture
def project_repository():
    return FakeRepository([
        models.Project(id="proj_a", organization_id="org_a", name="Website", settings={}),
        models.Project(id="proj_b", organization_id="org_b", name="Other tenant", settings={}),
    ])
