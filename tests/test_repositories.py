"""Tests for SQLAlchemy repositories and background removal, on sqlite."""
from datetime import datetime

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from bugwatch_core import models
from bugwatch_core.repositories import OrganizationMemberRepository, TokenRepository, repository_for
from bugwatch_core.validation import EntityValidationError
from bugwatch_core.work_items import (
    InMemoryWorkItemQueue,
    RemoveOrganizationWorkItem,
    RemoveProjectWorkItem,
    WorkItemWorker,
    handle_work_item,
)


@pytest.fixture
async def sessions(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(models.Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False, autoflush=False)
    await engine.dispose()


@pytest.fixture
async def db(sessions):
    async with sessions() as session:
        yield session


@pytest.fixture
async def seeded(db):
    """Two organizations, a user in both and a project with a token in the first."""
    user = models.User(id="user_1", email_address="dev@example.com")
    acme = models.Organization(id="org_a", name="Acme")
    globex = models.Organization(id="org_b", name="Globex")
    db.add_all([user, acme, globex])
    await db.commit()

    members = OrganizationMemberRepository(db)
    await members.add(models.OrganizationMember(
        organization_id="org_a", user_id="user_1", role=models.MemberRole.OWNER, joined_at=datetime(2026, 1, 1),
    ))
    await members.add_member("org_b", "user_1")

    project = await repository_for(db, models.Project).add(models.Project(organization_id="org_a", name="Website"))
    await TokenRepository(db).add(
        models.Token(id="p" * 40, organization_id="org_a", project_id=project.id)
    )
    await TokenRepository(db).add(
        models.Token(id="u" * 40, organization_id="org_a", user_id="user_1")
    )
    return project


class TestSqlAlchemyRepository:
    """Test generic persistence."""

    async def test_add_applies_defaults(self, db):
        repository = repository_for(db, models.Organization)
        organization = await repository.add(models.Organization(name="Initech"))
        assert len(organization.id) == 24
        assert organization.settings == {}
        assert organization.created_at is not None

    async def test_get_by_ids(self, db, seeded):
        repository = repository_for(db, models.Organization)
        found = await repository.get_by_ids(["org_a", "missing", "org_b"])
        assert sorted(o.id for o in found) == ["org_a", "org_b"]
        assert await repository.get_by_ids([]) == []
        assert await repository.get_by_id("") is None

    async def test_add_validates(self, db):
        repository = repository_for(db, models.Project)
        with pytest.raises(EntityValidationError) as exc_info:
            await repository.add(models.Project(name=""))
        assert set(exc_info.value.errors) == {"organization_id", "name"}

    async def test_save_list(self, db, seeded):
        repository = repository_for(db, models.Organization)
        organizations = await repository.get_by_ids(["org_a", "org_b"])
        for organization in organizations:
            organization.name = organization.name + " Inc"
        await repository.save(organizations)

        reloaded = await repository.get_by_id("org_a")
        assert reloaded.name == "Acme Inc"

    async def test_remove(self, db, seeded):
        repository = repository_for(db, models.Token)
        token = await repository.get_by_id("p" * 40)
        await repository.remove([token])
        assert await repository.get_by_id("p" * 40) is None


class TestOrganizationMemberRepository:
    async def test_organization_ids_oldest_first(self, db, seeded):
        members = OrganizationMemberRepository(db)
        assert await members.get_user_organization_ids("user_1") == ["org_a", "org_b"]
        assert await members.get_user_organization_ids("nobody") == []

    async def test_roles(self, db, seeded):
        roles = await OrganizationMemberRepository(db).get_user_roles("user_1")
        assert roles == {"org_a": models.MemberRole.OWNER, "org_b": models.MemberRole.MEMBER}


class TestTokenRepository:
    async def test_user_token(self, db, seeded):
        tokens = TokenRepository(db)
        token = await tokens.get_user_token("u" * 40)
        assert token.user_id == "user_1"

    async def test_project_token_does_not_authenticate(self, db, seeded):
        assert await TokenRepository(db).get_user_token("p" * 40) is None

    async def test_disabled_token(self, db, seeded):
        tokens = TokenRepository(db)
        token = await tokens.get_by_id("u" * 40)
        token.is_disabled = True
        await tokens.save(token)
        assert await tokens.get_user_token("u" * 40) is None


class TestWorkItems:
    """Test background removal jobs."""

    async def test_remove_project(self, db, sessions, seeded):
        async with sessions() as worker_db:
            await handle_work_item(
                worker_db, RemoveProjectWorkItem(project_id=seeded.id, organization_id="org_a"),
            )

        async with sessions() as check:
            assert await check.get(models.Project, seeded.id) is None
            assert await check.get(models.Token, "p" * 40) is None
            assert await check.get(models.Token, "u" * 40) is not None

    async def test_remove_organization(self, db, sessions, seeded):
        async with sessions() as worker_db:
            await handle_work_item(worker_db, RemoveOrganizationWorkItem(organization_id="org_a"))

        async with sessions() as check:
            assert await check.get(models.Organization, "org_a") is None
            assert await check.get(models.Organization, "org_b") is not None
            projects = (await check.execute(select(models.Project))).scalars().all()
            assert projects == []
            members = await OrganizationMemberRepository(check).get_user_organization_ids("user_1")
            assert members == ["org_b"]

    async def test_unknown_item(self, db):
        with pytest.raises(TypeError):
            await handle_work_item(db, object())

    async def test_worker_processes_queue(self, sessions, seeded):
        queue = InMemoryWorkItemQueue()
        work_item_id = await queue.enqueue(RemoveProjectWorkItem(project_id=seeded.id, organization_id="org_a"))
        assert work_item_id
        assert queue.qsize() == 1

        assert await WorkItemWorker(queue, sessions).process_next() is True
        assert queue.qsize() == 0

        async with sessions() as check:
            assert await check.get(models.Project, seeded.id) is None

    async def test_worker_survives_failures(self, sessions):
        queue = InMemoryWorkItemQueue()
        await queue.enqueue(object())
        assert await WorkItemWorker(queue, sessions).process_next() is False
