"""Async persistence for entities.

Repositories validate every entity before it is written and raise
EntityValidationError with field level messages on failure.
"""
import logging
from typing import Any, Generic, Iterable, Optional, Protocol, TypeVar, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from . import models
from .validation import validate_entity

logger = logging.getLogger("bugwatch-core.repositories")

ModelT = TypeVar("ModelT")


class Repository(Protocol[ModelT]):
    """Persistence capability consumed by controllers."""

    async def get_by_id(self, id: str) -> Optional[ModelT]: ...

    async def get_by_ids(self, ids: Iterable[str]) -> list[ModelT]: ...

    async def add(self, entity: ModelT) -> ModelT: ...

    async def save(self, entities: Union[ModelT, list[ModelT]]) -> None: ...

    async def remove(self, entities: list[ModelT]) -> None: ...


class SqlAlchemyRepository(Generic[ModelT]):
    """Repository backed by an AsyncSession. Every write commits."""

    def __init__(self, db: AsyncSession, model: type[ModelT]):
        self.db = db
        self.model = model

    async def get_by_id(self, id: str) -> Optional[ModelT]:
        if not id:
            return None
        return await self.db.get(self.model, id)

    async def get_by_ids(self, ids: Iterable[str]) -> list[ModelT]:
        ids = [id for id in ids if id]
        if not ids:
            return []
        result = await self.db.execute(select(self.model).where(self.model.id.in_(ids)))
        return list(result.scalars().all())

    async def add(self, entity: ModelT) -> ModelT:
        validate_entity(entity)
        self.db.add(entity)
        await self.db.commit()
        await self.db.refresh(entity)
        logger.debug(f"Added {entity!r}")
        return entity

    async def save(self, entities: Union[ModelT, list[ModelT]]) -> None:
        if not isinstance(entities, list):
            entities = [entities]
        for entity in entities:
            validate_entity(entity)

        await self.db.commit()
        for entity in entities:
            await self.db.refresh(entity)
        logger.debug(f"Saved {len(entities)} {self.model.__name__} row(s)")

    async def remove(self, entities: list[ModelT]) -> None:
        for entity in entities:
            await self.db.delete(entity)
        await self.db.commit()
        logger.debug(f"Removed {len(entities)} {self.model.__name__} row(s)")


class OrganizationMemberRepository(SqlAlchemyRepository[models.OrganizationMember]):
    def __init__(self, db: AsyncSession):
        super().__init__(db, models.OrganizationMember)

    async def get_user_organization_ids(self, user_id: str) -> list[str]:
        """
        Get the ids of the organizations a user belongs to, oldest membership first.

        Args:
            user_id: User id

        Returns:
            List of organization ids
        """
        result = await self.db.execute(
            select(models.OrganizationMember.organization_id)
            .where(models.OrganizationMember.user_id == user_id)
            .order_by(models.OrganizationMember.joined_at, models.OrganizationMember.id)
        )
        return list(result.scalars().all())

    async def get_user_roles(self, user_id: str) -> dict[str, models.MemberRole]:
        """Map organization id to the user's role in it."""
        result = await self.db.execute(
            select(models.OrganizationMember.organization_id, models.OrganizationMember.role)
            .where(models.OrganizationMember.user_id == user_id)
        )
        return {organization_id: role for organization_id, role in result.all()}

    async def add_member(
        self,
        organization_id: str,
        user_id: str,
        role: models.MemberRole = models.MemberRole.MEMBER,
    ) -> models.OrganizationMember:
        return await self.add(
            models.OrganizationMember(organization_id=organization_id, user_id=user_id, role=role)
        )


class TokenRepository(SqlAlchemyRepository[models.Token]):
    def __init__(self, db: AsyncSession):
        super().__init__(db, models.Token)

    async def get_user_token(self, token: str) -> Optional[models.Token]:
        """Return an enabled user-scoped token, or None."""
        row = await self.get_by_id(token)
        if row is None or row.is_disabled or not row.user_id:
            return None
        return row


def repository_for(db: AsyncSession, model: type[Any]) -> SqlAlchemyRepository:
    return SqlAlchemyRepository(db, model)
