"""Request dependencies: authentication and controller construction."""
import logging
from typing import Callable, Optional

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from .. import models
from ..actor import ActorContext
from ..controllers import OrganizationController, ProjectController, TokenController
from ..database import get_db
from ..repositories import OrganizationMemberRepository, TokenRepository, repository_for
from ..work_items import WorkItemQueue

logger = logging.getLogger("bugwatch-core.auth")


def _extract_bearer_token(authorization: Optional[str]) -> str:
    raw = (authorization or "").strip()
    if not raw:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing Authorization header.",
        )

    parts = raw.split(" ", 1)
    if len(parts) != 2:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid Authorization header format.",
        )

    scheme, token = parts[0].strip().lower(), parts[1].strip()
    if scheme != "bearer" or not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization must be: Bearer <token>.",
        )
    return token


async def get_current_actor(
    authorization: Optional[str] = Header(default=None),
    db: AsyncSession = Depends(get_db),
) -> ActorContext:
    """Resolve the caller from a user-scoped api token."""
    token = await TokenRepository(db).get_user_token(_extract_bearer_token(authorization))
    if token is None:
        logger.warning("Rejected unknown or disabled access token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid access token.",
        )

    user = await repository_for(db, models.User).get_by_id(token.user_id)
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive.",
        )

    organization_ids = await OrganizationMemberRepository(db).get_user_organization_ids(user.id)
    return ActorContext(
        user_id=user.id,
        email_address=user.email_address,
        organization_ids=tuple(organization_ids),
        is_global_admin=bool(user.is_global_admin),
    )


def get_work_queue(request: Request) -> WorkItemQueue:
    return request.app.state.work_queue


def _link_builder(request: Request, route_name: str, param: str) -> Callable[[str], str]:
    def build(id: str) -> str:
        return str(request.url_for(route_name, **{param: id}))
    return build


def get_organization_controller(
    request: Request,
    db: AsyncSession = Depends(get_db),
    actor: ActorContext = Depends(get_current_actor),
    work_queue: WorkItemQueue = Depends(get_work_queue),
) -> OrganizationController:
    return OrganizationController(
        repository_for(db, models.Organization),
        actor,
        members=OrganizationMemberRepository(db),
        work_queue=work_queue,
        link_builder=_link_builder(request, "get_organization", "organization_id"),
    )


def get_project_controller(
    request: Request,
    db: AsyncSession = Depends(get_db),
    actor: ActorContext = Depends(get_current_actor),
    work_queue: WorkItemQueue = Depends(get_work_queue),
) -> ProjectController:
    return ProjectController(
        repository_for(db, models.Project),
        actor,
        work_queue=work_queue,
        link_builder=_link_builder(request, "get_project", "project_id"),
    )


def get_token_controller(
    request: Request,
    db: AsyncSession = Depends(get_db),
    actor: ActorContext = Depends(get_current_actor),
) -> TokenController:
    return TokenController(
        TokenRepository(db),
        actor,
        projects=repository_for(db, models.Project),
        link_builder=_link_builder(request, "get_token", "token_id"),
    )
