"""Organizations API endpoints."""
import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends

from bugwatch_core import schemas
from bugwatch_core.controllers import OrganizationController
from bugwatch_core.patching import ChangeSet

from ..dependencies import get_organization_controller
from ..responses import to_response

logger = logging.getLogger("bugwatch-core.organizations")

router = APIRouter(tags=["organizations"])


@router.get("/{organization_id}", response_model=schemas.OrganizationResponse, name="get_organization")
async def get_organization(
    organization_id: str,
    controller: OrganizationController = Depends(get_organization_controller),
):
    """
    Get a specific organization by ID.
    """
    return to_response(await controller.get(organization_id))


@router.post("/", response_model=schemas.OrganizationResponse, status_code=201)
async def create_organization(
    organization: Optional[schemas.OrganizationCreate] = Body(None),
    controller: OrganizationController = Depends(get_organization_controller),
):
    """
    Create a new organization. The caller becomes its owner.

    - **name**: Organization name
    - **settings**: Optional JSON settings
    """
    return to_response(await controller.create(organization))


@router.patch("/{organization_id}", response_model=schemas.OrganizationResponse)
async def update_organization(
    organization_id: str,
    changes: Optional[schemas.OrganizationUpdate] = Body(None),
    controller: OrganizationController = Depends(get_organization_controller),
):
    """
    Partially update an organization. Only the fields sent are changed.
    """
    return to_response(await controller.patch(organization_id, ChangeSet.from_update(changes)))


@router.delete(
    "/{ids}",
    status_code=202,
    response_model=schemas.WorkInProgressResponse,
    responses={400: {"model": schemas.ModelActionResultsResponse}},
)
async def delete_organizations(
    ids: str,
    controller: OrganizationController = Depends(get_organization_controller),
):
    """
    Delete one or more organizations (comma separated ids).

    Data is removed in the background; the response lists the work item ids.
    """
    return to_response(await controller.delete(ids.split(",")))
