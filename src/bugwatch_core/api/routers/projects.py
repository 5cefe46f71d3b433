"""Projects API endpoints."""
import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends

from bugwatch_core import schemas
from bugwatch_core.controllers import ProjectController
from bugwatch_core.patching import ChangeSet

from ..dependencies import get_project_controller
from ..responses import to_response

logger = logging.getLogger("bugwatch-core.projects")

router = APIRouter(tags=["projects"])


@router.get("/{project_id}", response_model=schemas.ProjectResponse, name="get_project")
async def get_project(
    project_id: str,
    controller: ProjectController = Depends(get_project_controller),
):
    """
    Get a specific project by ID.
    """
    return to_response(await controller.get(project_id))


@router.post("/", response_model=schemas.ProjectResponse, status_code=201)
async def create_project(
    project: Optional[schemas.ProjectCreate] = Body(None),
    controller: ProjectController = Depends(get_project_controller),
):
    """
    Create a new project.

    - **organization_id**: Parent organization (defaults to your first organization)
    - **name**: Project name
    - **settings**: Optional JSON settings
    """
    return to_response(await controller.create(project))


@router.patch("/{project_id}", response_model=schemas.ProjectResponse)
async def update_project(
    project_id: str,
    changes: Optional[schemas.ProjectUpdate] = Body(None),
    controller: ProjectController = Depends(get_project_controller),
):
    """
    Partially update a project. Moving a project to another organization is not allowed.
    """
    return to_response(await controller.patch(project_id, ChangeSet.from_update(changes)))


@router.post("/{project_id}/settings/{key}", response_model=schemas.ProjectResponse)
async def set_project_setting(
    project_id: str,
    key: str,
    setting: schemas.ProjectSettingValue,
    controller: ProjectController = Depends(get_project_controller),
):
    """
    Set a single project setting. A null value removes it.
    """
    return to_response(await controller.set_setting(project_id, key, setting.value))


@router.delete(
    "/{ids}",
    status_code=202,
    response_model=schemas.WorkInProgressResponse,
    responses={400: {"model": schemas.ModelActionResultsResponse}},
)
async def delete_projects(
    ids: str,
    controller: ProjectController = Depends(get_project_controller),
):
    """
    Delete one or more projects (comma separated ids).

    Project data is removed in the background; the response lists the work item ids.
    """
    return to_response(await controller.delete(ids.split(",")))
