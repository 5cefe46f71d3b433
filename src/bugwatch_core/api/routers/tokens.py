"""Tokens API endpoints."""
import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends

from bugwatch_core import schemas
from bugwatch_core.controllers import TokenController
from bugwatch_core.patching import ChangeSet

from ..dependencies import get_token_controller
from ..responses import to_response

logger = logging.getLogger("bugwatch-core.tokens")

router = APIRouter(tags=["tokens"])


@router.get("/{token_id}", response_model=schemas.TokenResponse, name="get_token")
async def get_token(
    token_id: str,
    controller: TokenController = Depends(get_token_controller),
):
    """
    Get a specific token.
    """
    return to_response(await controller.get(token_id))


@router.post("/", response_model=schemas.TokenResponse, status_code=201)
async def create_token(
    token: Optional[schemas.TokenCreate] = Body(None),
    controller: TokenController = Depends(get_token_controller),
):
    """
    Create a new api key for a project or for yourself.
    """
    return to_response(await controller.create(token))


@router.patch("/{token_id}", response_model=schemas.TokenResponse)
async def update_token(
    token_id: str,
    changes: Optional[schemas.TokenUpdate] = Body(None),
    controller: TokenController = Depends(get_token_controller),
):
    """
    Partially update a token (notes, disabled flag).
    """
    return to_response(await controller.patch(token_id, ChangeSet.from_update(changes)))


@router.post("/{ids}/disable", response_model=list[schemas.TokenResponse])
async def disable_tokens(
    ids: str,
    controller: TokenController = Depends(get_token_controller),
):
    """
    Disable one or more tokens (comma separated ids).
    """
    return to_response(await controller.disable_many(ids.split(",")))


@router.post("/{ids}/enable", response_model=list[schemas.TokenResponse])
async def enable_tokens(
    ids: str,
    controller: TokenController = Depends(get_token_controller),
):
    """
    Enable one or more tokens (comma separated ids).
    """
    return to_response(await controller.enable_many(ids.split(",")))


@router.delete(
    "/{ids}",
    status_code=202,
    response_model=schemas.WorkInProgressResponse,
    responses={400: {"model": schemas.ModelActionResultsResponse}},
)
async def delete_tokens(
    ids: str,
    controller: TokenController = Depends(get_token_controller),
):
    """
    Delete one or more tokens (comma separated ids). Tokens are removed immediately.
    """
    return to_response(await controller.delete(ids.split(",")))
