"""Pydantic schemas for request/response validation."""
from datetime import datetime
from typing import ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field

from .models import TokenType


class OrganizationOwnedInput(BaseModel):
    """Input for an organization-scoped entity. organization_id defaults to the caller's first organization."""

    is_organization_scoped: ClassVar[bool] = True

    organization_id: Optional[str] = Field(None, max_length=24)


# ============================================================================
# Organization Schemas
# ============================================================================

class OrganizationCreate(BaseModel):
    """Schema for creating a new organization."""

    name: str = Field(..., min_length=1, max_length=255)
    settings: dict = Field(default_factory=dict)


class OrganizationUpdate(BaseModel):
    """Schema for updating an organization."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    settings: Optional[dict] = None


class OrganizationResponse(BaseModel):
    """Schema for organization responses."""

    id: str
    name: str
    settings: dict = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime
    # Filled in after mapping
    is_owner: bool = False

    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# Project Schemas
# ============================================================================

class ProjectCreate(OrganizationOwnedInput):
    """Schema for creating a new project."""

    name: str = Field(..., min_length=1, max_length=255)
    settings: dict = Field(default_factory=dict)


class ProjectUpdate(BaseModel):
    """
    Schema for updating a project.

    organization_id is accepted so that attempts to move a project are
    rejected with a clear message instead of silently ignored.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    settings: Optional[dict] = None
    organization_id: Optional[str] = None


class ProjectResponse(BaseModel):
    """Schema for project responses."""

    id: str
    organization_id: str
    name: str
    settings: dict = Field(default_factory=dict)
    next_summary_end_of_day: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProjectSettingValue(BaseModel):
    value: Optional[str] = None


# ============================================================================
# Token Schemas
# ============================================================================

class TokenCreate(OrganizationOwnedInput):
    """Schema for creating a new token."""

    project_id: Optional[str] = Field(None, max_length=24)
    user_id: Optional[str] = Field(None, max_length=24)
    type: TokenType = TokenType.ACCESS
    notes: Optional[str] = None


class TokenUpdate(BaseModel):
    """Schema for updating a token."""

    notes: Optional[str] = None
    is_disabled: Optional[bool] = None
    organization_id: Optional[str] = None


class TokenResponse(BaseModel):
    """Schema for token responses."""

    id: str
    organization_id: str
    project_id: Optional[str] = None
    user_id: Optional[str] = None
    type: TokenType
    notes: Optional[str] = None
    is_disabled: bool = False
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)


# ============================================================================
# Result Schemas
# ============================================================================

class MessageResponse(BaseModel):
    id: Optional[str] = None
    message: Optional[str] = None


class ModelActionResultsResponse(BaseModel):
    """Body of a bulk operation that did not fully succeed."""

    success: list[str] = Field(default_factory=list)
    workers: list[str] = Field(default_factory=list)
    failure: list[MessageResponse] = Field(default_factory=list)
    not_found: list[str] = Field(default_factory=list)


class WorkInProgressResponse(BaseModel):
    workers: list[str] = Field(default_factory=list)
