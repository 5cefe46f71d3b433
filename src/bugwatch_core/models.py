"""SQLAlchemy database models."""
from datetime import datetime, timezone
import enum
import secrets
import string

from sqlalchemy import (
    Column,
    String,
    Text,
    DateTime,
    ForeignKey,
    Enum,
    Boolean,
    UniqueConstraint,
    JSON,
)
from sqlalchemy.orm import declarative_base, declared_attr


def new_id() -> str:
    """Generate a 24 character hex identifier."""
    return secrets.token_hex(12)


_TOKEN_ALPHABET = string.ascii_letters + string.digits


def new_token() -> str:
    """Generate a 40 character api key."""
    return "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(40))


def utcnow() -> datetime:
    # Stored naive, always UTC.
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Entity:
    """Behaviour shared by every mapped entity."""

    # Declared capability, overridden by OrganizationOwned.
    is_organization_scoped = False

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id}>"


# Base class for all models
Base = declarative_base(cls=Entity)


class OrganizationOwned:
    """
    Mixin for entities owned by exactly one organization.

    Entities carrying this mixin are authorized against the caller's
    organizations before every create, update and delete.
    """

    is_organization_scoped = True

    @declared_attr
    def organization_id(cls):
        return Column(String(24), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)


class MemberRole(str, enum.Enum):
    """Organization member role enum."""

    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class TokenType(str, enum.Enum):
    """Token type enum."""

    ACCESS = "access"
    AUTHENTICATION = "authentication"


class Organization(Base):
    """
    Organization model, the tenant boundary.

    Every project and token belongs to exactly one organization.
    """

    __tablename__ = "organizations"

    id = Column(String(24), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    settings = Column(JSON, nullable=False, default=dict)

    # Audit fields
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<Organization {self.id}: {self.name}>"


class User(Base):
    """
    User model.

    Users authenticate with a user-scoped token and can belong to multiple
    organizations through OrganizationMember rows.
    """

    __tablename__ = "users"

    id = Column(String(24), primary_key=True, default=new_id)
    email_address = Column(String(255), nullable=False, unique=True, index=True)
    full_name = Column(String(255))
    is_active = Column(Boolean, nullable=False, default=True)
    is_global_admin = Column(Boolean, nullable=False, default=False)

    # Audit fields
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<User {self.email_address}>"


class OrganizationMember(Base):
    """
    Junction table linking users to organizations with roles.

    The oldest membership is the user's default organization.
    """

    __tablename__ = "organization_members"

    id = Column(String(24), primary_key=True, default=new_id)
    organization_id = Column(String(24), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(24), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(Enum(MemberRole, values_callable=lambda x: [e.value for e in x]), nullable=False, default=MemberRole.MEMBER)
    joined_at = Column(DateTime, nullable=False, default=utcnow)

    # Constraints
    __table_args__ = (
        UniqueConstraint("organization_id", "user_id", name="unique_org_user"),
    )

    def __repr__(self) -> str:
        return f"<OrganizationMember {self.user_id} in {self.organization_id}>"


class Project(OrganizationOwned, Base):
    """Project model. Events are reported against a project."""

    __tablename__ = "projects"

    id = Column(String(24), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    settings = Column(JSON, nullable=False, default=dict)
    next_summary_end_of_day = Column(DateTime)

    # Audit fields
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<Project {self.id}: {self.name}>"


class Token(OrganizationOwned, Base):
    """
    Api key model.

    The id is the key itself. Tokens with a user_id authenticate that user,
    tokens with a project_id are client keys used to submit events.
    """

    __tablename__ = "tokens"

    id = Column(String(40), primary_key=True, default=new_token)
    project_id = Column(String(24), ForeignKey("projects.id", ondelete="CASCADE"), index=True)
    user_id = Column(String(24), ForeignKey("users.id", ondelete="CASCADE"), index=True)
    type = Column(Enum(TokenType, values_callable=lambda x: [e.value for e in x]), nullable=False, default=TokenType.ACCESS)
    notes = Column(Text)
    is_disabled = Column(Boolean, nullable=False, default=False)

    # Audit fields
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
