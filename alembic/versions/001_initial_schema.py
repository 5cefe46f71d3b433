"""Initial schema with organizations, users, projects and tokens.

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'organizations',
        sa.Column('id', sa.String(24), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('settings', sa.JSON, nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.Column('updated_at', sa.DateTime, nullable=False),
    )
    op.create_index('ix_organizations_created_at', 'organizations', ['created_at'])

    op.create_table(
        'users',
        sa.Column('id', sa.String(24), primary_key=True),
        sa.Column('email_address', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(255)),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('is_global_admin', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.Column('updated_at', sa.DateTime, nullable=False),
    )
    op.create_index('ix_users_email_address', 'users', ['email_address'], unique=True)

    op.create_table(
        'organization_members',
        sa.Column('id', sa.String(24), primary_key=True),
        sa.Column('organization_id', sa.String(24), sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.String(24), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role', sa.Enum('owner', 'admin', 'member', name='memberrole'), nullable=False, server_default='member'),
        sa.Column('joined_at', sa.DateTime, nullable=False),
        sa.UniqueConstraint('organization_id', 'user_id', name='unique_org_user'),
    )
    op.create_index('ix_organization_members_organization_id', 'organization_members', ['organization_id'])
    op.create_index('ix_organization_members_user_id', 'organization_members', ['user_id'])

    op.create_table(
        'projects',
        sa.Column('id', sa.String(24), primary_key=True),
        sa.Column('organization_id', sa.String(24), sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('settings', sa.JSON, nullable=False),
        sa.Column('next_summary_end_of_day', sa.DateTime),
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.Column('updated_at', sa.DateTime, nullable=False),
    )
    op.create_index('ix_projects_organization_id', 'projects', ['organization_id'])
    op.create_index('ix_projects_created_at', 'projects', ['created_at'])

    op.create_table(
        'tokens',
        sa.Column('id', sa.String(40), primary_key=True),
        sa.Column('organization_id', sa.String(24), sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('project_id', sa.String(24), sa.ForeignKey('projects.id', ondelete='CASCADE')),
        sa.Column('user_id', sa.String(24), sa.ForeignKey('users.id', ondelete='CASCADE')),
        sa.Column('type', sa.Enum('access', 'authentication', name='tokentype'), nullable=False, server_default='access'),
        sa.Column('notes', sa.Text),
        sa.Column('is_disabled', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.Column('updated_at', sa.DateTime, nullable=False),
    )
    op.create_index('ix_tokens_organization_id', 'tokens', ['organization_id'])
    op.create_index('ix_tokens_project_id', 'tokens', ['project_id'])
    op.create_index('ix_tokens_user_id', 'tokens', ['user_id'])


def downgrade() -> None:
    op.drop_table('tokens')
    op.drop_table('projects')
    op.drop_table('organization_members')
    op.drop_table('users')
    op.drop_table('organizations')
    sa.Enum(name='tokentype').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='memberrole').drop(op.get_bind(), checkfirst=True)
