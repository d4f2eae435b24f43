"""create_rbac_grant_tables

Revision ID: 3c9d2e7a41f0
Revises: 
Create Date: 2026-10-19 09:12:44.218305

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c9d2e7a41f0'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'role_permissions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('role', sa.String(length=50), nullable=False),
        sa.Column('module', sa.String(length=50), nullable=False),
        sa.Column('action', sa.String(length=50), nullable=False),
        sa.Column('allowed', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('role', 'module', 'action', name='uix_role_module_action')
    )
    op.create_index(op.f('ix_role_permissions_id'), 'role_permissions', ['id'], unique=False)
    op.create_index(op.f('ix_role_permissions_role'), 'role_permissions', ['role'], unique=False)

    op.create_table(
        'role_column_access',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('role', sa.String(length=50), nullable=False),
        sa.Column('section', sa.String(length=50), nullable=False),
        sa.Column('column', sa.String(length=100), nullable=False),
        sa.Column('can_read', sa.Boolean(), nullable=False),
        sa.Column('can_write', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('role', 'section', 'column', name='uix_role_section_column')
    )
    op.create_index(op.f('ix_role_column_access_id'), 'role_column_access', ['id'], unique=False)
    op.create_index(op.f('ix_role_column_access_role'), 'role_column_access', ['role'], unique=False)

    op.create_table(
        'type_column_access',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('employee_type', sa.String(length=20), nullable=False),
        sa.Column('section', sa.String(length=100), nullable=False),
        sa.Column('column', sa.String(length=100), nullable=False),
        sa.Column('accessible', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('employee_type', 'section', 'column', name='uix_type_section_column')
    )
    op.create_index(op.f('ix_type_column_access_id'), 'type_column_access', ['id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_type_column_access_id'), table_name='type_column_access')
    op.drop_table('type_column_access')
    op.drop_index(op.f('ix_role_column_access_role'), table_name='role_column_access')
    op.drop_index(op.f('ix_role_column_access_id'), table_name='role_column_access')
    op.drop_table('role_column_access')
    op.drop_index(op.f('ix_role_permissions_role'), table_name='role_permissions')
    op.drop_index(op.f('ix_role_permissions_id'), table_name='role_permissions')
    op.drop_table('role_permissions')
