"""initial_schema

Revision ID: 3a7c2e91b5d4
Revises: 
Create Date: 2026-10-18 09:12:03.214551

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3a7c2e91b5d4'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _listable_columns():
    """Columns shared by every listable entity table."""
    return [
        sa.Column('id', sa.Text(), nullable=False),
        sa.Column('position', sa.BigInteger(), sa.Identity(always=False), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('date_created', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('date_modified', sa.TIMESTAMP(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    # Create workspaces table
    op.create_table('workspaces',
        *_listable_columns(),
        sa.Column('private', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('position', name='workspaces_position_key')
    )

    # Create products table
    op.create_table('products',
        *_listable_columns(),
        sa.Column('price', sa.Numeric(12, 2), nullable=False),
        sa.Column('currency', sa.Text(), nullable=False, server_default=sa.text("'USD'")),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('position', name='products_position_key')
    )

    # Default list order is active rows by newest first
    op.create_index(
        'workspaces_active_created_desc',
        'workspaces',
        ['active', sa.text('date_created DESC')],
        unique=False
    )
    op.create_index(
        'products_active_created_desc',
        'products',
        ['active', sa.text('date_created DESC')],
        unique=False
    )
    op.create_index('products_price', 'products', ['price'], unique=False)


def downgrade() -> None:
    op.drop_index('products_price', table_name='products')
    op.drop_index('products_active_created_desc', table_name='products')
    op.drop_index('workspaces_active_created_desc', table_name='workspaces')

    op.drop_table('products')
    op.drop_table('workspaces')
