"""create daily_snapshots and nav_settings tables

Revision ID: 1c7e5a9d2f40
Revises:
Create Date: 2025-06-02 09:14:27.318404

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
import sqlmodel

# revision identifiers, used by Alembic.
revision: str = '1c7e5a9d2f40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'daily_snapshots',
        sa.Column('id', sqlmodel.sql.sqltypes.GUID(), nullable=False),
        sa.Column('user_id', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('wallet_address', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('total_nav_usd', sa.Float(), nullable=False),
        sa.Column('tokens_nav_usd', sa.Float(), nullable=False),
        sa.Column('positions_nav_usd', sa.Float(), nullable=False),
        sa.Column('data_source', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('tokens', sa.JSON(), nullable=True),
        sa.Column('positions', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'user_id', 'wallet_address', 'date', name='uq_daily_snapshots_user_wallet_date'
        ),
    )
    op.create_index(op.f('ix_daily_snapshots_user_id'), 'daily_snapshots', ['user_id'], unique=False)
    op.create_index(op.f('ix_daily_snapshots_date'), 'daily_snapshots', ['date'], unique=False)

    op.create_table(
        'nav_settings',
        sa.Column('id', sqlmodel.sql.sqltypes.GUID(), nullable=False),
        sa.Column('user_id', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('month', sa.Integer(), nullable=False),
        sa.Column('fee_settings', sa.JSON(), nullable=True),
        sa.Column('nav_calculations', sa.JSON(), nullable=True),
        sa.Column('portfolio_data', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'year', 'month', name='uq_nav_settings_user_year_month'),
    )
    op.create_index(op.f('ix_nav_settings_user_id'), 'nav_settings', ['user_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_nav_settings_user_id'), table_name='nav_settings')
    op.drop_table('nav_settings')
    op.drop_index(op.f('ix_daily_snapshots_date'), table_name='daily_snapshots')
    op.drop_index(op.f('ix_daily_snapshots_user_id'), table_name='daily_snapshots')
    op.drop_table('daily_snapshots')
    # ### end Alembic commands ###
