"""create users, teams and logs tables

Revision ID: 4b7c1d2e9f10
Revises:
Create Date: 2026-10-17 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4b7c1d2e9f10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    # users is provisioned by the organisers and may already exist
    if 'users' not in existing_tables:
        op.create_table(
            'users',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('user', sa.String(length=64), nullable=False),
            sa.Column('team', sa.Integer(), nullable=False),
        )
        op.create_index('ix_users_user', 'users', ['user'], unique=True)
        op.create_index('ix_users_team', 'users', ['team'])

    op.create_table(
        'teams',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user', sa.String(length=64), nullable=False),
        sa.Column('kind', sa.String(length=16), nullable=False),
        sa.Column('detail', sa.Text(), nullable=False),
        sa.Column('level', sa.Integer(), nullable=True),
        sa.Column('team_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_logs_user', 'logs', ['user'])
    op.create_index('ix_logs_team_id', 'logs', ['team_id'])
    op.create_index('ix_logs_team_level', 'logs', ['team_id', 'level'])


def downgrade():
    op.drop_index('ix_logs_team_level', table_name='logs')
    op.drop_index('ix_logs_team_id', table_name='logs')
    op.drop_index('ix_logs_user', table_name='logs')
    op.drop_table('logs')
    op.drop_table('teams')
