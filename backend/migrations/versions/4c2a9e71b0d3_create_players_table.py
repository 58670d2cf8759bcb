"""create players table with leaderboard index

Revision ID: 4c2a9e71b0d3
Revises:
Create Date: 2025-09-14 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4c2a9e71b0d3'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    # Tables may already exist from `flask init-db`
    if 'players' in set(insp.get_table_names()):
        return

    op.create_table(
        'players',
        sa.Column('name', sa.String(length=64), nullable=False),
        sa.Column('wins', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('losses', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('draws', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('name'),
        sa.CheckConstraint('wins >= 0 AND losses >= 0 AND draws >= 0', name='ck_players_counters_non_negative'),
    )
    op.create_index('idx_leaderboard', 'players', ['wins', 'draws', 'losses', 'name'])


def downgrade():
    op.drop_index('idx_leaderboard', table_name='players')
    op.drop_table('players')
