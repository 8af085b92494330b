"""create templates, sessions, session_players and scores

Revision ID: 5c2d7e91a0b4
Revises:
Create Date: 2026-10-19 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c2d7e91a0b4'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'templates' not in existing_tables:
        op.create_table(
            'templates',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('name', sa.String(length=128), nullable=False, unique=True),
            sa.Column('min_players', sa.Integer(), nullable=False),
            sa.Column('max_players', sa.Integer(), nullable=False),
            sa.Column('win_condition', sa.String(length=32), nullable=False),
            sa.Column('round_structure', sa.String(length=32), nullable=False),
            sa.Column('default_round_names', sa.Text(), nullable=False, server_default='[]'),
        )

    if 'sessions' not in existing_tables:
        op.create_table(
            'sessions',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('template_id', sa.Integer(), sa.ForeignKey('templates.id'), nullable=False),
            sa.Column('played_at', sa.Date(), nullable=False),
            sa.Column('is_finished', sa.Boolean(), nullable=False, server_default=sa.false()),
        )
        op.create_index('ix_sessions_template_id', 'sessions', ['template_id'])
        op.create_index('ix_sessions_played_at', 'sessions', ['played_at'])

    if 'session_players' not in existing_tables:
        op.create_table(
            'session_players',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('session_id', sa.Integer(), sa.ForeignKey('sessions.id'), nullable=False),
            sa.Column('name', sa.String(length=64), nullable=False),
            sa.Column('seat_index', sa.Integer(), nullable=False),
            sa.UniqueConstraint('session_id', 'seat_index', name='uq_session_seat'),
        )
        op.create_index('ix_session_players_session_id', 'session_players', ['session_id'])

    if 'scores' not in existing_tables:
        op.create_table(
            'scores',
            sa.Column('session_id', sa.Integer(), sa.ForeignKey('sessions.id'), nullable=False),
            sa.Column('round_index', sa.Integer(), nullable=False),
            sa.Column('player_id', sa.Integer(), sa.ForeignKey('session_players.id'), nullable=False),
            sa.Column('value', sa.BigInteger(), nullable=False),
            sa.PrimaryKeyConstraint('session_id', 'round_index', 'player_id'),
        )


def downgrade():
    op.drop_table('scores')
    op.drop_index('ix_session_players_session_id', table_name='session_players')
    op.drop_table('session_players')
    op.drop_index('ix_sessions_played_at', table_name='sessions')
    op.drop_index('ix_sessions_template_id', table_name='sessions')
    op.drop_table('sessions')
    op.drop_table('templates')
