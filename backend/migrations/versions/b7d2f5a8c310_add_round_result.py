"""add round_result table

Revision ID: b7d2f5a8c310
Revises: a1c4e7d2b901
Create Date: 2026-10-09 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'b7d2f5a8c310'
down_revision = 'a1c4e7d2b901'
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    if 'round_result' in set(insp.get_table_names()):
        return
    op.create_table(
        'round_result',
        sa.Column('seq', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('tournament_id', sa.String(length=36), sa.ForeignKey('tournament.id'), nullable=False),
        sa.Column('question_id', sa.String(length=36), nullable=False),
        sa.Column('round_number', sa.Integer(), nullable=False),
        sa.Column('outcome', sa.String(length=16), nullable=False),
        sa.Column('elapsed_seconds', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('selected_answer', sa.Text(), nullable=True),
        sa.Column('correct', sa.Boolean(), nullable=True),
        sa.Column('points_awarded', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('finished_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_round_result_id', 'round_result', ['id'], unique=True)
    op.create_index('ix_round_result_tournament_id', 'round_result', ['tournament_id'])


def downgrade():
    op.drop_index('ix_round_result_tournament_id', table_name='round_result')
    op.drop_index('ix_round_result_id', table_name='round_result')
    op.drop_table('round_result')
