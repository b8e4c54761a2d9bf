"""create user, tournament and question tables

Revision ID: a1c4e7d2b901
Revises:
Create Date: 2026-10-02 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'a1c4e7d2b901'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'user' not in existing_tables:
        op.create_table(
            'user',
            sa.Column('seq', sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column('id', sa.String(length=36), nullable=False),
            sa.Column('username', sa.String(length=64), nullable=False),
            sa.Column('password_hash', sa.String(length=256), nullable=False),
        )
        op.create_index('ix_user_id', 'user', ['id'], unique=True)
        op.create_index('ix_user_username', 'user', ['username'], unique=True)

    if 'tournament' not in existing_tables:
        op.create_table(
            'tournament',
            sa.Column('seq', sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column('id', sa.String(length=36), nullable=False),
            sa.Column('name', sa.String(length=128), nullable=False),
            sa.Column('owner_user_id', sa.String(length=36), sa.ForeignKey('user.id'), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index('ix_tournament_id', 'tournament', ['id'], unique=True)

    if 'question' not in existing_tables:
        op.create_table(
            'question',
            sa.Column('seq', sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column('id', sa.String(length=36), nullable=False),
            sa.Column('category', sa.String(length=128), nullable=False),
            sa.Column('text', sa.Text(), nullable=False),
            sa.Column('answer', sa.Text(), nullable=False),
            sa.Column('choices', sa.Text(), nullable=False),
            sa.Column('points', sa.Integer(), nullable=False),
        )
        op.create_index('ix_question_id', 'question', ['id'], unique=True)


def downgrade():
    op.drop_index('ix_question_id', table_name='question')
    op.drop_table('question')
    op.drop_index('ix_tournament_id', table_name='tournament')
    op.drop_table('tournament')
    op.drop_index('ix_user_username', table_name='user')
    op.drop_index('ix_user_id', table_name='user')
    op.drop_table('user')
