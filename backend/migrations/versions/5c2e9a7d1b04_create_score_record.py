"""create score_record table

Revision ID: 5c2e9a7d1b04
Revises:
Create Date: 2026-10-19 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c2e9a7d1b04'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    if 'score_record' in insp.get_table_names():
        return
    op.create_table(
        'score_record',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('nickname', sa.String(length=24), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False),
        sa.Column('played_at', sa.String(length=32), nullable=False),
        sa.Column('ip_masked', sa.String(length=64), nullable=True),
        sa.Column('ip_key', sa.String(length=16), nullable=True),
        sa.Column('ip_full', sa.String(length=64), nullable=True),
    )
    op.create_index('ix_score_record_played_at', 'score_record', ['played_at'])
    op.create_index('ix_score_record_ip_key', 'score_record', ['ip_key'])


def downgrade():
    op.drop_index('ix_score_record_ip_key', table_name='score_record')
    op.drop_index('ix_score_record_played_at', table_name='score_record')
    op.drop_table('score_record')
