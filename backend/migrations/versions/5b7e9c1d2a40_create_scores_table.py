"""create scores table

Revision ID: 5b7e9c1d2a40
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5b7e9c1d2a40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    if 'scores' in set(insp.get_table_names()):
        return

    op.create_table(
        'scores',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('key', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=20), nullable=False),
        sa.Column('waves', sa.Integer(), nullable=False),
        sa.Column('kills', sa.Integer(), nullable=False),
        sa.Column('towers_built', sa.Integer(), nullable=False),
        sa.Column('towers_lost', sa.Integer(), nullable=False),
        sa.Column('time_s', sa.Integer(), nullable=False),
        sa.Column('date', sa.String(length=10), nullable=False),
        sa.Column('timestamp', sa.BigInteger(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('scores') as batch_op:
        batch_op.create_index('ix_scores_key', ['key'], unique=True)
        batch_op.create_index('ix_scores_waves', ['waves'], unique=False)


def downgrade():
    with op.batch_alter_table('scores') as batch_op:
        batch_op.drop_index('ix_scores_waves')
        batch_op.drop_index('ix_scores_key')
    op.drop_table('scores')
