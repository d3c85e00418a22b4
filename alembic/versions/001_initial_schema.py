"""Initial schema for the sheet editor

Revision ID: 001_initial_schema
Revises: 
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create sheets table (no unique constraint on name: re-imports add documents)
    op.create_table(
        'sheets',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False,
                  comment='Worksheet name as found in the uploaded file'),
        sa.Column('rows', sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), 'postgresql'),
                  nullable=False,
                  comment='Ordered row grid; row 0 is the header row by client convention'),
        sa.Column('created_at', sa.TIMESTAMP(), server_default=sa.text('CURRENT_TIMESTAMP'),
                  nullable=False, comment='Import timestamp'),
        sa.Column('updated_at', sa.TIMESTAMP(), server_default=sa.text('CURRENT_TIMESTAMP'),
                  nullable=False, comment='Last row mutation timestamp'),
        sa.PrimaryKeyConstraint('id'),
        comment='One document per imported worksheet'
    )

    op.create_index('idx_sheets_name', 'sheets', ['name'])


def downgrade() -> None:
    op.drop_index('idx_sheets_name', table_name='sheets')
    op.drop_table('sheets')
