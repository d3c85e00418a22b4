"""
SQLAlchemy models for the sheet editor.

This module defines the database schema using SQLAlchemy ORM,
matching the schema defined in Alembic migrations.
"""

from sqlalchemy import JSON, Column, Integer, String, TIMESTAMP, Index, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
RowsType = JSON().with_variant(JSONB(), 'postgresql')


class Sheet(Base):
    """
    One worksheet's data, stored as a single document.

    ``rows`` is an ordered list of rows, each an ordered list of cell values.
    A row's position is its only address. ``name`` is not unique: importing
    the same worksheet twice stores two documents.
    """

    __tablename__ = 'sheets'
    __table_args__ = (
        Index('idx_sheets_name', 'name'),
        {'comment': 'One document per imported worksheet'}
    )

    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        nullable=False
    )
    name = Column(
        String(255),
        nullable=False,
        comment='Worksheet name as found in the uploaded file'
    )
    rows = Column(
        RowsType,
        nullable=False,
        default=list,
        comment='Ordered row grid; row 0 is the header row by client convention'
    )
    created_at = Column(
        TIMESTAMP,
        server_default=text('CURRENT_TIMESTAMP'),
        nullable=False,
        comment='Import timestamp'
    )
    updated_at = Column(
        TIMESTAMP,
        server_default=text('CURRENT_TIMESTAMP'),
        nullable=False,
        comment='Last row mutation timestamp'
    )

    @property
    def row_count(self) -> int:
        return len(self.rows or [])

    def __repr__(self):
        return f"<Sheet(id={self.id}, name='{self.name}', rows={self.row_count})>"
