"""Models package for the sheet editor."""
from backend.models.schema import Base, Sheet

__all__ = ['Base', 'Sheet']
