"""
FastAPI application for the sheet editor.

This package contains the REST API for importing spreadsheets and
editing the rows of the stored sheets.
"""

__version__ = "1.0.0"
