"""
Service layer for the sheet editor.

This package contains framework-agnostic business logic that can be used
by the API, the CLI, or any other interface.
"""

__version__ = "1.0.0"
