"""
Client side of the sheet editor: API client, row validation, the editable
table controller and local export.
"""

from client.api_client import ApiError, SheetsApiClient
from client.row_validator import RowValidator
from client.table_controller import ControllerState, InvalidTransitionError, TableController

__all__ = [
    'ApiError',
    'SheetsApiClient',
    'RowValidator',
    'ControllerState',
    'InvalidTransitionError',
    'TableController',
]
