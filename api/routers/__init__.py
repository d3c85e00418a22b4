"""API routers: spreadsheet import and sheet row operations."""
