#!/usr/bin/env python3
"""
Sheet Editor CLI - drive the editable table from the terminal.

Talks to the FastAPI backend over HTTP through the same TableController the
UI logic uses, so client-side validation applies to add and edit.

Usage:
    python scripts/sheet_editor_cli.py upload budget.xlsx
    python scripts/sheet_editor_cli.py show Jan
    python scripts/sheet_editor_cli.py add Jan Bob 5 2026-10-03
    python scripts/sheet_editor_cli.py edit Jan 0 Bob 20 2026-10-03
    python scripts/sheet_editor_cli.py delete Jan 0 --yes
    python scripts/sheet_editor_cli.py export Jan --output jan.xlsx
"""

import os
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import logging
from typing import Any, List

import click
from dotenv import load_dotenv

from client.api_client import SheetsApiClient
from client.table_controller import TableController

# Load environment variables
load_dotenv()

# Configure logging
LOG_LEVEL = os.getenv('LOG_LEVEL', 'WARNING')
LOG_FILE = os.getenv('LOG_FILE', '')

_handlers = [logging.StreamHandler(sys.stderr)]
if LOG_FILE:
    _handlers.append(logging.FileHandler(LOG_FILE))

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=_handlers
)

logger = logging.getLogger('sheet_editor_cli')

# Configuration
DEFAULT_API_URL = os.getenv('API_URL', 'http://localhost:5000')


def parse_cell(value: str) -> Any:
    """Send numeric-looking arguments as numbers, everything else as text."""
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        return value


def make_controller(api_url: str, **kwargs) -> TableController:
    return TableController(SheetsApiClient(api_url), **kwargs)


def open_sheet(controller: TableController, sheet: str):
    """Attach to a stored sheet and load it, exiting on failure."""
    controller.attach([sheet])
    if not controller.select_sheet(sheet):
        fail(controller.error)


def fail(message: str):
    click.echo(f"✗ {message}", err=True)
    sys.exit(1)


def print_table(controller: TableController):
    """Print headers and data rows with their local row numbers."""
    click.echo(f"\nSheet: {controller.active_sheet} ({len(controller.data_rows)} rows)")
    if controller.headers:
        click.echo("     " + " | ".join(str(h) for h in controller.headers))
        click.echo("-" * 50)
    for i, row in enumerate(controller.data_rows):
        click.echo(f"{i:>4} " + " | ".join('' if v is None else str(v) for v in row))


def report_validation(controller: TableController):
    click.echo("✗ Row rejected:", err=True)
    for problem in controller.validation_errors:
        click.echo(f"  - {problem}", err=True)
    sys.exit(1)


@click.group()
@click.option('--api-url', envvar='API_URL', default=DEFAULT_API_URL, show_default=True,
              help='Sheet editor backend URL')
@click.pass_context
def cli(ctx, api_url):
    """Upload spreadsheets and edit their rows."""
    ctx.ensure_object(dict)
    ctx.obj['api_url'] = api_url


@cli.command('upload')
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def upload_cmd(ctx, file: str):
    """Upload FILE and show its first sheet."""
    def on_progress(percent: int):
        bar_length = 40
        filled = int(bar_length * percent / 100)
        bar = '█' * filled + '░' * (bar_length - filled)
        click.echo(f"\r[{bar}] {percent}%", nl=False)

    controller = make_controller(ctx.obj['api_url'], on_progress=on_progress)

    click.echo(f"📤 Uploading {file} to {ctx.obj['api_url']}...")
    ok = controller.select_file(file)
    click.echo()

    if not ok and not controller.sheet_names:
        fail(controller.error)

    click.echo(f"✓ Sheets: {', '.join(controller.sheet_names) or '(none)'}")
    if controller.error:
        fail(controller.error)
    if controller.active_sheet:
        print_table(controller)


@cli.command('show')
@click.argument('sheet')
@click.pass_context
def show_cmd(ctx, sheet: str):
    """Show the rows of SHEET."""
    controller = make_controller(ctx.obj['api_url'])
    open_sheet(controller, sheet)
    print_table(controller)


@cli.command('add')
@click.argument('sheet')
@click.argument('values', nargs=-1, required=True)
@click.pass_context
def add_cmd(ctx, sheet: str, values: List[str]):
    """Append a row with VALUES to SHEET."""
    controller = make_controller(ctx.obj['api_url'])
    open_sheet(controller, sheet)

    controller.begin_add()
    for column, value in enumerate(values):
        controller.set_new_cell(column, parse_cell(value))

    if not controller.submit_add():
        if controller.validation_dialog_open:
            report_validation(controller)
        fail(controller.error)

    click.echo("✓ Row added")
    print_table(controller)


@cli.command('edit')
@click.argument('sheet')
@click.argument('row', type=int)
@click.argument('values', nargs=-1, required=True)
@click.pass_context
def edit_cmd(ctx, sheet: str, row: int, values: List[str]):
    """Replace data row ROW of SHEET with VALUES (row 0 is the first row under the headers)."""
    controller = make_controller(ctx.obj['api_url'])
    open_sheet(controller, sheet)

    try:
        controller.begin_edit(row)
    except IndexError as e:
        fail(str(e))

    for column, value in enumerate(values):
        controller.set_edit_cell(column, parse_cell(value))

    if not controller.submit_edit():
        if controller.validation_dialog_open:
            report_validation(controller)
        fail(controller.error)

    click.echo(f"✓ Row {row} updated")
    print_table(controller)


@cli.command('delete')
@click.argument('sheet')
@click.argument('row', type=int)
@click.option('--yes', is_flag=True, help='Skip the confirmation prompt')
@click.pass_context
def delete_cmd(ctx, sheet: str, row: int, yes: bool):
    """Delete data row ROW of SHEET."""
    controller = make_controller(ctx.obj['api_url'])
    open_sheet(controller, sheet)

    try:
        controller.request_delete(row)
    except IndexError as e:
        fail(str(e))

    if not yes and not click.confirm(f"Delete row {row}: {controller.data_rows[row]}?"):
        controller.cancel_delete()
        click.echo("Cancelled")
        return

    if not controller.confirm_delete():
        fail(controller.error)

    click.echo(f"✓ Row {row} deleted")
    print_table(controller)


@cli.command('export')
@click.argument('sheet')
@click.option('--output', '-o', type=click.Path(dir_okay=False), help='Output .xlsx path')
@click.pass_context
def export_cmd(ctx, sheet: str, output: str):
    """Export SHEET to an .xlsx file."""
    controller = make_controller(ctx.obj['api_url'])
    open_sheet(controller, sheet)

    path = controller.export(output)
    click.echo(f"✓ Exported {len(controller.data_rows)} rows to {path}")


if __name__ == '__main__':
    cli()
