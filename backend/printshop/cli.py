# Overview: Flask CLI command groups for bootstrap, accounts and reports.

# backend/printshop/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# Shop bootstrap/repair:
# - python -m flask shop init
#   Idempotent: creates tables, the default owner account and the store profile.
# - python -m flask shop reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Accounts:
# - python -m flask accounts list
# - python -m flask accounts create --username kasir1 --password "rahasia123" --role cashier
#   Prompts for any option that is omitted.
#
# Reports:
# - python -m flask reports summary --period monthly
# - python -m flask reports export --period yearly --output laporan_yearly.csv

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db, get_store
from .permissions import ROLES, system_actor
from .services import auth_service, reporting_service, settings_service
from .services.auth_service import PasswordValidationError
from .validation import ConflictError, ValidationError


@click.group('shop')
def shop_group():
    """Shop bootstrap and repair commands."""


@shop_group.command('init')
@with_appcontext
def init_shop():
    """
    Initialize the shop database.

    Creates:
    - All tables (if missing)
    - Default owner account, only when there are no accounts yet
    - Store profile with default receipt header

    SECURITY: Change the owner password immediately in production!
    """
    click.echo("START Initializing print shop...")

    db.create_all()
    click.echo("PASS Tables ready")

    store = get_store()
    owner = auth_service.ensure_default_owner(store)
    if owner:
        click.echo(f"PASS Created owner account: {owner.username}")
    else:
        click.echo("PASS Accounts already exist, owner not seeded")

    settings = settings_service.ensure_store_settings(store)
    click.echo(f"PASS Store profile: {settings.store_name}")

    click.echo("DONE Print shop initialized.")


@shop_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask shop init' to initialize.")


@click.group('accounts')
def accounts_group():
    """Staff account commands."""


@accounts_group.command('list')
@with_appcontext
def list_accounts():
    """List all accounts with their roles."""
    accounts = auth_service.list_accounts(get_store(), system_actor())

    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\n" + "="*72)
    click.echo(f"{'ID':<34} {'Username':<20} {'Role':<12} {'Logged in'}")
    click.echo("="*72)

    for account in accounts:
        logged_in = "Yes" if account.is_logged_in else "No"
        click.echo(f"{account.id:<34} {account.username:<20} {account.role:<12} {logged_in}")

    click.echo("="*72 + "\n")


@accounts_group.command('create')
@click.option('--username', prompt=True)
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--role', type=click.Choice(ROLES), prompt=True)
@with_appcontext
def create_account(username, password, role):
    """Create a staff account."""
    try:
        account = auth_service.create_account(get_store(), username, password, role, system_actor())
    except PasswordValidationError as e:
        raise click.ClickException(f"Password validation failed: {e}")
    except (ValidationError, ConflictError) as e:
        raise click.ClickException(str(e))

    click.echo(f"PASS Created account {account.username} ({account.role}), id {account.id}")


@click.group('reports')
def reports_group():
    """Report commands."""


@reports_group.command('summary')
@click.option('--period', type=click.Choice(reporting_service.PERIODS), default=reporting_service.PERIOD_DAILY)
@with_appcontext
def report_summary(period):
    """Print sales, expenses, profit and cash flow for the period."""
    report = reporting_service.build_report(get_store(), period, system_actor())

    click.echo(f"Period:         {period} ({report.start:%Y-%m-%d} .. {report.end:%Y-%m-%d})")
    click.echo(f"Orders:         {len(report.orders)}")
    click.echo(f"Total sales:    {report.total_sales:.2f}")
    click.echo(f"Total expenses: {report.total_expenses:.2f}")
    click.echo(f"Profit:         {report.profit:.2f}")
    click.echo(f"Cash in:        {report.cash_in:.2f}")
    click.echo(f"Cash flow:      {report.cash_flow:.2f}")


@reports_group.command('export')
@click.option('--period', type=click.Choice(reporting_service.PERIODS), default=reporting_service.PERIOD_DAILY)
@click.option('--output', type=click.Path(dir_okay=False, writable=True), default=None,
              help='Target file (default: laporan_<period>.csv)')
@with_appcontext
def report_export(period, output):
    """Write the period's CSV export to a file."""
    filename, content = reporting_service.export_report(get_store(), period, system_actor())
    target = output or filename
    with open(target, "w", encoding="utf-8", newline="") as fh:
        fh.write(content)
    current_app.logger.info("Exported %s report to %s", period, target)
    click.echo(f"PASS Wrote {target}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(shop_group)
    app.cli.add_command(accounts_group)
    app.cli.add_command(reports_group)
