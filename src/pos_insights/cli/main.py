import asyncio
import logging
from typing import Optional

import typer
from pymongo.errors import PyMongoError

from ..core.config import (
    DEFAULT_ADMIN_PASSWORD,
    DEFAULT_ADMIN_USERNAME,
    DEMO_MODE,
    MONGODB_DATABASE,
    MONGODB_URL,
)
from ..core.database import create_client, ensure_indexes
from ..core.policy import WriteNotAllowed, policy_for
from ..features.auth import service as auth_service
from ..features.auth.permissions import UserRole
from ..features.auth.schemas import UserCreate
from ..features.auth.security import get_password_hash
from ..features.reports import service as report_service
from ..features.reports.exceptions import ReportError
from ..features.reports.executor import MongoQueryExecutor
from ..features.reports.periods import ReportPeriod, resolve_period, system_clock

logger = logging.getLogger(__name__)

app = typer.Typer(name="pos-insights", help="CLI for managing POS Insights data.")


class DBConnection:
    """Opens the MongoDB client for one command and yields the database."""

    def __init__(self, url: str = MONGODB_URL, database: str = MONGODB_DATABASE):
        self.url = url
        self.database_name = database
        self.client = None

    async def __aenter__(self):
        self.client = create_client(self.url)
        return self.client[self.database_name]

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.client.close()


def _fail(message: str) -> None:
    typer.secho(message, fg=typer.colors.RED)
    raise typer.Exit(code=1)


# User management commands
user_app = typer.Typer(name="users", help="Manage user accounts.")
app.add_typer(user_app)

@user_app.command("create-admin")
def create_admin_user_command(
    username: str = typer.Option(..., prompt=True, help="Username for the new super admin."),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True, help="Password for the new super admin.")
):
    """Creates a new SUPER_ADMIN user."""
    asyncio.run(_create_admin_user(username, password))

async def _create_admin_user(username: str, password: str):
    async with DBConnection() as db:
        typer.echo(f"Attempting to create super admin user: {username}...")
        try:
            user_in = UserCreate(username=username, password=password, role=UserRole.SUPER_ADMIN)
        except ValueError as e:
            _fail(f"Error: {e}")
        if await auth_service.get_user_by_username(db, username):
            _fail(f"Error: User with username '{username}' already exists.")
        try:
            user = await auth_service.create_user(
                db, user_in, get_password_hash(password), policy_for(DEMO_MODE)
            )
        except WriteNotAllowed as e:
            _fail(f"Error: {e.message}")
        typer.secho(f"Super admin '{user.username}' created successfully with ID: {user.id}", fg=typer.colors.GREEN)

@user_app.command("promote-to-admin")
def promote_user_to_admin_command(
    username: str = typer.Argument(..., help="The username of the user to promote to admin.")
):
    """Promotes an existing user to the ADMIN role."""
    asyncio.run(_promote_user_to_admin(username))

async def _promote_user_to_admin(username: str):
    async with DBConnection() as db:
        typer.echo(f"Attempting to promote user '{username}' to admin...")
        user = await auth_service.get_user_by_username(db, username)
        if not user:
            _fail(f"Error: User with username '{username}' not found.")
        if user.role in (UserRole.ADMIN, UserRole.SUPER_ADMIN):
            typer.secho(f"User '{username}' is already an admin.", fg=typer.colors.YELLOW)
            raise typer.Exit(code=0)
        if not user.is_active:
            _fail(f"Error: User '{username}' is currently inactive. Activate the user before promoting to admin.")
        try:
            await auth_service.set_user_role(db, username, UserRole.ADMIN, policy_for(DEMO_MODE))
        except WriteNotAllowed as e:
            _fail(f"Error: {e.message}")
        typer.secho(f"User '{username}' has been successfully promoted to admin.", fg=typer.colors.GREEN)

async def _set_active(username: str, is_active: bool):
    verb = "enable" if is_active else "disable"
    state = "active" if is_active else "inactive"
    async with DBConnection() as db:
        typer.echo(f"Attempting to {verb} user account '{username}'...")
        user = await auth_service.get_user_by_username(db, username)
        if not user:
            _fail(f"Error: User with username '{username}' not found.")
        if user.is_active == is_active:
            typer.secho(f"User '{username}' is already {state}.", fg=typer.colors.YELLOW)
            raise typer.Exit(code=0)
        try:
            await auth_service.set_user_active(db, username, is_active, policy_for(DEMO_MODE))
        except WriteNotAllowed as e:
            _fail(f"Error: {e.message}")
        typer.secho(f"User account '{username}' has been successfully {verb}d.", fg=typer.colors.GREEN)

@user_app.command("disable-user")
def disable_user_account_command(
    username: str = typer.Argument(..., help="The username of the user to disable.")
):
    """Disables an existing user's account."""
    asyncio.run(_set_active(username, False))

@user_app.command("enable-user")
def enable_user_account_command(
    username: str = typer.Argument(..., help="The username of the user to enable.")
):
    """Enables an existing user's account."""
    asyncio.run(_set_active(username, True))

@user_app.command("seed-default")
def seed_default_user_command():
    """Creates the default super admin if no user exists yet."""
    asyncio.run(_seed_default_user())

async def _seed_default_user():
    async with DBConnection() as db:
        user = await auth_service.seed_default_user(
            db, DEFAULT_ADMIN_USERNAME, get_password_hash(DEFAULT_ADMIN_PASSWORD)
        )
        if user is None:
            typer.secho("Users already exist, nothing to seed.", fg=typer.colors.YELLOW)
        else:
            typer.secho(f"Default user '{user.username}' created.", fg=typer.colors.GREEN)


# Database maintenance
db_app = typer.Typer(name="db", help="Database maintenance.")
app.add_typer(db_app)

@db_app.command("ensure-indexes")
def ensure_indexes_command():
    """Creates the indexes the reports rely on."""
    asyncio.run(_ensure_indexes())

async def _ensure_indexes():
    async with DBConnection() as db:
        for name in await ensure_indexes(db):
            typer.echo(name)


# Reports
report_app = typer.Typer(name="reports", help="Generate reports from the command line.")
app.add_typer(report_app)

@report_app.command("dashboard")
def dashboard_report_command(
    period: ReportPeriod = typer.Option(ReportPeriod.MONTH, help="Calendar period containing today."),
    compare: bool = typer.Option(False, "--compare/--no-compare", help="Include the previous period."),
    year: Optional[int] = typer.Option(None, help="Year of the monthly trend, defaults to the current year."),
):
    """Prints the dashboard report as JSON."""
    asyncio.run(_dashboard_report(period, compare, year))

async def _dashboard_report(period: ReportPeriod, compare: bool, year: Optional[int]):
    now = system_clock()
    window = resolve_period(period, now)
    async with DBConnection() as db:
        try:
            report = await report_service.generate_dashboard_report(
                MongoQueryExecutor(db),
                window.start,
                window.end,
                year=year if year is not None else now.year,
                compare_to_previous=compare,
            )
        except (ReportError, PyMongoError) as e:
            _fail(f"Error: {e}")
    typer.echo(report.model_dump_json(by_alias=True, indent=2))


if __name__ == "__main__":
    app()
