"""Command line interface for the Storefront Auth service."""

import asyncio
import sys

import click
from alembic import command

from app.core.auth.exceptions import AccountNotFoundException
from app.infrastructure.database.init_db import (
    check_database_health,
    get_alembic_config,
    get_database_info,
    init_database,
)
from app.infrastructure.database.repositories.account_repository import SqlAccountRepository
from app.infrastructure.database.session import close_db_connections, get_session_maker
from app.utils.logging import setup_logging
from app.settings import get_settings


def _run(coro):
    """Run a coroutine and release the engine afterwards."""

    async def runner():
        try:
            return await coro
        finally:
            await close_db_connections()

    return asyncio.run(runner())


async def _update_account_by_email(email: str, **fields) -> None:
    async with get_session_maker()() as session:
        repository = SqlAccountRepository(session)
        account = await repository.get_account_by_email(email)
        if account is None:
            raise AccountNotFoundException(email)
        await repository.update_account(account.id, **fields)
        await session.commit()


@click.group()
def cli():
    """Storefront Auth CLI."""
    setup_logging()


@cli.command()
def init_db():
    """Create database tables and seed the default roles."""
    click.echo("Initializing database...")
    created = _run(init_database())
    click.echo(f"Database initialized successfully! ({created} roles created)")


@cli.command()
def migrate():
    """Run database migrations to the latest version."""
    click.echo("Running database migrations...")
    command.upgrade(get_alembic_config(), "head")
    click.echo("Migrations completed successfully!")


@cli.command()
def current():
    """Show current migration version."""
    command.current(get_alembic_config(), verbose=True)


@cli.command()
@click.argument("email")
def create_admin(email: str):
    """Promote the account with EMAIL to the admin role."""
    settings = get_settings()
    try:
        _run(_update_account_by_email(email, role_id=settings.admin_role_id))
    except AccountNotFoundException as e:
        raise click.ClickException(e.message)
    click.echo(f"Account {email} is now an admin")


@cli.command()
@click.argument("email")
def unlock_account(email: str):
    """Clear the failed-login counter and lockout of EMAIL."""
    try:
        _run(_update_account_by_email(email, failed_login_attempts=0, locked_until=None))
    except AccountNotFoundException as e:
        raise click.ClickException(e.message)
    click.echo(f"Account {email} unlocked")


@cli.command()
def check_db():
    """Check database connectivity and health."""
    click.echo("Checking database health...")

    async def check():
        if not await check_database_health():
            click.echo("✗ Database connection failed")
            return 1

        click.echo("✓ Database connection is healthy")
        info = await get_database_info()
        click.echo("\nDatabase statistics:")
        for table, count in info["tables"].items():
            click.echo(f"  - {table}: {count} records")
        return 0

    sys.exit(_run(check()))


@cli.command()
def show_config():
    """Display current configuration settings."""
    settings = get_settings()

    click.echo("Current configuration:")
    click.echo(f"  Environment: {settings.environment}")
    click.echo(f"  Debug: {settings.debug}")
    click.echo(f"  Database URL: {settings.database_url}")
    click.echo(f"  JWT Algorithm: {settings.jwt_algorithm}")
    click.echo(f"  Access token expire: {settings.access_token_expire_minutes} minutes")
    click.echo(f"  Refresh token expire: {settings.refresh_token_expire_days} days")
    click.echo(
        f"  Lockout: {settings.lockout_threshold} failures -> "
        f"{settings.lockout_duration_hours} hours"
    )
    click.echo(f"  Admin role id: {settings.admin_role_id}")


if __name__ == "__main__":
    cli()
