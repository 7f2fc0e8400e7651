import click


@click.group()
def main() -> None:
    """Taskdeck - project workspaces with identity-provider sync."""


@main.command()
@click.option("--host", default=None, help="Bind host (default: from TASKDECK_HOST or 0.0.0.0).")
@click.option("--port", default=None, type=int, help="Bind port (default: from TASKDECK_PORT or 8000).")
@click.option("--reload", is_flag=True, default=False, help="Enable auto-reload for development.")
def serve(host: str | None, port: int | None, reload: bool) -> None:
    """Start the Taskdeck service (workspace API + identity webhooks)."""
    import uvicorn

    from taskdeck.service.settings import TaskdeckSettings

    settings = TaskdeckSettings()

    uvicorn.run(
        "taskdeck.service.app:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_level="warning",  # uvicorn's own logging is intercepted by loguru
    )


@main.command()
@click.option("--select", "select_id", default=None, help="Workspace id to focus (persisted for next time).")
@click.option("--api-url", default=None, help="Service URL (default: from TASKDECK_CLIENT_API_URL).")
def workspaces(select_id: str | None, api_url: str | None) -> None:
    """Hydrate the workspace cache from the service and print the active workspace."""
    import asyncio

    from taskdeck.client import FileSelectionStore, HttpRemoteDataSource, MutationResult, WorkspaceStateContainer
    from taskdeck.service.log import setup_logging
    from taskdeck.service.settings import ClientSettings

    settings = ClientSettings()
    setup_logging("WARNING")
    if not settings.api_token:
        raise click.UsageError("TASKDECK_CLIENT_API_TOKEN is not set.")
    token = settings.api_token

    async def get_token() -> str:
        return token

    container = WorkspaceStateContainer(
        HttpRemoteDataSource(api_url or settings.api_url, timeout=settings.timeout),
        FileSelectionStore(settings.state_file),
    )
    asyncio.run(container.hydrate(get_token))

    if select_id is not None and container.select_workspace(select_id) is not MutationResult.APPLIED:
        raise click.ClickException(f"No workspace with id {select_id!r}.")

    for workspace in container.workspaces:
        marker = "*" if workspace.id == container.active_id else " "
        click.echo(f"{marker} {workspace.id}  {workspace.name}")

    current = container.current_workspace
    if current is None:
        click.echo("No active workspace.")
        return
    click.echo("")
    for project in current.projects:
        click.echo(f"{project.name or project.id} ({len(project.tasks)} tasks)")
        for task in project.tasks:
            click.echo(f"  [{task.status}] {task.title or task.id}")


# ---------------------------------------------------------------------------
# Database management
# ---------------------------------------------------------------------------


def _alembic_config():
    """Build an Alembic Config from the packaged alembic.ini."""
    from pathlib import Path

    from alembic.config import Config

    ini_path = Path(__file__).parent / "service" / "alembic.ini"
    return Config(str(ini_path))


@main.group()
def db() -> None:
    """Database migration and management commands."""


@db.command()
@click.option("--revision", default="head", help="Target revision (default: head).")
def upgrade(revision: str) -> None:
    """Run database migrations forward."""
    from alembic import command

    command.upgrade(_alembic_config(), revision)
    click.echo(f"Database upgraded to {revision}.")


@db.command()
@click.option("--revision", default="-1", help="Target revision (default: -1, one step back).")
def downgrade(revision: str) -> None:
    """Roll back database migrations."""
    from alembic import command

    command.downgrade(_alembic_config(), revision)
    click.echo(f"Database downgraded to {revision}.")


@db.command()
@click.argument("message")
def migrate(message: str) -> None:
    """Autogenerate a new migration from model changes."""
    from alembic import command

    command.revision(_alembic_config(), message=message, autogenerate=True)
    click.echo(f"Migration generated: {message}")


@db.command()
def current() -> None:
    """Show current database revision."""
    from alembic import command

    command.current(_alembic_config(), verbose=True)


@db.command()
def history() -> None:
    """Show migration history."""
    from alembic import command

    command.history(_alembic_config(), verbose=True)


if __name__ == "__main__":
    main()
