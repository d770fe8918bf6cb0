"""
Shopfloor CLI - Command line interface for the gateway.

Usage:
    shopfloor --help              Show all commands
    shopfloor serve               Run the HTTP API
    shopfloor diagnose KOL        Check a partition's database and procedures
"""

import asyncio

import typer

app = typer.Typer(
    name="shopfloor",
    help="Shopfloor Gateway CLI",
    no_args_is_help=True,
)


def _print_success(message: str) -> None:
    """Print a success message."""
    typer.echo(f"  ✅ {message}")


def _print_warning(message: str) -> None:
    """Print a warning message."""
    typer.echo(f"  ⚠️ {message}")


def _print_error(message: str) -> None:
    """Print an error message to stderr."""
    typer.echo(f"❌ {message}", err=True)


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", "--host", help="Bind address"),
    port: int = typer.Option(3001, "--port", help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("shopfloor.main:app", host=host, port=port, reload=reload)


@app.command()
def diagnose(
    database: str = typer.Argument(..., help="Partition to check (KOL or AHM)"),
) -> None:
    """Show which database a partition connects to and which procedures exist."""
    from shopfloor.core.database import PartitionConfigError, dispose_engines
    from shopfloor.core.logging import setup_logging
    from shopfloor.schemas.common import Partition
    from shopfloor.schemas.production import ProductionKind
    from shopfloor.services.login import LOGIN_PROCEDURE
    from shopfloor.services.pending import FIND_JOB_CARDS_PROCEDURE, PENDING_PROCEDURE
    from shopfloor.services.procedures import get_procedure_invoker
    from shopfloor.services.production import get_descriptor
    from shopfloor.services.schedule import CHANGE_MACHINE_PROCEDURE, REORDER_PROCEDURE, SCHEDULE_PROCEDURE

    setup_logging()

    try:
        partition = Partition.parse(database)
    except ValueError as e:
        _print_error(str(e))
        raise typer.Exit(1) from e

    procedures = [
        LOGIN_PROCEDURE,
        PENDING_PROCEDURE,
        FIND_JOB_CARDS_PROCEDURE,
        *(get_descriptor(kind).name for kind in ProductionKind),
        SCHEDULE_PROCEDURE,
        REORDER_PROCEDURE,
        CHANGE_MACHINE_PROCEDURE,
    ]

    async def _run() -> int:
        invoker = get_procedure_invoker()
        try:
            current_db = await invoker.current_database(partition)
            typer.echo(f"\n{partition.value} -> {current_db}")
            missing = 0
            for procedure in procedures:
                if await invoker.procedure_exists(partition, procedure):
                    _print_success(procedure)
                else:
                    _print_warning(f"{procedure} is missing")
                    missing += 1
            return missing
        finally:
            await dispose_engines()

    try:
        missing = asyncio.run(_run())
    except PartitionConfigError as e:
        _print_error(str(e))
        raise typer.Exit(1) from e

    if missing:
        raise typer.Exit(2)


if __name__ == "__main__":
    app()
