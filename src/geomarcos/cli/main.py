import typer

from .._version import __version__
from .config import app as config_app
from .extract import extract_command
from .markers import app as markers_app


__all__ = ["app", "run"]


app = typer.Typer(help="Survey marker extraction and coordinate maintenance", add_completion=False)


@app.callback(invoke_without_command=True)
def version_callback(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show geomarcos version and exit", is_eager=True),
) -> None:
    """Handle global options before any sub-command executes."""

    if version:
        typer.echo(f"geomarcos {__version__}")
        raise typer.Exit()
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


app.command("extract", help="Extract vertices and metadata from memoriais descritivos.")(extract_command)
app.add_typer(markers_app, name="markers")
app.add_typer(config_app, name="config")


def run() -> None:
    """Entry point compatible with ``python -m geomarcos.cli`` and console scripts."""

    from typer.main import get_command

    cli = get_command(app)
    cli()
