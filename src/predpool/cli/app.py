"""Root CLI app - global options and subcommand registration."""

from pathlib import Path

import typer

from predpool import __version__
from predpool.config import configure_logging, get_settings

app = typer.Typer(
    name="predpool",
    help="predpool - inspect the prediction market ledger (markets, bets, event log).",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    config_dir: Path | None = typer.Option(
        None, "--config-dir", "-C", help="Config directory (default: $PREDPOOL_CONFIG_DIR, ./config)"
    ),
    profile: str | None = typer.Option(None, "--profile", "-p", help="Profile overlay, e.g. dev"),
    db: Path | None = typer.Option(None, "--db", help="Ledger database path (overrides storage.db_path)"),
) -> None:
    """Load settings once; subcommands read them from ctx.obj."""
    settings = get_settings(profile, config_dir)
    if db is not None:
        settings.storage["db_path"] = str(db)
    configure_logging(settings)
    ctx.obj = {"settings": settings}


@app.command("version")
def version() -> None:
    """Print the package version."""
    typer.echo(__version__)


from predpool.cli import bets, log, markets  # noqa: E402

app.add_typer(markets.app, name="markets")
app.add_typer(bets.app, name="bets")
app.add_typer(log.app, name="log")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
