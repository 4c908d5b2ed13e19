"""Entry point of the code-health CLI."""

import typer

from .. import __version__
from .commands.analyze import analyze
from .commands.config import init_config
from .output import console

app = typer.Typer(
    name="code-health",
    help="🩺 Code health metrics and diagnostics for Go projects",
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("analyze")(analyze)
app.command("init-config")(init_config)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"code-health {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """🩺 Code health metrics and diagnostics for Go projects."""


if __name__ == "__main__":
    app()
