"""Terminal front end for the calculator.

Usage:
    scicalc eval "3+4×(2-1)"              # Evaluate a display expression
    scicalc eval "sin(30)" --angle rad   # Trig in radians
    scicalc keys "12+3 sqrt 16)="        # Replay key presses, show the display
    scicalc repl                         # Interactive session
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from scicalc import __version__
from scicalc.editor import CalculatorSession, Display
from scicalc.engine import CalculatorEngine
from scicalc.keys import feed
from scicalc.settings import AngleMode, Settings

app = typer.Typer(
    name="scicalc",
    help="Scientific calculator",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)

_QUIT_WORDS = {"quit", "exit", ":q"}


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def _settings(angle: str, precision: int) -> Settings:
    try:
        settings = Settings(angle_mode=AngleMode(angle.upper()), precision=precision)
        settings.validate()
    except ValueError as exc:
        err_console.print(f"[red]Invalid settings:[/red] {exc}")
        raise typer.Exit(2)
    return settings


def render_display(display: Display) -> None:
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column(justify="right", style="dim")
    table.add_column(justify="right", min_width=20)
    table.add_row("expr", display.expression_text)
    table.add_row("=", display.result_text)
    table.add_row("mode", f"{display.angle_mode.value}  M={display.memory_text}")
    console.print(table)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    setup_logging(verbose)


@app.command("eval")
def cmd_eval(
    expression: str = typer.Argument(help="Expression as shown on the display, e.g. '5!÷√(4)'"),
    angle: str = typer.Option("DEG", "--angle", "-a", help="Angle mode: DEG or RAD"),
    precision: int = typer.Option(12, "--precision", "-p", help="Significant digits (1-15)"),
) -> None:
    """Evaluate a single expression."""
    engine = CalculatorEngine(_settings(angle, precision))
    result = engine.evaluate(expression)
    if not result.ok:
        err_console.print(f"[red]Error:[/red] {result.reason}")
        raise typer.Exit(1)
    console.print(engine.format_number(result.value), highlight=False)


@app.command("keys")
def cmd_keys(
    text: str = typer.Argument(help="Key presses, e.g. '12+3 sqrt 16)='"),
    angle: str = typer.Option("DEG", "--angle", "-a", help="Angle mode: DEG or RAD"),
) -> None:
    """Replay key presses and print the resulting display."""
    session = CalculatorSession(_settings(angle, 12))
    ignored = feed(session, text)
    if ignored:
        err_console.print(f"[yellow]Ignored:[/yellow] {' '.join(ignored)}")
    render_display(session.display)


@app.command("repl")
def cmd_repl(
    angle: str = typer.Option("DEG", "--angle", "-a", help="Angle mode: DEG or RAD"),
) -> None:
    """Interactive calculator; each line is a sequence of key presses."""
    session = CalculatorSession(_settings(angle, 12))
    console.print(f"scicalc {__version__} - type 'quit' to leave")
    render_display(session.display)
    while True:
        try:
            line = console.input("> ")
        except (EOFError, KeyboardInterrupt):
            break
        if line.strip().lower() in _QUIT_WORDS:
            break
        ignored = feed(session, line)
        if ignored:
            err_console.print(f"[yellow]Ignored:[/yellow] {' '.join(ignored)}")
        render_display(session.display)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
