"""CLI entrypoint for domtimeline."""

from dataclasses import replace
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import TimelineOptions, load_options


@click.group()
@click.version_option(__version__, prog_name="domtimeline")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, file_okay=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to a TOML file with a [timeline] table",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None) -> None:
    """domtimeline - undo/redo history for a live DOM-like tree.

    Records every attribute, text and child list change, then travels
    backward and forward through them.
    """
    ctx.ensure_object(dict)
    options = TimelineOptions()
    if config_path is not None:
        if not config_path.is_file():
            raise click.BadParameter(f"File '{config_path}' does not exist.", param_hint="--config / -c")
        try:
            options = load_options(config_path)
        except ValueError as e:
            raise click.ClickException(f"Invalid config: {e}")
    ctx.obj["options"] = options


@cli.command()
@click.option(
    "--playback",
    is_flag=True,
    help="Rewind the recorded session and replay it step by step",
)
@click.option(
    "--interval",
    type=click.FloatRange(min=0.0),
    default=0.0,
    show_default=True,
    help="Seconds between playback steps",
)
@click.option(
    "--json",
    "output_json",
    is_flag=True,
    help="Output the final history as JSON",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    help="Do not log batches as they are recorded",
)
@click.pass_context
def demo(
    ctx: click.Context,
    playback: bool,
    interval: float,
    output_json: bool,
    quiet: bool,
) -> None:
    """Record a scripted session on a sample document and show its history.

    The session mixes attributed operations (tracked functions, wrapped
    nodes, style writes) with an unattributed write, then undoes two steps
    and makes a change that gets cancelled into lost_future.

    Examples:

        domtimeline demo

        domtimeline demo --playback --interval 0.2

        domtimeline -c timeline.toml demo --json
    """
    from .commands.demo_cmd import run_demo

    options: TimelineOptions = ctx.obj["options"]
    if quiet:
        options = replace(options, log_records=False)

    run_demo(
        options,
        playback=playback,
        interval=interval,
        output_json=output_json,
        log_console=Console(stderr=True),
    )


@cli.command("config")
@click.pass_context
def show_config(ctx: click.Context) -> None:
    """Show the effective timeline options."""
    options: TimelineOptions = ctx.obj["options"]

    table = Table(title="Timeline options")
    table.add_column("Option", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("enable_callstack_tracking", str(options.enable_callstack_tracking).lower())
    table.add_row("log_records", str(options.log_records).lower())
    table.add_row("max_past", "unbounded" if options.max_past is None else str(options.max_past))
    table.add_row("stack_limit", str(options.stack_limit))
    Console().print(table)


def main() -> None:
    """Main entrypoint."""
    cli()


if __name__ == "__main__":
    main()
