import typer

from .activity_log import ActivityLogger
from .config import load_settings
from .errors import ConfigError
from .terminal import TerminalApp
from .wizard import Wizard

app = typer.Typer(
    help="YouTube Uploader CLI", add_completion=False, invoke_without_command=True
)


def _load_settings():
    try:
        return load_settings()
    except ConfigError as e:
        typer.echo(f"[youtube-uploader] Error: {e}", err=True)
        raise typer.Exit(1)


@app.callback()
def start(ctx: typer.Context):
    """Start the interactive upload wizard."""
    if ctx.invoked_subcommand is not None:
        return

    settings = _load_settings()
    activity = ActivityLogger(settings.logs_dir, level=settings.log_level)
    exit_code = 1
    try:
        activity.archive_old_logs(settings.archive_after_days)
        activity.log_session_start()
        exit_code = TerminalApp(Wizard(settings, activity)).run()
    except KeyboardInterrupt:
        typer.echo("\n[youtube-uploader] Interrupted by user")
        exit_code = 130
    except EOFError:
        typer.echo("")
        exit_code = 0
    finally:
        activity.log_session_end(exit_code)
        activity.close()

    raise typer.Exit(exit_code)


@app.command("logs")
def logs(
    lines: int = typer.Option(100, "--lines", "-n", help="Number of lines to show"),
    clear: bool = typer.Option(False, "--clear", help="Delete today's log file"),
):
    """Show (or clear) today's activity log."""
    settings = _load_settings()
    activity = ActivityLogger(settings.logs_dir, level=settings.log_level)
    try:
        if clear:
            activity.clear()
            typer.echo(f"[youtube-uploader] Cleared {activity.current_log_file}")
        else:
            typer.echo(activity.tail(lines))
    finally:
        activity.close()


def main():
    """Entry point for console script"""
    app()


if __name__ == "__main__":
    main()
