"""Colorized, timestamped log lines for pipeline stages."""

from datetime import datetime

from rich.console import Console

# stderr keeps stdout clean for commands that print a value (e.g. `version`)
console = Console(stderr=True)


def _timestamp() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def _emit(message: str, style: str) -> None:
    console.print(
        f"[{_timestamp()}] {message}",
        style=style,
        markup=False,
        highlight=False,
        soft_wrap=True,
    )


def log(message: str) -> None:
    """Log progress of a stage."""
    _emit(message, "green")


def warn(message: str) -> None:
    """Log a non-fatal condition; the stage carries on."""
    _emit(f"WARNING: {message}", "yellow")


def error(message: str) -> None:
    """Log a fatal condition. Callers decide how to exit."""
    _emit(f"ERROR: {message}", "red")
