"""Rich Console factory and theme for covctl output.

Consoles render into a StringIO buffer so renderers keep a plain
``-> str`` contract. Without a TTY (tests, pipes) Rich drops colors.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

COV_THEME = Theme(
    {
        "cov.ok": "bold green",
        "cov.error": "bold red",
        "cov.warning": "bold yellow",
        "cov.op": "bold cyan",
        "cov.key": "dim",
        "cov.path": "dim",
        "cov.active": "bold green",
        "cov.size": "magenta",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Console writing to an in-memory buffer."""
    return Console(
        file=StringIO(),
        theme=COV_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def human_size(size: int | None) -> str:
    """Bytes as a short human-readable string (``1.5 MiB``)."""
    if size is None:
        return "-"
    if size < 1024:
        return f"{size} B"
    value = float(size)
    for unit in ("KiB", "MiB", "GiB"):
        value /= 1024
        if value < 1024 or unit == "GiB":
            break
    return f"{value:.1f} {unit}"
