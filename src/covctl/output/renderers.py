"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op``. Unknown ops fall through to
a generic key-value renderer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from covctl.output.console import create_console, get_output, human_size

if TYPE_CHECKING:
    from collections.abc import Callable

    from rich.console import Console

    from covctl.services.result import ServiceResult


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to text via Rich."""
    console = create_console()
    if result.ok:
        _OP_RENDERERS.get(result.op, _render_generic)(result, console)
    else:
        _render_error(result, console, verbose=verbose)
    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Minimal output: item names for listings, else a status line."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} - {msg}"
    items = result.data.get("items")
    if isinstance(items, list) and items:
        return "\n".join(_item_label(item) for item in items)
    return f"OK: {result.op}"


def _item_label(item: Any) -> str:
    if isinstance(item, dict):
        return str(item.get("name") or item.get("project") or item)
    return str(item)


# ── Renderers ────────────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console) -> None:
    console.print(Text.assemble(("OK", "cov.ok"), ": ", (result.op, "cov.op")))
    for key, value in result.data.items():
        console.print(Text.assemble("  ", (f"{key}: ", "cov.key"), str(value)))


def _render_settings(result: ServiceResult, console: Console) -> None:
    table = Table(title=f"Settings ({result.data.get('root', '')})", show_header=True)
    table.add_column("Setting", style="cov.key")
    table.add_column("Value")
    for key, value in result.data.get("settings", {}).items():
        table.add_row(key, "" if value is None else str(value))
    console.print(table)
    runners = result.data.get("test_runners") or []
    if runners:
        console.print(Text.assemble(("Runners: ", "cov.key"), ", ".join(runners)))


def _render_runners(result: ServiceResult, console: Console) -> None:
    for item in result.data.get("items", []):
        marker = Text("* ", style="cov.active") if item["active"] else Text("  ")
        console.print(marker + Text(item["name"], style="cov.active" if item["active"] else ""))


def _render_files(result: ServiceResult, console: Console) -> None:
    selected = result.data.get("selected")
    items = result.data.get("items", [])
    if not items:
        console.print(Text("No test settings files found", style="cov.warning"))
        return
    for path in items:
        style = "cov.active" if path == selected else "cov.path"
        console.print(Text(path, style=style))


def _render_sizes(result: ServiceResult, console: Console) -> None:
    table = Table(show_header=True)
    table.add_column("Project")
    table.add_column("Size", justify="right", style="cov.size")
    table.add_column("Files", justify="right")
    table.add_column("Directories", style="cov.path")
    rows = result.data.get("items") or result.data.get("projects") or []
    for row in rows:
        table.add_row(
            row["project"],
            human_size(row.get("total_size")),
            "-" if row.get("file_count") is None else str(row["file_count"]),
            "\n".join(row.get("directories", [])),
        )
    console.print(table)


def _render_refresh(result: ServiceResult, console: Console) -> None:
    files = result.model_copy(update={"data": {"items": result.data["test_settings_files"]}})
    _render_files(files, console)
    _render_sizes(result, console)


def _render_clean(result: ServiceResult, console: Console) -> None:
    console.print(
        Text.assemble(
            ("OK", "cov.ok"),
            f": cleaned {result.data['project']}, freed ",
            (human_size(result.data["bytes_freed"]), "cov.size"),
        )
    )


def _render_error(result: ServiceResult, console: Console, *, verbose: bool) -> None:
    message = result.error.message if result.error else "Unknown error"
    console.print(Text.assemble(("ERROR", "cov.error"), f": {result.op} - {message}"))
    if verbose and result.error and result.error.detail:
        for key, value in result.error.detail.items():
            console.print(Text(f"  {key}: {value}", style="cov.key"))


_OP_RENDERERS: dict[str, Callable[[ServiceResult, Console], None]] = {
    "show_settings": _render_settings,
    "list_runners": _render_runners,
    "test_settings_files": _render_files,
    "output_sizes": _render_sizes,
    "refresh": _render_refresh,
    "clean_output": _render_clean,
}
