"""src/musiclib_native/ui/cli/display.py
What: Render resolved metadata payloads and routing outcomes for the CLI.
Why: Keep console output formatting in one place.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, final

from rich.console import Console
from rich.markup import escape
from rich.table import Table


def _jsonable(payload: Mapping[str, Any]) -> dict[str, Any]:
    encoded: dict[str, Any] = {}
    for key, value in payload.items():
        if isinstance(value, bytes):
            encoded[key] = {"bytes": len(value)}
        else:
            encoded[key] = value
    return encoded


@final
class MetadataDisplay:
    """Handles metadata and routing output."""

    console: Console

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def show_payload(self, path: str, payload: Mapping[str, Any], *, as_json: bool = False) -> None:
        if as_json:
            self.console.print_json(json.dumps({"filePath": path, **_jsonable(payload)}))
            return

        table = Table(title=escape(path), show_header=False, title_justify="left")
        table.add_column("field", style="cyan")
        table.add_column("value", style="white")
        if not payload:
            table.add_row("—", "no metadata resolved")
        for key, value in _jsonable(payload).items():
            if isinstance(value, dict):
                value = f"{value['bytes']} bytes"
            elif key == "durationMs":
                seconds = int(value) // 1000
                value = f"{value} ({seconds // 60:d}:{seconds % 60:02d})"
            table.add_row(key, escape(str(value)))
        self.console.print(table)

    def show_route(self, url: str, handled: bool, delivered: list[str]) -> None:
        if not handled:
            self.console.print(f"[yellow]Not handled:[/yellow] {escape(url)}")
            return
        if delivered:
            for item_id in delivered:
                self.console.print(f"[green]play[/green] itemId={escape(item_id)}")
        else:
            self.console.print(f"[cyan]Handled without playback:[/cyan] {escape(url)}")


__all__ = ["MetadataDisplay"]
