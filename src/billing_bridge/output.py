"""CLI output: rich text for people, a JSON envelope with --json."""

import json
import sys
from datetime import datetime, timezone
from typing import Any, NoReturn

from rich.console import Console
from rich.table import Table
from rich.text import Text


class OutputFormatter:
    """Render command results in pretty or JSON mode.

    JSON mode prints exactly one object per command:
    ``{"success", "timestamp", "data", "message"}`` on success and
    ``{"success", "timestamp", "error": {"code", "message", "suggestion"}}``
    on failure.
    """

    def __init__(self, json_mode: bool = False) -> None:
        self.json_mode = json_mode
        self.console = Console()

    def _emit(self, payload: dict[str, Any]) -> None:
        envelope = {"timestamp": datetime.now(timezone.utc).isoformat(), **payload}
        print(json.dumps(envelope, indent=2, default=str))

    def success(self, data: Any, message: str = "Done") -> None:
        if self.json_mode:
            self._emit({"success": True, "data": data, "message": message})
            return

        self.console.print(f"[green]{message}[/green]")
        if isinstance(data, dict):
            for key, value in data.items():
                self.console.print(f"  [cyan]{key}:[/cyan] {value}")
        elif isinstance(data, list):
            for item in data:
                self.console.print(f"  - {item}")
        elif data is not None:
            self.console.print(f"  {data}")

    def error(
        self,
        code: str,
        message: str,
        suggestion: str | None = None,
        exit_code: int = 1,
        data: Any = None,
    ) -> NoReturn:
        """Report a failure and exit with ``exit_code``.

        ``data`` is included in the JSON envelope when given.
        """
        if self.json_mode:
            payload: dict[str, Any] = {
                "success": False,
                "error": {"code": code, "message": message, "suggestion": suggestion},
            }
            if data is not None:
                payload["data"] = data
            self._emit(payload)
        else:
            line = Text.assemble(("Error ", "bold red"), (f"{code}: ", "red"), message)
            self.console.print(line)
            if suggestion:
                self.console.print(f"[yellow]Hint:[/yellow] {suggestion}")
        sys.exit(exit_code)

    def table(
        self,
        rows: list[dict[str, Any]],
        columns: list[tuple[str, str]],
        title: str | None = None,
    ) -> None:
        """Rows as a rich table; in JSON mode, the rows themselves."""
        if self.json_mode:
            self._emit({"success": True, "data": rows, "message": title})
            return

        if not rows:
            self.console.print("[dim]Nothing to show[/dim]")
            return

        table = Table(title=title, header_style="bold cyan")
        for _, heading in columns:
            table.add_column(heading)
        for row in rows:
            table.add_row(*(str(row.get(key, "")) for key, _ in columns))
        self.console.print(table)

    def check(self, name: str, passed: bool, detail: str = "") -> None:
        """One smoke-check line. Silent in JSON mode."""
        if self.json_mode:
            return
        mark = "[green]PASS[/green]" if passed else "[red]FAIL[/red]"
        self.console.print(f"{mark} {name}" + (f" [dim]{detail}[/dim]" if detail else ""))
