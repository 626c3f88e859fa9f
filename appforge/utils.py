"""Shared utility functions for appforge.

Provides JSON I/O, file-system helpers, Rich-based console reporting,
duration formatting, and materialisation of generated file trees.
"""

from __future__ import annotations

import asyncio
import json
import re
from datetime import datetime
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table

if TYPE_CHECKING:
    from appforge.models import GenerationResult

console = Console()


# ---------------------------------------------------------------------------
# String / name helpers
# ---------------------------------------------------------------------------


def slugify(name: str) -> str:
    """Convert an arbitrary project name to a package-safe slug.

    Examples::

        slugify("My Cool App") -> "my-cool-app"
        slugify("  2FA (TOTP)  ") -> "2fa-totp"
    """
    result = re.sub(r"[^a-zA-Z0-9_-]", "-", name.strip().lower())
    result = re.sub(r"-+", "-", result)
    return result.strip("-")


def timestamp() -> str:
    """Return the local wall-clock time formatted for task log lines."""
    return datetime.now().strftime("%H:%M:%S")


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


def load_json(path: str | Path) -> dict[str, Any]:
    """Load and parse a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
    """
    raw = Path(path).read_text(encoding="utf-8")
    data = json.loads(raw)
    if not isinstance(data, dict):
        return {"_root": data}
    return data


async def save_json(data: dict[str, Any] | list[Any], path: str | Path) -> None:
    """Save data as pretty-printed JSON.

    Parent directories are created automatically and the write runs in a
    worker thread so the event loop is not blocked.
    """
    file_path = Path(path)
    content = json.dumps(data, indent=2, ensure_ascii=False, default=str)
    await asyncio.to_thread(_write_file, file_path, content)


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def ensure_dir(path: str | Path) -> Path:
    """Create a directory (and parents) if it does not exist."""
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path.resolve()


async def write_generated_files(
    result: "GenerationResult", output_dir: str | Path
) -> list[Path]:
    """Materialise a generated file tree under *output_dir*.

    Directory entries are created, file entries are written with their
    content.  Paths must be relative and may not escape *output_dir*.

    Returns:
        The list of written paths, in generation order.

    Raises:
        ValueError: If a generated path is absolute or contains ``..``.
    """
    root = Path(output_dir)
    written: list[Path] = []
    for generated in result.files:
        rel = PurePosixPath(generated.path)
        if rel.is_absolute() or ".." in rel.parts:
            raise ValueError(f"Refusing to write outside the output root: {generated.path}")
        target = root.joinpath(*rel.parts)
        if generated.kind == "directory":
            await asyncio.to_thread(target.mkdir, parents=True, exist_ok=True)
        else:
            await asyncio.to_thread(_write_file, target, generated.content)
        written.append(target)
    return written


def _write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    ensure_dir(path.parent)
    path.write_text(content, encoding="utf-8")


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples::

        format_duration(3.7)    -> "3.7s"
        format_duration(65.2)   -> "1m 5s"
        format_duration(3661.0) -> "1h 1m 1s"
    """
    if seconds < 0:
        return "0.0s"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = seconds % 60

    parts: list[str] = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")

    if hours > 0 or minutes > 0:
        parts.append(f"{int(secs)}s")
    else:
        parts.append(f"{secs:.1f}s")

    return " ".join(parts)


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


STAGE_COLORS: dict[int, str] = {
    1: "bright_cyan",
    2: "bright_green",
    3: "bright_yellow",
    4: "bright_magenta",
    5: "bright_blue",
}


def print_stage_header(index: int, name: str) -> None:
    """Print a full-width rule announcing a pipeline stage."""
    color = STAGE_COLORS.get(index, "white")
    console.print()
    console.print(
        Rule(f"[bold {color}] Stage {index}: {name} [/bold {color}]", style=color)
    )


def print_banner(title: str, lines: list[str], style: str = "bright_cyan") -> None:
    """Print a bordered panel with a title and body lines."""
    console.print(
        Panel("\n".join(lines), title=f"[bold]{title}[/bold]", border_style=style)
    )


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{escape(message)}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")


def print_debug(source: str, message: str) -> None:
    """Print a dim, source-prefixed diagnostic line."""
    console.print(f"[dim]\\[{source}] {escape(message)}[/dim]")
