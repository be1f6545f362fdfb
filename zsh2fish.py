#!/usr/bin/env uv run
# /// script
# requires-python = ">=3.10"
# dependencies = ["rich", "pygments"]
# ///
"""
zsh2fish.py - Convert zsh history into fish history.

Reads the zsh history file *through zsh itself* (so zsh's own metafication and
EXTENDED_HISTORY parsing apply), rewrites `&&` / `||` into fish's `; and` /
`; or`, and writes the result in fish's history format.

Pipeline
--------
1. **Source:** `zsh_history_source()` runs `zsh -i -c 'fc -R FILE; fc -l -t "%s" 0'`
   and returns its raw stdout. Any callable with the same signature can stand in
   for it (tests use canned bytes).
2. **Read:** `read_history()` decodes the output and `parse_history_lines()`
   turns each `<index> <epoch> <command>` line into a `HistoryEntry`.
3. **Translate:** `translate()` applies the ordered replacement table from
   `Config.replacements`. It is purely lexical: an `&&` inside a quoted string
   gets rewritten too.
4. **Write & report:** `convert_history()` writes two-line fish records to the
   output stream and collects every command that changed.

Known limitations
-----------------
- Runs of spaces and tabs inside a command collapse to a single space.
- zsh prints embedded newlines as `\\n`; a command that genuinely contained the
  characters backslash-n comes out with a real newline instead.

Output
------
The output file is truncated and rewritten on every run (a timestamped backup of
any existing content is made first, unless `--no-backup`). Each entry becomes:

    - cmd: <command, with \\ and newlines escaped the way fish stores them>
      when: <epoch>

Usage
-----
    uv run zsh2fish.py --dry-run
    uv run zsh2fish.py ~/.zsh_history -o ~/.local/share/fish/fish_history
"""

from __future__ import annotations

import argparse
import re
import shlex
import subprocess
import sys
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, Iterator, TextIO

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table
from rich.theme import Theme

from shell_syntax import highlight

__version__ = "0.3.0"

# ============================================================================
# CONFIGURATION & CONSTANTS
# ============================================================================

ZSH_HISTORY_FILE = "~/.zsh_history"
FISH_HISTORY_FILE = "~/.local/share/fish/fish_history"
ZSH_HISTORY_READER = "fc -R {path}; fc -l -t '%s' 0"

PROGRESS_INTERVAL = 1000

# fc separates fields with spaces; other whitespace belongs to the command
FIELD_SEP_RE = re.compile(r"[ \t]+")

CUSTOM_THEME = Theme({
    "title": "bold #C678DD",
    "context": "#5C6370",
    "info": "#61AFEF",
    "success": "#98C379",
    "warning": "#E5C07B",
    "error": "#E06C75",
    "fish": "#E5C07B",
    "rule": "#4B5263",
})

console = Console(stderr=True, theme=CUSTOM_THEME)

# Type aliases for better readability
HistorySource = Callable[[str], bytes]
Translator = Callable[[str], str]


class Config:
    """Configuration for the translation pipeline"""

    @property
    def replacements(self) -> list[tuple[str, str]]:
        """→ Ordered (old, new) substring replacements; order matters"""
        return [
            (" && ", "&&"),
            ("&&", "; and "),
            (" || ", "||"),
            ("||", "; or "),
        ]


CONFIG = Config()

# ============================================================================
# ERRORS
# ============================================================================


class Zsh2FishError(Exception):
    """Base class for fatal conversion errors."""


class SourceUnavailable(Zsh2FishError):
    """zsh could not be run, or exited with a failure status."""


class DecodeError(Zsh2FishError):
    """zsh's history listing is not valid UTF-8 text."""


class OutputWriteError(Zsh2FishError):
    """The fish history file could not be opened or written."""


# ============================================================================
# DATA STRUCTURES
# ============================================================================


@dataclass(frozen=True)
class HistoryEntry:
    """A single zsh history entry. `timestamp` is kept as the epoch text zsh printed."""

    timestamp: str
    command: str


@dataclass(frozen=True)
class Conversion:
    timestamp: str
    original: str
    translated: str

    @property
    def changed(self) -> bool:
        return self.original != self.translated


@dataclass
class RunSummary:
    """What a conversion run did: how many entries, and which ones changed."""

    processed: int = 0
    changed: list[tuple[str, str]] = field(default_factory=list)


# ============================================================================
# UTILITIES
# ============================================================================


def _console_print(string="", *args, **kwargs) -> None:
    """→ Safe console printing with fallback"""
    try:
        console.print(string, *args, **kwargs)
    except Exception:
        kwargs_clean = {k: v for k, v in kwargs.items() if k in ["sep", "end"]}
        print(string, *args, file=sys.stderr, **kwargs_clean)


# ============================================================================
# HISTORY SOURCE & PARSING
# ============================================================================


def zsh_history_source(path: str) -> bytes:
    """→ Runs zsh to load `path` and list every entry with its epoch timestamp"""
    script = ZSH_HISTORY_READER.format(path=shlex.quote(path))
    try:
        result = subprocess.run(["zsh", "-i", "-c", script], capture_output=True, check=False)
    except OSError as e:
        raise SourceUnavailable(f"Failed to execute zsh history reader: {e}") from e

    if result.returncode != 0:
        stderr = result.stderr.decode(errors="replace").strip()
        detail = f": {stderr}" if stderr else ""
        raise SourceUnavailable(
            f"zsh history reader exited with status {result.returncode}{detail}"
        )
    return result.stdout


def parse_history_lines(lines: Iterable[str]) -> Iterator[HistoryEntry]:
    """→ Parses `fc -l -t '%s'` output lines, skipping malformed ones"""
    for line in lines:
        parts = FIELD_SEP_RE.split(line.strip(" \t\r"))
        if len(parts) < 3:
            continue
        # parts[0] is fc's event number; the rest of the line is re-joined with
        # single spaces, so runs of whitespace inside a command are not preserved.
        command = " ".join(parts[2:]).replace("\\n", "\n")
        yield HistoryEntry(timestamp=parts[1], command=command)


def read_history(source_path: str, source: HistorySource | None = None) -> list[HistoryEntry]:
    """→ Reads the zsh history at `source_path` into entries, oldest first"""
    if source is None:
        source = zsh_history_source
    raw = source(source_path)
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"History listing for '{source_path}' is not valid UTF-8: {e}") from e
    return list(parse_history_lines(text.split("\n")))


# ============================================================================
# TRANSLATION
# ============================================================================


def translate(command: str) -> str:
    """→ Naive zsh → fish translation of `&&` and `||`"""
    for old, new in CONFIG.replacements:
        command = command.replace(old, new)
    return command


def no_translate(command: str) -> str:
    return command


# ============================================================================
# SERIALIZATION
# ============================================================================


def escape_fish_command(command: str) -> str:
    """→ Escapes a command the way fish stores it, so it fits on one line"""
    return command.replace("\\", "\\\\").replace("\n", "\\n")


def format_fish_entry(command: str, timestamp: str) -> str:
    """→ Formats one fish history record (two lines, trailing newline included)"""
    return f"- cmd: {escape_fish_command(command)}\n  when: {timestamp}\n"


def convert_history(
    entries: Iterable[HistoryEntry],
    translator: Translator = translate,
    sink: TextIO | None = None,
    on_progress: Callable[[int], None] | None = None,
) -> RunSummary:
    """→ Translates every entry, writes it to `sink` (unless dry run), and tallies changes"""
    summary = RunSummary()
    for entry in entries:
        conversion = Conversion(
            timestamp=entry.timestamp,
            original=entry.command,
            translated=translator(entry.command),
        )

        if sink is not None:
            try:
                sink.write(format_fish_entry(conversion.translated, conversion.timestamp))
            except OSError as e:
                raise OutputWriteError(f"Failed writing fish history: {e}") from e

        if conversion.changed:
            summary.changed.append((conversion.original, conversion.translated))

        summary.processed += 1
        if on_progress is not None and summary.processed % PROGRESS_INTERVAL == 0:
            on_progress(summary.processed)
    return summary


def backup_existing_output(output_path: Path) -> Path | None:
    """→ File I/O: Copies a non-empty output file aside before it gets truncated"""
    try:
        if not output_path.is_file() or output_path.stat().st_size == 0:
            return None
    except OSError:
        return None

    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    backup_path = output_path.with_name(f"{output_path.name}.bak.{timestamp}")
    try:
        backup_path.write_bytes(output_path.read_bytes())
    except OSError as e:
        # Not fatal; the conversion itself can still go ahead.
        _console_print(f"[warning]Could not back up {escape(str(output_path))}: {escape(repr(e))}[/warning]")
        return None
    _console_print(f"Backup saved to [info]{escape(str(backup_path))}[/info]")
    return backup_path


def write_fish_history(
    entries: Iterable[HistoryEntry],
    output_path: Path,
    translator: Translator = translate,
    on_progress: Callable[[int], None] | None = None,
) -> RunSummary:
    """→ File I/O: Truncates `output_path` and writes every converted entry to it"""
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with output_path.open("w", encoding="utf-8") as f:
            return convert_history(entries, translator, sink=f, on_progress=on_progress)
    except OSError as e:
        raise OutputWriteError(f"Failed to write output file '{output_path}': {e}") from e


# ============================================================================
# USER INTERFACE & DISPLAY
# ============================================================================


def print_header(input_path: Path, output_path: Path, dry_run: bool, convert: bool) -> None:
    _console_print(Rule("[title]ZSH history to Fish[/title]", style="rule"))
    _console_print(
        f"[context]input:[/context] [info]{escape(str(input_path))}[/info] "
        f"[warning](naive-convert={str(convert).lower()})[/warning]",
        highlight=False,
    )
    output_text = "dry run mode" if dry_run else str(output_path)
    _console_print(f"[context]output:[/context] [info]{escape(output_text)}[/info]", highlight=False)


def print_progress(_processed: int) -> None:
    _console_print(".", end="")


def render_changes(changed: list[tuple[str, str]]) -> Table:
    """→ UI: Side-by-side table of every command the translator rewrote"""
    table = Table(box=box.SIMPLE_HEAD, show_lines=False, expand=True, border_style="rule")
    table.add_column("zsh", ratio=1)
    table.add_column("fish", ratio=1, header_style="fish")
    for original, translated in changed:
        table.add_row(highlight(original, "zsh"), highlight(translated, "fish"))
    return table


def print_summary(summary: RunSummary, output_path: Path, dry_run: bool) -> None:
    _console_print()
    _console_print(f"Processed [info]{summary.processed}[/info] commands.")

    if summary.changed:
        _console_print(f"Converted [warning]{len(summary.changed)}[/warning] commands:")
        _console_print(render_changes(summary.changed))

    if dry_run:
        _console_print("[warning]No file has been written.[/warning]")
    else:
        _console_print(f'[success]File "{escape(str(output_path))}" has been written successfully.[/success]')


# ============================================================================
# MAIN
# ============================================================================


def run(
    input_path: Path,
    output_path: Path,
    dry_run: bool = False,
    convert: bool = True,
    backup: bool = True,
) -> RunSummary:
    """→ Main pipeline: read, translate, write, report. Raises Zsh2FishError on fatal errors."""
    print_header(input_path, output_path, dry_run, convert)

    history = read_history(str(input_path))
    translator = translate if convert else no_translate

    if dry_run:
        summary = convert_history(history, translator, on_progress=print_progress)
    else:
        if backup:
            backup_existing_output(output_path)
        summary = write_fish_history(history, output_path, translator, on_progress=print_progress)

    print_summary(summary, output_path, dry_run)
    return summary


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        prog="zsh2fish",
        description="Convert zsh history into fish history",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    ap.add_argument(
        "input_file",
        nargs="?",
        default=ZSH_HISTORY_FILE,
        help=f"zsh history file to read (default: {ZSH_HISTORY_FILE})",
    )
    ap.add_argument(
        "-o",
        "--output-file",
        default=FISH_HISTORY_FILE,
        help=f"fish history file to write (default: {FISH_HISTORY_FILE})",
    )
    ap.add_argument(
        "-d",
        "--dry-run",
        action="store_true",
        help="Convert and report, but do not write any file",
    )
    ap.add_argument(
        "-n",
        "--no-convert",
        action="store_true",
        help="Copy commands as-is, without translating && and ||",
    )
    ap.add_argument(
        "--no-backup",
        action="store_true",
        help="Do not back up an existing output file before overwriting it",
    )
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    args = ap.parse_args(argv)

    input_path = Path(args.input_file).expanduser()
    output_path = Path(args.output_file).expanduser()

    try:
        run(
            input_path,
            output_path,
            dry_run=args.dry_run,
            convert=not args.no_convert,
            backup=not args.no_backup,
        )
    except Zsh2FishError as e:
        _console_print(f"\n[error]Error: {escape(str(e))}[/error]", highlight=False)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
