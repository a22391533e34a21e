#!/usr/bin/env python3
"""
Ogkos: Ancient Greek ὄγκος (bulk, volume)

An interactive disk usage explorer. Walks a directory tree once, then lets
you move through it like a shell while showing the largest entries of the
current directory, and delete whatever is taking up space.

Usage:
    ogkos                          # Explore the current directory
    ogkos <path>                   # Explore path
    ogkos <path> --max-rows 20     # Show at most 20 entries per directory
    ogkos --show-stats             # Show accumulated cleanup statistics
    ogkos --reset-stats            # Clear accumulated cleanup statistics

Interactive commands:
    <name>        descend into an entry of the current directory
    ..            go up one level
    /rm [name]    remove an entry, or the current one if no name is given
    /help         show the command summary
"""

import argparse
import os
import sys
from typing import Optional

try:
    import readline

    _HAS_READLINE = True
except ImportError:
    _HAS_READLINE = False

from auxiliary import format_path_for_display, format_size, truncate_path
from console_ui import ConsoleUI
from file_operations import DeletionResult, FileOperations
from file_tree import DirectoryNode, FileNode, TreeBuilder, TreeBuildError, resolve_name, sorted_children
from ogkos_config import ConfigManager, OgkosConfig

COMMAND_MARKER = "/"
COMMANDS = ("/rm", "/help")

HELP_LINES = (
    "Enter file name to go to this directory or .. to go up one level",
    "/rm [file] to remove file or current directory if not stated",
    "/help to display this message",
)


def breakdown_rows(
    directory: DirectoryNode, max_rows: int = 40, min_percentage: float = 5.0
) -> list[tuple[FileNode, float]]:
    """Return the largest children of a directory with their share of its size

    Rows stop after max_rows entries, or once the entries already listed
    account for more than 100 - min_percentage percent.
    """
    rows: list[tuple[FileNode, float]] = []
    explained = 0.0
    for child in sorted_children(directory):
        if len(rows) >= max_rows or explained > 100.0 - min_percentage:
            break
        percentage = 100.0 * child.size / directory.size if directory.size else 0.0
        explained += percentage
        rows.append((child, percentage))
    return rows


# ---------------------------------------------------------------------------
# Ogkos
# ---------------------------------------------------------------------------


class Ogkos:
    """Main application class for the Ogkos disk usage explorer."""

    def __init__(
        self,
        config: Optional[OgkosConfig] = None,
        ui: Optional[ConsoleUI] = None,
        file_operations: Optional[FileOperations] = None,
    ):
        self.config = config or OgkosConfig()
        self.ui = ui or ConsoleUI()
        self.file_operations = file_operations or FileOperations()
        self.root: Optional[FileNode] = None
        self.cursor: Optional[FileNode] = None
        self.removed_count = 0
        self.reclaimed_bytes = 0

    # -- tree building -------------------------------------------------------

    def build(self, path: str) -> FileNode:
        """Walk path into memory and place the cursor on its root

        Raises:
            TreeBuildError: If path cannot be stat'ed
        """
        self.ui.print_header("Ogkos", f"Exploring {format_path_for_display(path)}")
        self.ui.print_info("building tree, please wait")
        builder = TreeBuilder(
            count_directory_size=self.config.count_directory_size,
            warning_callback=self.ui.print_warning,
        )

        progress = self.ui.create_activity_progress()
        with progress:
            task = progress.add_task("Scanning...", total=None)
            builder.progress_callback = lambda count: progress.update(
                task, description=f"Scanning... {count:,} entries"
            )
            root = builder.build(path)

        self.root = root
        self.cursor = root
        return root

    # -- display -------------------------------------------------------------

    def show(self, node: FileNode):
        """Print a node and, for a listed directory, its largest children"""
        rows = None
        if node.is_listed:
            rows = [
                (
                    truncate_path(child.name, self.config.name_width),
                    format_size(child.size),
                    percentage,
                )
                for child, percentage in breakdown_rows(node, self.config.max_rows, self.config.min_percentage)
            ]
        self.ui.show_node(format_path_for_display(node.path), format_size(node.size), rows, self.config.name_width)

    def show_help(self):
        for line in HELP_LINES:
            self.ui.print_plain(line)

    # -- command dispatch ----------------------------------------------------

    def dispatch(self, line: str) -> bool:
        """Interpret one line of input; returns False when the session must end"""
        if line.startswith(COMMAND_MARKER):
            return self._dispatch_command(line)

        name = line.strip()
        target = resolve_name(self.cursor, name)
        if target is None:
            if name == ".." and self.cursor.parent is None:
                self.ui.print_error("already at the root directory")
            else:
                self.ui.print_error(f"no such file: {name}")
            return True

        self.cursor = target
        return True

    def _dispatch_command(self, line: str) -> bool:
        parts = line.split(maxsplit=1)
        command = parts[0] if parts else line
        argument = parts[1].strip() if len(parts) > 1 else ""

        if command == "/rm":
            return self.process_rm(argument)
        if command == "/help":
            if argument:
                self.ui.print_error(f"wrong command: /help {argument}")
            else:
                self.show_help()
            return True

        self.ui.print_error(f"command not recognized: {command}")
        return True

    def process_rm(self, name: str) -> bool:
        """Remove name (or the cursor when empty); returns False if the root was removed"""
        if name:
            target = resolve_name(self.cursor, name)
            if target is None:
                self.ui.print_error(f"no such file: {name}")
                return True
        else:
            target = self.cursor

        # Strong references to the chain between cursor and target, so the
        # cursor can fall back to the nearest entry that survived.
        chain = [self.cursor]
        node = self.cursor
        while node is not target and node is not None:
            node = node.parent
            chain.append(node)
        if node is not target:
            chain = [self.cursor]
        chain.append(target.parent)

        progress = self.ui.create_activity_progress()
        with progress:
            task = progress.add_task("Removing...", total=None)
            self.file_operations.progress_callback = lambda message: progress.update(task, description=message)
            try:
                result = self.file_operations.remove(target)
            finally:
                self.file_operations.progress_callback = None
        self.report_deletion(result)

        if result.root_removed:
            self.ui.print_info("removed root directory; exiting")
            self.cursor = None
            return False

        self.cursor = next(n for n in chain if n is not None and not n.removed)
        return True

    def report_deletion(self, result: DeletionResult):
        self.removed_count += result.removed_count
        self.reclaimed_bytes += result.reclaimed_bytes

        for path, message in result.errors:
            self.ui.print_error(f"cannot remove {format_path_for_display(path)}: {message}; skipping")
        for path in result.skipped:
            self.ui.print_warning(f"skipping {format_path_for_display(path)}; not all children removed")

        if result.success:
            self.ui.print_success(
                f"Removed {format_path_for_display(result.target.path)} ({format_size(result.reclaimed_bytes)})"
            )
        elif result.reclaimed_bytes:
            self.ui.print_warning(
                f"Partially removed {format_path_for_display(result.target.path)}"
                f" ({format_size(result.reclaimed_bytes)} reclaimed)"
            )

    # -- line editing --------------------------------------------------------

    def complete(self, text: str, state: int) -> Optional[str]:
        """readline completer over commands, ".." and the cursor's children"""
        if text.startswith(COMMAND_MARKER):
            candidates = [command for command in COMMANDS if command.startswith(text)]
        else:
            names = [".."]
            if self.cursor is not None and self.cursor.is_listed:
                names.extend(child.name for child in self.cursor.children)
            candidates = [name for name in names if name.startswith(text)]
        return candidates[state] if state < len(candidates) else None

    def _install_completer(self):
        if not _HAS_READLINE:
            return
        readline.set_completer(self.complete)
        readline.set_completer_delims(" \t\n")
        readline.parse_and_bind("tab: complete")

    # -- main entry point ----------------------------------------------------

    def run(self, path: str) -> int:
        try:
            self.build(path)
        except TreeBuildError as e:
            self.ui.print_error(f"failed to build a tree, check path: {e}")
            return 1

        self._install_completer()
        while True:
            self.show(self.cursor)
            line = self.ui.read_line("> ")
            if line is None:
                break
            if not self.dispatch(line):
                break

        if self.removed_count:
            self.ui.print_info(
                f"Removed {self.removed_count:,} entries, reclaimed {format_size(self.reclaimed_bytes)}"
            )
        return 0


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


class OgkosArgumentParser(argparse.ArgumentParser):
    """Argument parser that reports bad invocations with exit code 1"""

    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = OgkosArgumentParser(
        prog="ogkos",
        description="Ogkos, an interactive disk usage explorer",
    )
    parser.add_argument("path", nargs="?", help="Directory to explore (default: current directory)")
    parser.add_argument("--max-rows", type=int, default=None, help="Maximum number of entries listed per directory")
    parser.add_argument(
        "--min-percentage",
        type=float,
        default=None,
        help="Stop listing once the remaining entries account for less than this percentage",
    )
    parser.add_argument("--show-stats", action="store_true", help="Show accumulated cleanup statistics")
    parser.add_argument("--reset-stats", action="store_true", help="Clear accumulated cleanup statistics")
    return parser


def main(argv: Optional[list[str]] = None, config_manager: Optional[ConfigManager] = None) -> int:
    parser = build_parser()
    ui = ConsoleUI()
    args, extra = parser.parse_known_args(argv)
    if extra:
        ui.print_error(f"incorrect arguments: {' '.join(extra)}")
        ui.print_plain(parser.format_usage().strip())
        return 1

    config_manager = config_manager or ConfigManager()
    config = config_manager.load()

    if args.show_stats:
        ui.show_configuration({"last run": config.last_run or "never", **config.stats}, title="Ogkos statistics")
        return 0
    if args.reset_stats:
        config.reset_stats()
        config_manager.save(config)
        ui.print_success("Statistics cleared.")
        return 0

    if args.max_rows is not None:
        if args.max_rows <= 0:
            ui.print_error("--max-rows must be positive")
            return 1
        config.max_rows = args.max_rows
    if args.min_percentage is not None:
        if not 0 <= args.min_percentage < 100:
            ui.print_error("--min-percentage must be in [0, 100)")
            return 1
        config.min_percentage = args.min_percentage

    if args.path:
        path = os.path.realpath(args.path)
    else:
        try:
            path = os.getcwd()
        except OSError as e:
            ui.print_error(f"can't open current directory: {e}")
            return 1

    app = Ogkos(config=config, ui=ui)
    exit_code = app.run(path)

    if exit_code == 0:
        # Display overrides are per run; reload so only the stats are persisted
        stored = config_manager.load()
        stored.record_run(app.removed_count, app.reclaimed_bytes)
        try:
            config_manager.save(stored)
        except OSError as e:
            ui.print_warning(f"could not save statistics: {e}")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
