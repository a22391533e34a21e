"""
Tests for the interactive explorer: display, navigation, command dispatch
and the command-line entry point.
"""

import json
import os
from pathlib import Path

import pytest

import ogkos
from console_ui import ConsoleUI
from file_operations import FileOperations
from file_tree import DirectoryNode, FileNode, find_size_violations, resolve_name
from ogkos import Ogkos, breakdown_rows, main
from ogkos_config import ConfigManager, OgkosConfig


@pytest.fixture
def app(sample_dir: Path, console_output) -> Ogkos:
    ui, _buffer = console_output
    explorer = Ogkos(config=OgkosConfig(count_directory_size=False), ui=ui)
    explorer.build(str(sample_dir))
    return explorer


def _output(console_output) -> str:
    return console_output[1].getvalue()


def _feed(explorer: Ogkos, lines):
    remaining = iter(lines)
    explorer.ui.read_line = lambda prompt="> ": next(remaining, None)


def test_breakdown_rows_for_sample_tree(sample_tree):
    rows = breakdown_rows(sample_tree)

    assert [node.name for node, _ in rows] == ["c", "b", "a"]
    assert [round(percentage, 1) for _, percentage in rows] == [50.0, 33.3, 16.7]


def test_breakdown_rows_stop_after_threshold():
    directory = DirectoryNode(path="/r")
    directory.add_child(FileNode(path="/r/big", size=97))
    for i in range(3):
        directory.add_child(FileNode(path=f"/r/small{i}", size=1))

    assert [node.name for node, _ in breakdown_rows(directory)] == ["big"]
    assert len(breakdown_rows(directory, min_percentage=0.0)) == 4


def test_breakdown_rows_respect_row_cap():
    directory = DirectoryNode(path="/r")
    for i in range(60):
        directory.add_child(FileNode(path=f"/r/f{i}", size=1))

    assert len(breakdown_rows(directory)) == 40
    assert len(breakdown_rows(directory, max_rows=5)) == 5


def test_breakdown_rows_of_empty_sized_directory():
    directory = DirectoryNode(path="/r")
    directory.add_child(FileNode(path="/r/empty", size=0))

    assert breakdown_rows(directory) == [(directory.children[0], 0.0)]


def test_show_prints_size_and_ranked_children(app, console_output):
    app.show(app.cursor)
    lines = _output(console_output).splitlines()

    assert any(line.endswith("root: 600.00B") for line in lines)
    header = next(i for i, line in enumerate(lines) if "file name" in line)
    assert lines[header + 1] == "-" * 80
    rows = lines[header + 2 :]
    assert rows[0].split() == ["c", "300.00B", "50.0%"]
    assert rows[1].split() == ["b", "200.00B", "33.3%"]
    assert rows[2].split() == ["a", "100.00B", "16.7%"]
    assert all(len(row) == 80 for row in rows[:3])


def test_show_file_has_no_table(app, console_output):
    app.show(resolve_name(app.root, "a"))
    output = _output(console_output)

    assert "a: 100.00B" in output
    assert "file name" not in output


def test_navigate_into_child_and_back(app):
    assert app.dispatch("c")
    assert app.cursor.name == "c"
    assert app.dispatch("  ..  ")
    assert app.cursor is app.root


def test_navigate_up_from_root_reports_error(app, console_output):
    assert app.dispatch("..")
    assert app.cursor is app.root
    assert "already at the root directory" in _output(console_output)


def test_navigate_unknown_name_reports_error(app, console_output):
    assert app.dispatch("nope")
    assert app.cursor is app.root
    assert "no such file: nope" in _output(console_output)


def test_rm_child_updates_sizes_and_listing(app, sample_dir: Path, console_output):
    assert app.dispatch("/rm a")

    assert app.cursor is app.root
    assert app.root.size == 500
    assert not (sample_dir / "a").exists()
    assert [node.name for node, _ in breakdown_rows(app.root)] == ["c", "b"]
    assert app.removed_count == 1
    assert app.reclaimed_bytes == 100
    assert find_size_violations(app.root) == []


def test_rm_without_name_removes_cursor(app, sample_dir: Path):
    app.dispatch("c")
    assert app.dispatch("/rm")

    assert app.cursor is app.root
    assert app.root.size == 300
    assert not (sample_dir / "c").exists()


def test_rm_unknown_name_reports_error(app, console_output):
    assert app.dispatch("/rm missing")
    assert "no such file: missing" in _output(console_output)
    assert app.root.size == 600


def test_rm_root_ends_session(app, sample_dir: Path, console_output):
    assert not app.dispatch("/rm")
    assert app.cursor is None
    assert not sample_dir.exists()
    assert "removed root directory; exiting" in _output(console_output)


def test_rm_parent_from_child_ends_session_at_root(app, sample_dir: Path):
    app.dispatch("c")
    assert not app.dispatch("/rm ..")
    assert not sample_dir.exists()


def test_failed_rm_of_cursor_keeps_cursor(app, sample_dir: Path, monkeypatch, console_output):
    failing = str(sample_dir / "c" / "d")
    real_unlink = os.unlink

    def unlink(path, *args, **kwargs):
        if os.fspath(path) == failing:
            raise PermissionError(13, "Permission denied", failing)
        return real_unlink(path, *args, **kwargs)

    monkeypatch.setattr(os, "unlink", unlink)
    app.dispatch("c")
    c = app.cursor

    assert app.dispatch("/rm")
    assert app.cursor is c
    assert c in app.root.children
    output = _output(console_output)
    assert "Permission denied" in output
    assert "not all children removed" in output


def test_partial_rm_of_ancestor_moves_cursor_to_survivor(app, sample_dir: Path, monkeypatch):
    failing = str(sample_dir / "a")
    real_unlink = os.unlink

    def unlink(path, *args, **kwargs):
        if os.fspath(path) == failing:
            raise PermissionError(13, "Permission denied", failing)
        return real_unlink(path, *args, **kwargs)

    monkeypatch.setattr(os, "unlink", unlink)
    app.dispatch("c")

    assert app.dispatch("/rm ..")
    assert app.cursor is app.root
    assert [node.name for node in app.root.children] == ["a"]
    assert app.root.size == 100


def test_help_and_unknown_commands(app, console_output):
    assert app.dispatch("/help")
    assert app.dispatch("/help me")
    assert app.dispatch("/frobnicate now")
    output = _output(console_output)

    assert "/rm [file] to remove file or current directory if not stated" in output
    assert "wrong command: /help me" in output
    assert "command not recognized: /frobnicate" in output
    assert app.cursor is app.root


def test_complete_names_and_commands(app):
    assert app.complete("", 0) == ".."
    assert app.complete("c", 0) == "c"
    assert app.complete("c", 1) is None
    assert app.complete("/r", 0) == "/rm"
    assert app.complete("/h", 0) == "/help"


def test_run_until_end_of_input(sample_dir: Path, console_output):
    ui, _buffer = console_output
    explorer = Ogkos(config=OgkosConfig(count_directory_size=False), ui=ui)
    _feed(explorer, ["c", "..", "/rm a"])

    assert explorer.run(str(sample_dir)) == 0
    assert explorer.root.size == 500
    assert "Removed 1 entries, reclaimed 100.00B" in _output(console_output)


def test_run_with_unusable_path(tmp_path: Path, console_output):
    ui, _buffer = console_output
    explorer = Ogkos(ui=ui)

    assert explorer.run(str(tmp_path / "missing")) == 1
    assert "failed to build a tree" in _output(console_output)


def test_main_rejects_extra_arguments(tmp_path: Path, capsys):
    assert main(["one", "two"], config_manager=ConfigManager(tmp_path / "cfg")) == 1
    assert "incorrect arguments" in capsys.readouterr().out


def test_main_records_stats_without_persisting_overrides(sample_dir: Path, tmp_path: Path, monkeypatch):
    monkeypatch.setattr(ConsoleUI, "read_line", lambda self, prompt="> ": None)
    manager = ConfigManager(tmp_path / "cfg")

    assert main([str(sample_dir), "--max-rows", "5"], config_manager=manager) == 0

    stored = json.loads(manager.config_file.read_text())
    assert stored["stats"]["total_runs"] == 1
    assert stored["max_rows"] == 40
    assert stored["last_run"]


def test_main_defaults_to_current_directory(sample_dir: Path, tmp_path: Path, monkeypatch):
    seen = []
    monkeypatch.chdir(sample_dir)
    monkeypatch.setattr(Ogkos, "run", lambda self, path: seen.append(path) or 0)

    assert main([], config_manager=ConfigManager(tmp_path / "cfg")) == 0
    assert seen == [os.getcwd()]


def test_main_missing_path_fails(tmp_path: Path):
    manager = ConfigManager(tmp_path / "cfg")

    assert main([str(tmp_path / "missing")], config_manager=manager) == 1
    assert not manager.config_file.exists()


def test_main_invalid_max_rows(sample_dir: Path, tmp_path: Path):
    assert main([str(sample_dir), "--max-rows", "0"], config_manager=ConfigManager(tmp_path / "cfg")) == 1


def test_main_show_and_reset_stats(tmp_path: Path, capsys):
    manager = ConfigManager(tmp_path / "cfg")
    config = OgkosConfig()
    config.record_run(removed=3, reclaimed=1234)
    manager.save(config)

    assert main(["--show-stats"], config_manager=manager) == 0
    assert "total_reclaimed_bytes" in capsys.readouterr().out

    assert main(["--reset-stats"], config_manager=manager) == 0
    assert manager.load().stats["total_runs"] == 0


def test_module_exposes_console_entry_point():
    assert callable(ogkos.main)


def test_main_rejects_badly_typed_option(sample_dir: Path, tmp_path: Path, capsys):
    with pytest.raises(SystemExit) as exc_info:
        main([str(sample_dir), "--max-rows", "abc"], config_manager=ConfigManager(tmp_path / "cfg"))

    assert exc_info.value.code == 1
    assert "invalid int value" in capsys.readouterr().err


@pytest.mark.parametrize("dirname", ["a[", "[red]x", "odd[/b]"])
def test_build_path_with_brackets(tmp_path: Path, console_output, dirname):
    root = tmp_path / dirname / "b]"
    root.mkdir(parents=True)
    (root / "f").write_bytes(b"x" * 10)
    ui, _buffer = console_output
    explorer = Ogkos(config=OgkosConfig(count_directory_size=False), ui=ui)

    explorer.build(str(root))
    explorer.show(explorer.cursor)

    output = _output(console_output)
    assert explorer.root.size == 10
    assert f"{dirname}/b]" in output
    assert f"{dirname}/b]: 10.00B" in output


class _RecordingOperations(FileOperations):
    def __init__(self):
        super().__init__()
        self.callbacks = []

    def remove(self, node):
        self.callbacks.append(self.progress_callback)
        return super().remove(node)


def test_rm_reports_progress_while_removing(sample_dir: Path, console_output):
    ui, _buffer = console_output
    operations = _RecordingOperations()
    explorer = Ogkos(config=OgkosConfig(count_directory_size=False), ui=ui, file_operations=operations)
    explorer.build(str(sample_dir))

    assert explorer.dispatch("/rm c")

    assert len(operations.callbacks) == 1
    assert callable(operations.callbacks[0])
    assert operations.progress_callback is None
    assert explorer.root.size == 300
