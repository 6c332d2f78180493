import os
import threading

import pytest

from codedoc.errors import AnalysisCancelled, InvalidInputError
from codedoc.fs_scan import IgnorePolicy, WalkEntry, Walker, scan_repository


def _touch(path, text="x"):
	path.parent.mkdir(parents=True, exist_ok=True)
	path.write_text(text)


def test_walk_is_depth_first_and_sorted(tmp_path):
	_touch(tmp_path / "z.txt")
	_touch(tmp_path / "a" / "b.txt")
	_touch(tmp_path / "a" / "c" / "d.txt")
	paths = [e.path for e in scan_repository(str(tmp_path))]
	assert paths == ["a", "a/b.txt", "a/c", "a/c/d.txt", "z.txt"]


def test_walk_reports_sizes_and_directory_flags(tmp_path):
	_touch(tmp_path / "pkg" / "mod.py", "print('hi')\n")
	entries = scan_repository(str(tmp_path))
	assert entries == [
		WalkEntry("pkg", True, 0),
		WalkEntry("pkg/mod.py", False, len("print('hi')\n")),
	]


def test_ignored_directories_are_never_descended(tmp_path, monkeypatch):
	_touch(tmp_path / ".git" / "config")
	_touch(tmp_path / "node_modules" / "left-pad" / "index.js")
	_touch(tmp_path / "app.py")

	visited = []
	real_scandir = os.scandir

	def recording_scandir(path):
		visited.append(os.path.basename(path))
		return real_scandir(path)

	monkeypatch.setattr(os, "scandir", recording_scandir)
	paths = [e.path for e in scan_repository(str(tmp_path))]

	assert paths == ["app.py"]
	assert ".git" not in visited
	assert "node_modules" not in visited


def test_hidden_files_do_not_hide_siblings(tmp_path):
	_touch(tmp_path / "src" / ".env")
	_touch(tmp_path / "src" / ".DS_Store")
	_touch(tmp_path / "src" / "main.go")
	_touch(tmp_path / "Thumbs.db")
	paths = [e.path for e in scan_repository(str(tmp_path))]
	assert paths == ["src", "src/main.go"]


def test_custom_policy_is_used(tmp_path):
	_touch(tmp_path / "generated" / "out.js")
	_touch(tmp_path / "node_modules" / "dep.js")
	policy = IgnorePolicy(directories=frozenset({"generated"}))
	paths = [e.path for e in scan_repository(str(tmp_path), policy)]
	assert paths == ["node_modules", "node_modules/dep.js"]


def test_unreadable_subdirectory_is_recorded_and_skipped(tmp_path, monkeypatch):
	_touch(tmp_path / "locked" / "secret.py")
	_touch(tmp_path / "open" / "main.py")

	real_scandir = os.scandir

	def failing_scandir(path):
		if os.path.basename(path) == "locked":
			raise PermissionError(13, "Permission denied", path)
		return real_scandir(path)

	monkeypatch.setattr(os, "scandir", failing_scandir)
	walker = Walker(str(tmp_path))
	paths = [e.path for e in walker.walk()]

	assert paths == ["locked", "open", "open/main.py"]
	assert [f.path for f in walker.errors] == ["locked"]


def test_missing_root_is_fatal(tmp_path):
	with pytest.raises(InvalidInputError):
		scan_repository(str(tmp_path / "missing"))


def test_walks_are_independent(tmp_path):
	_touch(tmp_path / "a.py")
	walker = Walker(str(tmp_path))
	first = list(walker.walk())
	second = list(walker.walk())
	assert first == second
	assert walker.errors == []


def test_cancellation_is_observed(tmp_path):
	_touch(tmp_path / "a.py")
	cancel = threading.Event()
	cancel.set()
	with pytest.raises(AnalysisCancelled):
		scan_repository(str(tmp_path), cancel=cancel)
