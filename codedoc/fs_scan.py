from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from typing import FrozenSet, Iterator, List, NamedTuple, Optional

from .errors import InvalidInputError, raise_if_cancelled


logger = logging.getLogger(__name__)


DEFAULT_IGNORED_DIRS: FrozenSet[str] = frozenset({
	# dependency caches
	"node_modules", "bower_components", "vendor", "venv", ".venv",
	"__pycache__", ".tox", ".mypy_cache", ".pytest_cache", ".gradle",
	# version control
	".git", ".hg", ".svn",
	# build output
	"dist", "build", "target", "bin", "obj", "out", "coverage", ".next",
	# IDE state
	".idea", ".vscode", ".vs",
})

DEFAULT_IGNORED_FILES: FrozenSet[str] = frozenset({
	".DS_Store", "Thumbs.db", "desktop.ini", "Icon\r",
})


@dataclass(frozen=True)
class IgnorePolicy:
	directories: FrozenSet[str] = DEFAULT_IGNORED_DIRS
	filenames: FrozenSet[str] = DEFAULT_IGNORED_FILES
	skip_hidden: bool = True

	def prunes(self, name: str) -> bool:
		"""Directories that are never descended into."""
		if name in self.directories:
			return True
		return self.skip_hidden and name.startswith(".")

	def hides(self, name: str) -> bool:
		if name in self.filenames:
			return True
		return self.skip_hidden and name.startswith(".")


DEFAULT_POLICY = IgnorePolicy()


class WalkEntry(NamedTuple):
	path: str
	is_dir: bool
	size: int


class ReadFailure(NamedTuple):
	path: str
	message: str


def _join(rel_dir: str, name: str) -> str:
	return f"{rel_dir}/{name}" if rel_dir else name


class Walker:
	"""Depth-first traversal of an extracted project tree.

	Entries are yielded with paths relative to the root, using ``/`` as the
	separator, sorted by name within each directory. Unreadable
	subdirectories are recorded in ``errors`` and skipped.
	"""

	def __init__(
		self,
		root: str,
		policy: IgnorePolicy = DEFAULT_POLICY,
		cancel: Optional[threading.Event] = None,
	):
		self.root = os.path.abspath(root)
		self.policy = policy
		self.cancel = cancel
		self.errors: List[ReadFailure] = []

	def walk(self) -> Iterator[WalkEntry]:
		self.errors = []
		return self._walk_dir(self.root, "")

	def _walk_dir(self, abs_dir: str, rel_dir: str) -> Iterator[WalkEntry]:
		try:
			with os.scandir(abs_dir) as it:
				entries = sorted(it, key=lambda e: e.name)
		except OSError as e:
			if not rel_dir:
				raise InvalidInputError(f"Cannot read project root {abs_dir}: {e}") from e
			logger.warning("Skipping unreadable directory %s: %s", rel_dir, e)
			self.errors.append(ReadFailure(path=rel_dir, message=str(e)))
			return

		for entry in entries:
			raise_if_cancelled(self.cancel)
			rel_path = _join(rel_dir, entry.name)
			try:
				is_dir = entry.is_dir(follow_symlinks=False)
			except OSError as e:
				self.errors.append(ReadFailure(path=rel_path, message=str(e)))
				continue

			if is_dir:
				if self.policy.prunes(entry.name):
					continue
				yield WalkEntry(rel_path, True, 0)
				yield from self._walk_dir(entry.path, rel_path)
				continue

			if self.policy.hides(entry.name):
				continue
			try:
				size = entry.stat(follow_symlinks=False).st_size
			except OSError as e:
				logger.warning("Cannot stat %s: %s", rel_path, e)
				self.errors.append(ReadFailure(path=rel_path, message=str(e)))
				continue
			yield WalkEntry(rel_path, False, size)


def scan_repository(
	root: str,
	policy: IgnorePolicy = DEFAULT_POLICY,
	cancel: Optional[threading.Event] = None,
) -> List[WalkEntry]:
	return list(Walker(root, policy, cancel).walk())
