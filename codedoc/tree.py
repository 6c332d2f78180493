from __future__ import annotations

import logging
import posixpath
from typing import Dict, Iterable, List, Tuple

from .fs_scan import WalkEntry
from .model import DirectoryNode


logger = logging.getLogger(__name__)


def build_tree(entries: Iterable[WalkEntry], root_name: str) -> Tuple[DirectoryNode, List[str]]:
	"""Assemble walk entries into a tree rooted at ``root_name``.

	Nodes are first collected in a flat mapping keyed by relative path and
	only then attached to their parents, so the result does not depend on
	the order in which entries were produced. Paths whose parent is absent
	from the mapping (or is not a directory) are returned as orphans.
	"""
	root = DirectoryNode(name=root_name, path="", is_dir=True)
	nodes: Dict[str, DirectoryNode] = {"": root}
	orphans: List[str] = []

	for entry in entries:
		if not entry.path or entry.path in nodes:
			logger.warning("Duplicate tree entry %r", entry.path)
			orphans.append(entry.path)
			continue
		nodes[entry.path] = DirectoryNode(
			name=posixpath.basename(entry.path),
			path=entry.path,
			is_dir=entry.is_dir,
			size=0 if entry.is_dir else entry.size,
		)

	for path, node in nodes.items():
		if not path:
			continue
		parent = nodes.get(posixpath.dirname(path))
		if parent is None or not parent.is_dir:
			logger.warning("Orphaned tree node %s", path)
			orphans.append(path)
			continue
		parent.children.append(node)

	_finalize(root)
	return root, orphans


def _finalize(node: DirectoryNode) -> int:
	if not node.is_dir:
		return node.size
	node.children.sort(key=lambda child: (not child.is_dir, child.name))
	node.size = sum(_finalize(child) for child in node.children)
	return node.size


def flatten_tree(node: DirectoryNode) -> List[str]:
	paths: List[str] = []
	stack = list(reversed(node.children))
	while stack:
		current = stack.pop()
		paths.append(current.path)
		stack.extend(reversed(current.children))
	return paths


def count_nodes(node: DirectoryNode) -> Tuple[int, int]:
	"""Return (directories, files) below ``node``."""
	dirs = files = 0
	for child in node.children:
		if child.is_dir:
			dirs += 1
			sub_dirs, sub_files = count_nodes(child)
			dirs += sub_dirs
			files += sub_files
		else:
			files += 1
	return dirs, files
