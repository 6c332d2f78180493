from __future__ import annotations

import glob
import logging
import os
from collections import Counter
from typing import Dict, Iterable, List, Optional, Tuple

from .fs_scan import WalkEntry, scan_repository
from .model import ProjectType


logger = logging.getLogger(__name__)


# Declaration order is the precedence order for polyglot roots and for
# ties in the extension fallback.
MARKER_FILES: List[Tuple[ProjectType, List[str]]] = [
	(ProjectType.NODEJS, ["package.json", "package-lock.json", "yarn.lock", "pnpm-lock.yaml"]),
	(ProjectType.PHP, ["composer.json", "composer.lock"]),
	(ProjectType.GO, ["go.mod", "go.sum"]),
	(ProjectType.PYTHON, ["pyproject.toml", "requirements.txt", "setup.py", "setup.cfg", "Pipfile"]),
	(ProjectType.RUST, ["Cargo.toml", "Cargo.lock"]),
	(ProjectType.JAVA, ["pom.xml", "build.gradle", "build.gradle.kts"]),
	(ProjectType.RUBY, ["Gemfile", "Gemfile.lock", "*.gemspec"]),
	(ProjectType.DOTNET, ["*.csproj", "*.sln"]),
]

EXTENSION_TYPES: Dict[str, ProjectType] = {
	".js": ProjectType.NODEJS,
	".jsx": ProjectType.NODEJS,
	".mjs": ProjectType.NODEJS,
	".ts": ProjectType.NODEJS,
	".tsx": ProjectType.NODEJS,
	".php": ProjectType.PHP,
	".go": ProjectType.GO,
	".py": ProjectType.PYTHON,
	".rs": ProjectType.RUST,
	".java": ProjectType.JAVA,
	".kt": ProjectType.JAVA,
	".rb": ProjectType.RUBY,
	".cs": ProjectType.DOTNET,
}

_DECLARATION_ORDER = {ptype: index for index, (ptype, _) in enumerate(MARKER_FILES)}


def _marker_exists(root: str, marker: str) -> bool:
	if glob.has_magic(marker):
		return bool(glob.glob(os.path.join(glob.escape(root), marker)))
	return os.path.isfile(os.path.join(root, marker))


def detect_by_markers(root: str) -> Optional[ProjectType]:
	for ptype, markers in MARKER_FILES:
		for marker in markers:
			if _marker_exists(root, marker):
				logger.debug("Marker %s found, project type %s", marker, ptype.value)
				return ptype
	return None


def extension_counts(entries: Iterable[WalkEntry]) -> Counter:
	counts: Counter = Counter()
	for entry in entries:
		if entry.is_dir:
			continue
		ext = os.path.splitext(entry.path)[1].lower()
		if ext:
			counts[ext] += 1
	return counts


def detect_by_extensions(entries: Iterable[WalkEntry]) -> ProjectType:
	totals: Counter = Counter()
	for ext, count in extension_counts(entries).items():
		ptype = EXTENSION_TYPES.get(ext)
		if ptype is not None:
			totals[ptype] += count
	if not totals:
		return ProjectType.UNKNOWN
	# Highest count wins, ties go to the type declared first.
	return min(totals, key=lambda t: (-totals[t], _DECLARATION_ORDER[t]))


def detect_project_type(root: str, entries: Optional[List[WalkEntry]] = None) -> ProjectType:
	ptype = detect_by_markers(root)
	if ptype is not None:
		return ptype
	if entries is None:
		entries = scan_repository(root)
	ptype = detect_by_extensions(entries)
	logger.debug("No marker file under %s, extension fallback chose %s", root, ptype.value)
	return ptype
