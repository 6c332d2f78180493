"""Sequences a single analysis run over an extracted project root.

Stages run in a fixed order: init, type detection, dependency extraction,
tree construction, file classification, assembly. Invalid input and
cancellation abort the run. Unreadable subtrees, malformed manifests and
orphaned tree nodes narrow the result and are listed in its advisories.
"""

from __future__ import annotations

import logging
import os
import threading
from enum import Enum
from pathlib import Path
from typing import List, Optional

from . import summarize
from .classify import classify_files
from .deps import extract_dependencies
from .detect import detect_project_type
from .errors import AnalysisError, InvalidInputError, ManifestParseError, raise_if_cancelled
from .fs_scan import DEFAULT_POLICY, IgnorePolicy, Walker
from .model import Advisory, AnalysisResult, empty_groups
from .tree import build_tree


logger = logging.getLogger(__name__)


class Stage(str, Enum):
	INIT = "init"
	TYPE_DETECTION = "type_detection"
	DEPENDENCY_EXTRACTION = "dependency_extraction"
	TREE_CONSTRUCTION = "tree_construction"
	FILE_CLASSIFICATION = "file_classification"
	ASSEMBLED = "assembled"
	FAILED = "failed"


class ProjectAnalyzer:
	def __init__(
		self,
		policy: IgnorePolicy = DEFAULT_POLICY,
		cancel: Optional[threading.Event] = None,
	):
		self.policy = policy
		self.cancel = cancel
		self.stage = Stage.INIT

	def _enter(self, stage: Stage) -> None:
		raise_if_cancelled(self.cancel)
		self.stage = stage
		logger.debug("Stage %s", stage.value)

	def analyze(self, root: str) -> AnalysisResult:
		try:
			return self._run(root)
		except AnalysisError as e:
			logger.info("Analysis of %s failed at %s: %s", root, self.stage.value, e)
			self.stage = Stage.FAILED
			raise

	def _run(self, root: str) -> AnalysisResult:
		self._enter(Stage.INIT)
		root = os.path.abspath(root)
		if not os.path.exists(root):
			raise InvalidInputError(f"Project root does not exist: {root}")
		if not os.path.isdir(root):
			raise InvalidInputError(f"Project root is not a directory: {root}")
		name = os.path.basename(root.rstrip(os.sep)) or root
		advisories: List[Advisory] = []
		logger.info("Analyzing %s", root)

		self._enter(Stage.TYPE_DETECTION)
		walker = Walker(root, self.policy, self.cancel)
		entries = list(walker.walk())
		for failure in walker.errors:
			advisories.append(Advisory(kind="partial_read", path=failure.path, message=failure.message))
		project_type = detect_project_type(root, entries)
		logger.info("Detected project type %s for %s", project_type.value, name)

		self._enter(Stage.DEPENDENCY_EXTRACTION)
		try:
			dependencies = extract_dependencies(Path(root), project_type)
		except ManifestParseError as e:
			logger.warning("Dependency manifest could not be parsed: %s", e)
			advisories.append(Advisory(kind="manifest_parse", path=e.manifest, message=e.reason))
			dependencies = empty_groups()

		self._enter(Stage.TREE_CONSTRUCTION)
		structure, orphans = build_tree(entries, name)
		for path in orphans:
			advisories.append(
				Advisory(kind="tree_integrity", path=path, message="parent directory missing from scan")
			)

		self._enter(Stage.FILE_CLASSIFICATION)
		files = classify_files(entries)

		self._enter(Stage.ASSEMBLED)
		languages = summarize.language_distribution(files)
		result = AnalysisResult(
			name=name,
			root=root,
			project_type=project_type,
			overview=summarize.overview(name, project_type, languages, structure),
			tech_stack=summarize.tech_stack(project_type, languages, dependencies),
			folder_structure=summarize.folder_structure(structure),
			setup_instructions=list(summarize.SETUP_INSTRUCTIONS[project_type]),
			dependencies=dependencies,
			files=files,
			structure=structure,
			language_distribution=languages,
			orphans=orphans,
			advisories=advisories,
		)
		logger.info(
			"Analysis of %s complete: %d files, %d advisories",
			name, len(files), len(advisories),
		)
		return result


def analyze_project(
	root: str,
	policy: IgnorePolicy = DEFAULT_POLICY,
	cancel: Optional[threading.Event] = None,
) -> AnalysisResult:
	return ProjectAnalyzer(policy, cancel).analyze(root)
