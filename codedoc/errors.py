"""Exception types raised by the analysis engine and its collaborators.

Only fatal conditions are raised out of an analysis run. Unreadable
subtrees, malformed manifests and orphaned tree nodes are recorded as
advisories on the result instead.
"""

from __future__ import annotations

import threading
from typing import Optional


class AnalysisError(Exception):
	"""Base class for analysis engine failures."""


class InvalidInputError(AnalysisError):
	"""The project root is missing, not a directory, or cannot be listed."""


class ManifestParseError(AnalysisError):
	def __init__(self, manifest: str, reason: str):
		super().__init__(f"{manifest}: {reason}")
		self.manifest = manifest
		self.reason = reason


class AnalysisCancelled(AnalysisError):
	"""The caller asked for the run to stop."""


class ArchiveError(Exception):
	"""Base class for archive ingestion failures."""


class UnsupportedFormatError(ArchiveError):
	pass


class CorruptArchiveError(ArchiveError):
	pass


class ArchiveIOError(ArchiveError):
	pass


class RenderError(Exception):
	"""The document could not be rendered."""


def raise_if_cancelled(cancel: Optional[threading.Event]) -> None:
	if cancel is not None and cancel.is_set():
		raise AnalysisCancelled("analysis cancelled by caller")
