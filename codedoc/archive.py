from __future__ import annotations

import logging
import os
import shutil
import tarfile
import zipfile
from pathlib import Path
from typing import Tuple

from .errors import ArchiveIOError, CorruptArchiveError, UnsupportedFormatError


logger = logging.getLogger(__name__)


SUPPORTED_FORMATS: Tuple[str, ...] = (".zip", ".tar", ".tar.gz", ".tgz", ".gz")

# Top-level archive entries added by OS tooling rather than the project.
_ARCHIVE_NOISE = {"__MACOSX", ".DS_Store"}


def archive_format(filename: str) -> str:
	"""Return the supported suffix ``filename`` ends with, or ``""``."""
	lower = filename.lower()
	for suffix in sorted(SUPPORTED_FORMATS, key=len, reverse=True):
		if lower.endswith(suffix):
			return suffix
	return ""


def is_supported(filename: str) -> bool:
	return bool(archive_format(filename))


def _extract_zip(src: Path, dest: Path) -> None:
	try:
		with zipfile.ZipFile(src) as zf:
			zf.extractall(dest)
	except zipfile.BadZipFile as e:
		raise CorruptArchiveError(f"{src.name}: {e}") from e


def _extract_tar(src: Path, dest: Path) -> None:
	try:
		with tarfile.open(src, "r:*") as tf:
			tf.extractall(dest, filter="data")
	except tarfile.TarError as e:
		raise CorruptArchiveError(f"{src.name}: {e}") from e


def project_root(extracted: Path) -> Path:
	"""Descend into the single top-level directory most archives wrap their content in."""
	entries = [p for p in extracted.iterdir() if p.name not in _ARCHIVE_NOISE]
	if len(entries) == 1 and entries[0].is_dir():
		return entries[0]
	return extracted


def extract_archive(archive_path: str, dest: str) -> Path:
	src = Path(archive_path)
	fmt = archive_format(src.name)
	if not fmt:
		raise UnsupportedFormatError(f"Unsupported archive format: {src.suffix or src.name}")

	out = Path(dest)
	try:
		out.mkdir(parents=True, exist_ok=True)
		if fmt == ".zip":
			_extract_zip(src, out)
		else:
			_extract_tar(src, out)
		root = project_root(out)
	except OSError as e:
		raise ArchiveIOError(f"Failed to extract {src.name}: {e}") from e
	logger.info("Extracted %s to %s", src.name, root)
	return root


def cleanup(path: str) -> None:
	if os.path.exists(path):
		shutil.rmtree(path, ignore_errors=True)
		logger.debug("Removed %s", path)
