from __future__ import annotations

import logging
import os
import threading
import uuid
from datetime import datetime, timezone
from typing import Dict, Optional

from .archive import cleanup, extract_archive
from .config import Settings
from .errors import AnalysisError, ArchiveError, RenderError
from .model import Job, JobStatus
from .orchestrator import analyze_project
from .render import write_document


logger = logging.getLogger(__name__)


def document_filename(job_id: str) -> str:
	return f"{job_id}_documentation.md"


class JobStore:
	"""In-memory job registry.

	The lock only guards the mapping; no I/O happens while it is held.
	"""

	def __init__(self):
		self._jobs: Dict[str, Job] = {}
		self._lock = threading.Lock()

	def create(self) -> Job:
		job = Job(id=str(uuid.uuid4()), message="File uploaded successfully. Processing started.")
		with self._lock:
			self._jobs[job.id] = job
		return job

	def get(self, job_id: str) -> Optional[Job]:
		with self._lock:
			job = self._jobs.get(job_id)
			return job.model_copy() if job else None

	def update(self, job_id: str, **changes) -> Job:
		with self._lock:
			job = self._jobs[job_id].model_copy(
				update={**changes, "updated_at": datetime.now(timezone.utc)}
			)
			self._jobs[job_id] = job
		return job


def run_job(store: JobStore, job_id: str, archive_path: str, settings: Settings) -> None:
	"""Extract, analyze and render one uploaded archive."""
	upload_dir = os.path.join(settings.upload_path, job_id)
	extract_dir = os.path.join(upload_dir, "extracted")
	logger.info("Starting processing for job %s", job_id)
	try:
		root = extract_archive(archive_path, extract_dir)
		store.update(job_id, progress=30, message="Archive extracted")

		result = analyze_project(str(root))
		store.update(job_id, progress=70, message="Analysis complete")

		filename = document_filename(job_id)
		write_document(result, os.path.join(settings.output_path, filename))
	except (ArchiveError, AnalysisError, RenderError) as e:
		logger.exception("Job %s failed: %s", job_id, e)
		store.update(job_id, status=JobStatus.FAILED, message=str(e))
		return
	except Exception:
		logger.exception("Job %s failed with an unexpected error", job_id)
		store.update(job_id, status=JobStatus.FAILED, message="Internal error while generating documentation")
		return
	finally:
		cleanup(upload_dir)

	store.update(
		job_id,
		status=JobStatus.COMPLETED,
		progress=100,
		message="Documentation generated successfully",
		document=filename,
	)
	logger.info("Documentation generated successfully for job %s", job_id)
