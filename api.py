from __future__ import annotations

import logging
import os
import shutil
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from pydantic import BaseModel

from codedoc.archive import SUPPORTED_FORMATS, is_supported
from codedoc.config import settings
from codedoc.errors import InvalidInputError
from codedoc.jobs import JobStore, run_job
from codedoc.model import AnalysisResult, JobStatus
from codedoc.orchestrator import analyze_project
from codedoc.render import MEDIA_TYPE


logger = logging.getLogger(__name__)

router = APIRouter()
jobs = JobStore()


class AnalyzeRequest(BaseModel):
	root_path: str


class UploadResponse(BaseModel):
	job_id: str
	message: str
	status: JobStatus


class StatusResponse(BaseModel):
	status: JobStatus
	progress: int
	message: str
	download_url: Optional[str] = None


@router.post("/analyze", response_model=AnalysisResult)
def analyze(req: AnalyzeRequest) -> AnalysisResult:
	try:
		return analyze_project(req.root_path)
	except InvalidInputError as e:
		raise HTTPException(status_code=400, detail=str(e))


@router.post("/api/upload", response_model=UploadResponse)
def upload_codebase(background: BackgroundTasks, codebase: UploadFile = File(...)) -> UploadResponse:
	filename = os.path.basename(codebase.filename or "")
	if not is_supported(filename):
		raise HTTPException(
			status_code=400,
			detail=f"Invalid file type. Please upload one of: {', '.join(SUPPORTED_FORMATS)}",
		)
	if codebase.size is not None and codebase.size > settings.max_file_size:
		raise HTTPException(status_code=413, detail="Uploaded file is too large")

	job = jobs.create()
	upload_dir = os.path.join(settings.upload_path, job.id)
	archive_path = os.path.join(upload_dir, filename)
	try:
		os.makedirs(upload_dir, exist_ok=True)
		with open(archive_path, "wb") as fh:
			shutil.copyfileobj(codebase.file, fh)
	except OSError:
		logger.exception("Failed to save upload for job %s", job.id)
		jobs.update(job.id, status=JobStatus.FAILED, message="Failed to save uploaded file")
		raise HTTPException(status_code=500, detail="Failed to save uploaded file")

	background.add_task(run_job, jobs, job.id, archive_path, settings)
	return UploadResponse(job_id=job.id, message=job.message, status=job.status)


@router.get("/api/status/{job_id}", response_model=StatusResponse)
def get_status(job_id: str) -> StatusResponse:
	job = jobs.get(job_id)
	if job is None:
		raise HTTPException(status_code=404, detail="Job not found")
	download_url = f"/api/download/{job.document}" if job.document else None
	return StatusResponse(
		status=job.status,
		progress=job.progress,
		message=job.message,
		download_url=download_url,
	)


@router.get("/api/download/{filename}")
def download_documentation(filename: str) -> FileResponse:
	if not filename or os.path.basename(filename) != filename or filename.startswith("."):
		raise HTTPException(status_code=400, detail="Invalid filename")
	path = os.path.join(settings.output_path, filename)
	if not os.path.isfile(path):
		raise HTTPException(status_code=404, detail="Documentation not found")
	return FileResponse(path, media_type=MEDIA_TYPE, filename=filename)


def create_app() -> FastAPI:
	app = FastAPI(title="Code Documentation Generator")
	app.add_middleware(
		CORSMiddleware,
		allow_origins=settings.cors_origins,
		allow_methods=["GET", "POST", "HEAD", "OPTIONS"],
		allow_headers=["Origin", "Content-Type", "Accept"],
	)
	app.include_router(router)
	return app


app = create_app()
