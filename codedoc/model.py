from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


PRODUCTION = "production"
DEVELOPMENT = "development"
PEER = "peer"

DEPENDENCY_KINDS = (PRODUCTION, DEVELOPMENT, PEER)

DependencyKind = Literal["production", "development", "peer"]


class ProjectType(str, Enum):
	NODEJS = "nodejs"
	PHP = "php"
	GO = "go"
	PYTHON = "python"
	RUST = "rust"
	JAVA = "java"
	RUBY = "ruby"
	DOTNET = "dotnet"
	UNKNOWN = "unknown"


class FileRecord(BaseModel):
	model_config = ConfigDict(frozen=True)

	path: str
	name: str
	extension: str
	size: int
	language: str


class DirectoryNode(BaseModel):
	name: str
	path: str
	is_dir: bool
	size: int = 0
	children: List[DirectoryNode] = []


class Dependency(BaseModel):
	model_config = ConfigDict(frozen=True)

	name: str
	version: str
	kind: DependencyKind


class Advisory(BaseModel):
	model_config = ConfigDict(frozen=True)

	kind: Literal["partial_read", "manifest_parse", "tree_integrity"]
	message: str
	path: Optional[str] = None


def empty_groups() -> Dict[str, List[Dependency]]:
	return {kind: [] for kind in DEPENDENCY_KINDS}


class AnalysisResult(BaseModel):
	model_config = ConfigDict(frozen=True)

	name: str
	root: str
	project_type: ProjectType
	overview: str
	tech_stack: List[str] = []
	folder_structure: Dict[str, str] = {}
	setup_instructions: List[str] = []
	dependencies: Dict[str, List[Dependency]] = Field(default_factory=empty_groups)
	files: List[FileRecord] = []
	structure: DirectoryNode
	language_distribution: Dict[str, int] = {}
	orphans: List[str] = []
	advisories: List[Advisory] = []
	created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class JobStatus(str, Enum):
	PROCESSING = "processing"
	COMPLETED = "completed"
	FAILED = "failed"


class Job(BaseModel):
	id: str
	status: JobStatus = JobStatus.PROCESSING
	progress: int = 0
	message: str = ""
	document: Optional[str] = None
	created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
	updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


DirectoryNode.model_rebuild()
