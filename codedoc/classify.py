from __future__ import annotations

import os
from typing import Dict, FrozenSet, Iterable, List

from .fs_scan import WalkEntry
from .model import FileRecord


UNKNOWN_LANGUAGE = "unknown"

EXTENSION_LANGUAGE: Dict[str, str] = {
	".py": "python",
	".pyi": "python",
	".ts": "typescript",
	".tsx": "typescript",
	".js": "javascript",
	".jsx": "javascript",
	".mjs": "javascript",
	".cjs": "javascript",
	".vue": "vue",
	".svelte": "svelte",
	".php": "php",
	".go": "go",
	".rs": "rust",
	".java": "java",
	".kt": "kotlin",
	".kts": "kotlin",
	".scala": "scala",
	".rb": "ruby",
	".cs": "csharp",
	".c": "c",
	".h": "c",
	".cpp": "cpp",
	".cc": "cpp",
	".hpp": "cpp",
	".swift": "swift",
	".dart": "dart",
	".lua": "lua",
	".sh": "shell",
	".bash": "shell",
	".ps1": "powershell",
	".sql": "sql",
	".html": "html",
	".htm": "html",
	".css": "css",
	".scss": "scss",
	".less": "less",
	".json": "json",
	".yaml": "yaml",
	".yml": "yaml",
	".toml": "toml",
	".xml": "xml",
	".md": "markdown",
	".rst": "restructuredtext",
}

FILENAME_LANGUAGE: Dict[str, str] = {
	"Dockerfile": "dockerfile",
	"Makefile": "makefile",
	"Gemfile": "ruby",
	"Rakefile": "ruby",
}

# Config, build and text formats that belong in the file inventory even
# though they carry no language of their own.
CODE_ADJACENT_EXTENSIONS: FrozenSet[str] = frozenset({
	".ini", ".cfg", ".conf", ".env", ".properties", ".gradle", ".lock",
	".mod", ".sum", ".csproj", ".sln", ".txt", ".graphql", ".proto",
	".tf", ".j2", ".jinja", ".twig", ".ejs", ".hbs",
})


def language_for_extension(extension: str) -> str:
	return EXTENSION_LANGUAGE.get(extension.lower(), UNKNOWN_LANGUAGE)


def detect_language(filename: str) -> str:
	if filename in FILENAME_LANGUAGE:
		return FILENAME_LANGUAGE[filename]
	_, ext = os.path.splitext(filename)
	return language_for_extension(ext)


def is_source_file(filename: str) -> bool:
	if filename in FILENAME_LANGUAGE:
		return True
	ext = os.path.splitext(filename)[1].lower()
	return ext in EXTENSION_LANGUAGE or ext in CODE_ADJACENT_EXTENSIONS


def classify_files(entries: Iterable[WalkEntry]) -> List[FileRecord]:
	records: List[FileRecord] = []
	for entry in entries:
		if entry.is_dir:
			continue
		name = entry.path.rsplit("/", 1)[-1]
		if not is_source_file(name):
			continue
		records.append(
			FileRecord(
				path=entry.path,
				name=name,
				extension=os.path.splitext(name)[1].lower(),
				size=entry.size,
				language=detect_language(name),
			)
		)
	return records
