"""Codebase analysis package for generating project documentation.

Modules:
- fs_scan.py: Filesystem walking with an explicit ignore policy.
- classify.py: Extension to language mapping and source-file selection.
- detect.py: Project type detection from marker files and extensions.
- deps.py: Per-ecosystem dependency manifest extraction.
- tree.py: Directory tree construction from walk entries.
- summarize.py: Deterministic textual summaries of the analysis.
- orchestrator.py: Runs a full analysis over one project root.
- model.py: Data structures for analysis results and jobs.
- archive.py: Archive extraction for uploaded codebases.
- render.py: Markdown documentation rendering.
- jobs.py: Upload job tracking and background processing.
"""

__all__ = [
	"fs_scan",
	"classify",
	"detect",
	"deps",
	"tree",
	"summarize",
	"orchestrator",
	"model",
	"archive",
	"render",
	"jobs",
]
