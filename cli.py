from __future__ import annotations

import argparse
import logging
import os
import sys
import tempfile

import uvicorn

from codedoc.archive import extract_archive, is_supported
from codedoc.config import settings, setup_logging
from codedoc.errors import AnalysisError, ArchiveError, RenderError
from codedoc.orchestrator import analyze_project
from codedoc.render import write_document


logger = logging.getLogger(__name__)


def cmd_analyze(args: argparse.Namespace) -> None:
	result = analyze_project(args.path)
	print(result.model_dump_json(indent=2))


def cmd_document(args: argparse.Namespace) -> None:
	if os.path.isfile(args.path) and is_supported(args.path):
		with tempfile.TemporaryDirectory(prefix="codedoc-") as tmp:
			root = extract_archive(args.path, tmp)
			result = analyze_project(str(root))
	else:
		result = analyze_project(args.path)
	output = args.output or f"{result.name}_documentation.md"
	write_document(result, output)
	print(output)


def cmd_serve(args: argparse.Namespace) -> None:
	target = "web.app:app" if args.web else "api:app"
	uvicorn.run(target, host=args.host, port=args.port, reload=args.reload)


def main() -> None:
	parser = argparse.ArgumentParser(prog="codedoc")
	parser.add_argument("--log-level", default=settings.log_level)
	sub = parser.add_subparsers(dest="cmd", required=True)

	pa = sub.add_parser("analyze", help="Analyze a project directory and print the result as JSON")
	pa.add_argument("path", help="Path to the project root")
	pa.set_defaults(func=cmd_analyze)

	pd = sub.add_parser("document", help="Generate Markdown documentation for a directory or archive")
	pd.add_argument("path", help="Project root or archive file")
	pd.add_argument("-o", "--output", help="Output file (default: <name>_documentation.md)")
	pd.set_defaults(func=cmd_document)

	ps = sub.add_parser("serve", help="Run the HTTP service")
	ps.add_argument("--host", default=settings.host)
	ps.add_argument("--port", type=int, default=settings.port)
	ps.add_argument("--reload", action="store_true")
	ps.add_argument("--web", action="store_true", help="Also serve the upload page")
	ps.set_defaults(func=cmd_serve)

	args = parser.parse_args()
	setup_logging(args.log_level)
	try:
		args.func(args)
	except (AnalysisError, ArchiveError, RenderError) as e:
		logger.error("%s", e)
		sys.exit(1)


if __name__ == "__main__":
	main()
