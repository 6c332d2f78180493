from __future__ import annotations

import logging
import os

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError

from .errors import RenderError
from .model import AnalysisResult
from .summarize import PROJECT_TYPE_LABELS


logger = logging.getLogger(__name__)


DOCUMENT_TEMPLATE = "document.md.j2"
MEDIA_TYPE = "text/markdown"


def _md_cell(value: object) -> str:
	return str(value).replace("|", "\\|").replace("\n", " ")


def _human_size(size: int) -> str:
	value = float(size)
	for unit in ("B", "KB", "MB", "GB"):
		if value < 1024 or unit == "GB":
			return f"{int(value)} {unit}" if unit == "B" else f"{value:.1f} {unit}"
		value /= 1024
	return f"{size} B"


def _environment() -> Environment:
	env = Environment(
		loader=PackageLoader("codedoc", "templates"),
		autoescape=False,
		trim_blocks=True,
		lstrip_blocks=True,
		keep_trailing_newline=True,
		undefined=StrictUndefined,
	)
	env.filters["md_cell"] = _md_cell
	env.filters["human_size"] = _human_size
	return env


def render_document(result: AnalysisResult) -> bytes:
	try:
		template = _environment().get_template(DOCUMENT_TEMPLATE)
		text = template.render(
			project=result,
			type_label=PROJECT_TYPE_LABELS[result.project_type],
		)
	except TemplateError as e:
		raise RenderError(f"Failed to render documentation for {result.name}: {e}") from e
	return text.encode("utf-8")


def write_document(result: AnalysisResult, output_path: str) -> str:
	data = render_document(result)
	out_dir = os.path.dirname(output_path)
	try:
		if out_dir:
			os.makedirs(out_dir, exist_ok=True)
		with open(output_path, "wb") as fh:
			fh.write(data)
	except OSError as e:
		raise RenderError(f"Failed to write {output_path}: {e}") from e
	logger.info("Wrote documentation for %s to %s", result.name, output_path)
	return output_path
