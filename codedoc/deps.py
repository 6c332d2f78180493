"""Per-ecosystem dependency extraction.

Every extractor takes the project root and returns dependency groups keyed
by kind (``production``, ``development``, ``peer``). A missing manifest is
not an error and yields empty groups; a malformed one raises
``ManifestParseError``. Names declared more than once are kept as separate
entries.
"""

from __future__ import annotations

import json
import logging
import re
import tomllib
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from .errors import ManifestParseError
from .model import DEVELOPMENT, PEER, PRODUCTION, Dependency, ProjectType, empty_groups


logger = logging.getLogger(__name__)

DependencyGroups = Dict[str, List[Dependency]]
Extractor = Callable[[Path], DependencyGroups]

ANY_VERSION = "*"


def _add(groups: DependencyGroups, name: str, version: Any, kind: str) -> None:
	version = str(version).strip() if version not in (None, "") else ANY_VERSION
	groups[kind].append(Dependency(name=name, version=version, kind=kind))


def _read_text(path: Path) -> str:
	try:
		return path.read_text(encoding="utf-8-sig")
	except UnicodeDecodeError as e:
		raise ManifestParseError(path.name, f"not valid UTF-8: {e}") from e
	except OSError as e:
		raise ManifestParseError(path.name, f"cannot be read: {e}") from e


# -- JSON manifests (package.json, composer.json) ---------------------------

class _Pairs(list):
	"""A decoded JSON object that keeps repeated keys."""

	def get_all(self, key: str) -> List[Any]:
		return [value for k, value in self if k == key]


def _load_json_pairs(path: Path) -> _Pairs:
	try:
		data = json.loads(_read_text(path), object_pairs_hook=_Pairs)
	except json.JSONDecodeError as e:
		raise ManifestParseError(path.name, f"invalid JSON: {e}") from e
	if not isinstance(data, _Pairs):
		raise ManifestParseError(path.name, "top level is not an object")
	return data


def _extract_json_sections(path: Path, sections: Iterable[Tuple[str, str]]) -> DependencyGroups:
	groups = empty_groups()
	if not path.is_file():
		return groups
	data = _load_json_pairs(path)
	for key, kind in sections:
		for section in data.get_all(key):
			if not isinstance(section, _Pairs):
				raise ManifestParseError(path.name, f'"{key}" is not an object')
			for name, version in section:
				if not isinstance(version, str):
					raise ManifestParseError(path.name, f'version of "{name}" in "{key}" is not a string')
				_add(groups, name, version, kind)
	return groups


NODE_SECTIONS = [
	("dependencies", PRODUCTION),
	("optionalDependencies", PRODUCTION),
	("devDependencies", DEVELOPMENT),
	("peerDependencies", PEER),
]

COMPOSER_SECTIONS = [
	("require", PRODUCTION),
	("require-dev", DEVELOPMENT),
]


def extract_node(root: Path) -> DependencyGroups:
	return _extract_json_sections(root / "package.json", NODE_SECTIONS)


def extract_php(root: Path) -> DependencyGroups:
	return _extract_json_sections(root / "composer.json", COMPOSER_SECTIONS)


# -- go.mod ------------------------------------------------------------------

def extract_go(root: Path) -> DependencyGroups:
	groups = empty_groups()
	path = root / "go.mod"
	if not path.is_file():
		return groups

	in_block = False
	for lineno, raw in enumerate(_read_text(path).splitlines(), start=1):
		line = raw.split("//", 1)[0].strip()
		if not line:
			continue
		if in_block:
			if line == ")":
				in_block = False
				continue
			spec = line
		elif line.startswith("require"):
			rest = line[len("require"):].strip()
			if rest == "(":
				in_block = True
				continue
			spec = rest
		else:
			continue
		parts = spec.split()
		if len(parts) != 2:
			raise ManifestParseError(path.name, f"line {lineno}: malformed require {raw.strip()!r}")
		_add(groups, parts[0], parts[1], PRODUCTION)

	if in_block:
		raise ManifestParseError(path.name, "unterminated require block")
	return groups


# -- Python ------------------------------------------------------------------

_REQUIREMENT_RE = re.compile(r"^([A-Za-z0-9][A-Za-z0-9._-]*)\s*(\[[^\]]*\])?\s*(.*)$")

REQUIREMENT_FILES = [
	("requirements.txt", PRODUCTION),
	("requirements-dev.txt", DEVELOPMENT),
	("dev-requirements.txt", DEVELOPMENT),
]


def parse_requirement(text: str) -> Optional[Tuple[str, str]]:
	"""Split a PEP 508 style requirement into (name, version specifier)."""
	text = text.split(";", 1)[0].strip()
	match = _REQUIREMENT_RE.match(text)
	if not match:
		return None
	name, _extras, spec = match.groups()
	spec = spec.strip().strip("()").strip()
	return name, spec or ANY_VERSION


def _extract_requirements_file(path: Path, kind: str, groups: DependencyGroups) -> None:
	for lineno, raw in enumerate(_read_text(path).splitlines(), start=1):
		line = raw.split(" #", 1)[0].strip()
		if not line or line.startswith("#") or line.startswith("-"):
			continue
		if "://" in line:
			# direct URL or VCS reference
			continue
		parsed = parse_requirement(line)
		if parsed is None:
			raise ManifestParseError(path.name, f"line {lineno}: cannot parse {line!r}")
		_add(groups, parsed[0], parsed[1], kind)


def _load_toml(path: Path) -> Dict[str, Any]:
	try:
		return tomllib.loads(_read_text(path))
	except tomllib.TOMLDecodeError as e:
		raise ManifestParseError(path.name, f"invalid TOML: {e}") from e


def _add_requirement_list(groups: DependencyGroups, manifest: str, items: Any, kind: str) -> None:
	if not isinstance(items, list):
		raise ManifestParseError(manifest, "dependency list is not an array")
	for item in items:
		parsed = parse_requirement(str(item))
		if parsed is None:
			raise ManifestParseError(manifest, f"cannot parse requirement {item!r}")
		_add(groups, parsed[0], parsed[1], kind)


def _table_version(spec: Any) -> str:
	if isinstance(spec, dict):
		for key in ("version", "git", "path"):
			if key in spec:
				return str(spec[key])
		return ANY_VERSION
	return str(spec)


def _add_table(groups: DependencyGroups, manifest: str, table: Any, kind: str, skip: Iterable[str] = ()) -> None:
	if not isinstance(table, dict):
		raise ManifestParseError(manifest, "dependency table is not a table")
	for name, spec in table.items():
		if name in skip:
			continue
		_add(groups, name, _table_version(spec), kind)


DEV_EXTRAS = {"dev", "develop", "development", "test", "tests", "testing", "lint", "docs", "doc", "typing"}


def _subtable(manifest: str, table: Dict[str, Any], key: str, label: str) -> Dict[str, Any]:
	value = table.get(key, {})
	if not isinstance(value, dict):
		raise ManifestParseError(manifest, f"{label} is not a table")
	return value


def _extract_pyproject(path: Path, groups: DependencyGroups) -> None:
	data = _load_toml(path)
	project = _subtable(path.name, data, "project", "[project]")
	if "dependencies" in project:
		_add_requirement_list(groups, path.name, project["dependencies"], PRODUCTION)
	optional = _subtable(path.name, project, "optional-dependencies", "optional-dependencies")
	for extra, items in optional.items():
		kind = DEVELOPMENT if extra.lower() in DEV_EXTRAS else PRODUCTION
		_add_requirement_list(groups, path.name, items, kind)

	tool = _subtable(path.name, data, "tool", "[tool]")
	poetry = _subtable(path.name, tool, "poetry", "[tool.poetry]")
	if "dependencies" in poetry:
		_add_table(groups, path.name, poetry["dependencies"], PRODUCTION, skip=("python",))
	if "dev-dependencies" in poetry:
		_add_table(groups, path.name, poetry["dev-dependencies"], DEVELOPMENT)
	poetry_groups = _subtable(path.name, poetry, "group", "[tool.poetry.group]")
	for name, group in poetry_groups.items():
		if not isinstance(group, dict):
			raise ManifestParseError(path.name, f"poetry group {name!r} is not a table")
		_add_table(groups, path.name, group.get("dependencies", {}), DEVELOPMENT)


def extract_python(root: Path) -> DependencyGroups:
	groups = empty_groups()
	for filename, kind in REQUIREMENT_FILES:
		path = root / filename
		if path.is_file():
			_extract_requirements_file(path, kind, groups)
	pyproject = root / "pyproject.toml"
	if pyproject.is_file():
		_extract_pyproject(pyproject, groups)
	return groups


# -- Rust --------------------------------------------------------------------

CARGO_SECTIONS = [
	("dependencies", PRODUCTION),
	("dev-dependencies", DEVELOPMENT),
	("build-dependencies", DEVELOPMENT),
]


def extract_rust(root: Path) -> DependencyGroups:
	groups = empty_groups()
	path = root / "Cargo.toml"
	if not path.is_file():
		return groups
	data = _load_toml(path)
	for section, kind in CARGO_SECTIONS:
		if section in data:
			_add_table(groups, path.name, data[section], kind)
	return groups


# -- JVM ---------------------------------------------------------------------

MAVEN_SCOPES = {
	"compile": PRODUCTION,
	"runtime": PRODUCTION,
	"system": PRODUCTION,
	"import": PRODUCTION,
	"test": DEVELOPMENT,
	"provided": PEER,
}

GRADLE_CONFIGURATIONS = {
	"implementation": PRODUCTION,
	"api": PRODUCTION,
	"compile": PRODUCTION,
	"compileOnly": PEER,
	"runtimeOnly": PRODUCTION,
	"testImplementation": DEVELOPMENT,
	"testCompile": DEVELOPMENT,
	"testRuntimeOnly": DEVELOPMENT,
	"androidTestImplementation": DEVELOPMENT,
}

_GRADLE_RE = re.compile(
	r"^\s*(" + "|".join(GRADLE_CONFIGURATIONS) + r")\s*\(?\s*['\"]([^'\":]+):([^'\":]+)(?::([^'\"]+))?['\"]",
	re.MULTILINE,
)


def _local(tag: str) -> str:
	return tag.rsplit("}", 1)[-1]


def _child_text(element: ET.Element, name: str) -> Optional[str]:
	for child in element:
		if _local(child.tag) == name:
			return (child.text or "").strip()
	return None


def _parse_xml(path: Path) -> ET.Element:
	try:
		return ET.fromstring(_read_text(path))
	except ET.ParseError as e:
		raise ManifestParseError(path.name, f"invalid XML: {e}") from e


def _extract_pom(path: Path, groups: DependencyGroups) -> None:
	project = _parse_xml(path)
	for element in project:
		# dependencyManagement only pins versions, it declares nothing
		if _local(element.tag) != "dependencies":
			continue
		for dep in element:
			if _local(dep.tag) != "dependency":
				continue
			group_id = _child_text(dep, "groupId")
			artifact_id = _child_text(dep, "artifactId")
			if not artifact_id:
				raise ManifestParseError(path.name, "dependency without artifactId")
			name = f"{group_id}:{artifact_id}" if group_id else artifact_id
			scope = _child_text(dep, "scope") or "compile"
			_add(groups, name, _child_text(dep, "version"), MAVEN_SCOPES.get(scope, PRODUCTION))


def _extract_gradle(path: Path, groups: DependencyGroups) -> None:
	for match in _GRADLE_RE.finditer(_read_text(path)):
		configuration, group_id, artifact_id, version = match.groups()
		_add(groups, f"{group_id}:{artifact_id}", version, GRADLE_CONFIGURATIONS[configuration])


def extract_java(root: Path) -> DependencyGroups:
	groups = empty_groups()
	pom = root / "pom.xml"
	if pom.is_file():
		_extract_pom(pom, groups)
	for name in ("build.gradle", "build.gradle.kts"):
		if (root / name).is_file():
			_extract_gradle(root / name, groups)
	return groups


# -- Ruby --------------------------------------------------------------------

_GEM_RE = re.compile(r"""^gem\s+['"]([^'"]+)['"](?:\s*,\s*['"]([^'"]+)['"])?""")
_GROUP_RE = re.compile(r"^group\s+(.+?)\s+do\b")
_BLOCK_RE = re.compile(r"\bdo(\s*\|[^|]*\|)?$")
_KEYWORD_BLOCK_RE = re.compile(r"^(if|unless|case|while|until|begin)\b")
_DEV_GROUPS = {"development", "test"}


def extract_ruby(root: Path) -> DependencyGroups:
	groups = empty_groups()
	path = root / "Gemfile"
	if not path.is_file():
		return groups

	group_stack: List[bool] = []
	for raw in _read_text(path).splitlines():
		line = raw.split("#", 1)[0].strip()
		if not line:
			continue
		group = _GROUP_RE.match(line)
		if group:
			names = {n.strip().lstrip(":").strip("'\"") for n in group.group(1).split(",")}
			group_stack.append(bool(names) and names <= _DEV_GROUPS)
			continue
		if _BLOCK_RE.search(line) or _KEYWORD_BLOCK_RE.match(line):
			# platforms, source, conditionals and similar blocks
			group_stack.append(False)
			continue
		if line == "end":
			if not group_stack:
				raise ManifestParseError(path.name, "unbalanced 'end'")
			group_stack.pop()
			continue
		gem = _GEM_RE.match(line)
		if gem:
			kind = DEVELOPMENT if any(group_stack) else PRODUCTION
			_add(groups, gem.group(1), gem.group(2), kind)

	if group_stack:
		raise ManifestParseError(path.name, "unterminated group block")
	return groups


# -- .NET --------------------------------------------------------------------

def extract_dotnet(root: Path) -> DependencyGroups:
	groups = empty_groups()
	for path in sorted(root.glob("*.csproj")):
		project = _parse_xml(path)
		for element in project.iter():
			if _local(element.tag) != "PackageReference":
				continue
			name = element.get("Include") or element.get("Update")
			if not name:
				raise ManifestParseError(path.name, "PackageReference without Include")
			version = element.get("Version") or _child_text(element, "Version")
			_add(groups, name, version, PRODUCTION)
	return groups


EXTRACTORS: Dict[ProjectType, Extractor] = {
	ProjectType.NODEJS: extract_node,
	ProjectType.PHP: extract_php,
	ProjectType.GO: extract_go,
	ProjectType.PYTHON: extract_python,
	ProjectType.RUST: extract_rust,
	ProjectType.JAVA: extract_java,
	ProjectType.RUBY: extract_ruby,
	ProjectType.DOTNET: extract_dotnet,
}


def extract_dependencies(root: Path, project_type: ProjectType) -> DependencyGroups:
	extractor = EXTRACTORS.get(project_type)
	if extractor is None:
		return empty_groups()
	groups = extractor(Path(root))
	logger.debug(
		"Extracted %s dependencies: %s",
		project_type.value,
		{kind: len(deps) for kind, deps in groups.items()},
	)
	return groups
