from __future__ import annotations

from collections import Counter
from typing import Dict, List

from .classify import UNKNOWN_LANGUAGE
from .model import Dependency, DirectoryNode, FileRecord, ProjectType
from .tree import count_nodes


PROJECT_TYPE_LABELS: Dict[ProjectType, str] = {
	ProjectType.NODEJS: "Node.js",
	ProjectType.PHP: "PHP",
	ProjectType.GO: "Go",
	ProjectType.PYTHON: "Python",
	ProjectType.RUST: "Rust",
	ProjectType.JAVA: "Java / JVM",
	ProjectType.RUBY: "Ruby",
	ProjectType.DOTNET: ".NET",
	ProjectType.UNKNOWN: "Generic",
}

# dependency name -> framework shown in the tech stack
KNOWN_FRAMEWORKS: Dict[str, str] = {
	"react": "React",
	"next": "Next.js",
	"vue": "Vue",
	"@angular/core": "Angular",
	"svelte": "Svelte",
	"express": "Express",
	"@nestjs/core": "NestJS",
	"fastify": "Fastify",
	"laravel/framework": "Laravel",
	"symfony/framework-bundle": "Symfony",
	"github.com/gin-gonic/gin": "Gin",
	"github.com/labstack/echo/v4": "Echo",
	"github.com/gofiber/fiber/v2": "Fiber",
	"django": "Django",
	"flask": "Flask",
	"fastapi": "FastAPI",
	"actix-web": "Actix Web",
	"axum": "Axum",
	"rocket": "Rocket",
	"org.springframework.boot:spring-boot-starter-web": "Spring Boot",
	"rails": "Ruby on Rails",
	"sinatra": "Sinatra",
	"Microsoft.AspNetCore.App": "ASP.NET Core",
}

FOLDER_PURPOSES: Dict[str, str] = {
	"src": "Source code",
	"lib": "Library code",
	"app": "Application code",
	"cmd": "Command entry points",
	"internal": "Internal packages",
	"pkg": "Public packages",
	"api": "API definitions and handlers",
	"handlers": "Request handlers",
	"controllers": "Request controllers",
	"routes": "Route definitions",
	"models": "Data models",
	"services": "Business logic services",
	"utils": "Utility helpers",
	"helpers": "Utility helpers",
	"config": "Configuration",
	"components": "UI components",
	"pages": "Page components",
	"views": "Views and templates",
	"templates": "Templates",
	"static": "Static assets",
	"public": "Public assets",
	"assets": "Static assets",
	"styles": "Stylesheets",
	"tests": "Tests",
	"test": "Tests",
	"spec": "Tests",
	"__tests__": "Tests",
	"docs": "Documentation",
	"scripts": "Build and maintenance scripts",
	"migrations": "Database migrations",
	"deploy": "Deployment configuration",
	"examples": "Usage examples",
}

SETUP_INSTRUCTIONS: Dict[ProjectType, List[str]] = {
	ProjectType.NODEJS: ["Install Node.js", "npm install", "npm start"],
	ProjectType.PHP: ["Install PHP and Composer", "composer install"],
	ProjectType.GO: ["Install Go", "go mod download", "go run ./..."],
	ProjectType.PYTHON: [
		"Install Python 3",
		"python -m venv .venv",
		"pip install -r requirements.txt",
	],
	ProjectType.RUST: ["Install the Rust toolchain", "cargo build", "cargo run"],
	ProjectType.JAVA: ["Install a JDK", "mvn install (or ./gradlew build)"],
	ProjectType.RUBY: ["Install Ruby and Bundler", "bundle install"],
	ProjectType.DOTNET: ["Install the .NET SDK", "dotnet restore", "dotnet run"],
	ProjectType.UNKNOWN: ["Refer to the project's README for setup steps"],
}

FOLDER_DEPTH = 2

# Languages that describe data files rather than the stack.
DATA_LANGUAGES = {"json", "yaml", "toml", "xml", "markdown", "restructuredtext"}


def language_distribution(files: List[FileRecord]) -> Dict[str, int]:
	counts = Counter(f.language for f in files if f.language != UNKNOWN_LANGUAGE)
	return dict(sorted(counts.items(), key=lambda item: (-item[1], item[0])))


def detect_frameworks(dependencies: Dict[str, List[Dependency]]) -> List[str]:
	found: List[str] = []
	for deps in dependencies.values():
		for dep in deps:
			framework = KNOWN_FRAMEWORKS.get(dep.name)
			if framework and framework not in found:
				found.append(framework)
	return found


def tech_stack(
	project_type: ProjectType,
	languages: Dict[str, int],
	dependencies: Dict[str, List[Dependency]],
) -> List[str]:
	stack: List[str] = []
	if project_type is not ProjectType.UNKNOWN:
		stack.append(PROJECT_TYPE_LABELS[project_type])
	seen = {item.lower() for item in stack}
	for lang in languages:
		if lang in DATA_LANGUAGES or lang in seen:
			continue
		stack.append(lang)
	stack.extend(fw for fw in detect_frameworks(dependencies) if fw not in stack)
	return stack


def describe_folder(node: DirectoryNode) -> str:
	purpose = FOLDER_PURPOSES.get(node.name.lower())
	dirs, files = count_nodes(node)
	contents = f"{files} files" if not dirs else f"{files} files, {dirs} subdirectories"
	if purpose:
		return f"{purpose} ({contents})"
	return f"Contains {contents}"


def folder_structure(root: DirectoryNode, depth: int = FOLDER_DEPTH) -> Dict[str, str]:
	mapping: Dict[str, str] = {}

	def visit(node: DirectoryNode, level: int) -> None:
		for child in node.children:
			if not child.is_dir:
				continue
			mapping[child.path] = describe_folder(child)
			if level < depth:
				visit(child, level + 1)

	visit(root, 1)
	return mapping


def overview(
	name: str,
	project_type: ProjectType,
	languages: Dict[str, int],
	root: DirectoryNode,
) -> str:
	dirs, files = count_nodes(root)
	parts: List[str] = [
		f"{name} is a {PROJECT_TYPE_LABELS[project_type]} project "
		f"with {files} files in {dirs} directories."
	]
	if languages:
		primary = next(iter(languages))
		parts.append(f"The primary language is {primary}.")
	return " ".join(parts)
