from textwrap import dedent

import pytest

from codedoc.deps import EXTRACTORS, extract_dependencies, parse_requirement
from codedoc.errors import ManifestParseError
from codedoc.model import Dependency, ProjectType


def _write(root, name, text):
	(root / name).write_text(dedent(text))


def _pairs(deps):
	return [(d.name, d.version) for d in deps]


def test_node_production_only(tmp_path):
	_write(tmp_path, "package.json", '{"dependencies":{"left-pad":"1.0.0"}}')
	groups = extract_dependencies(tmp_path, ProjectType.NODEJS)
	assert groups["production"] == [Dependency(name="left-pad", version="1.0.0", kind="production")]
	assert groups["development"] == []
	assert groups["peer"] == []


def test_node_sections_map_to_kinds(tmp_path):
	_write(
		tmp_path,
		"package.json",
		"""
		{
			"name": "web",
			"dependencies": {"react": "^18.2.0"},
			"optionalDependencies": {"fsevents": "2.3.3"},
			"devDependencies": {"jest": "~29.0.0"},
			"peerDependencies": {"react-dom": ">=18"}
		}
		""",
	)
	groups = extract_dependencies(tmp_path, ProjectType.NODEJS)
	assert _pairs(groups["production"]) == [("react", "^18.2.0"), ("fsevents", "2.3.3")]
	assert _pairs(groups["development"]) == [("jest", "~29.0.0")]
	assert _pairs(groups["peer"]) == [("react-dom", ">=18")]


def test_repeated_declarations_are_all_kept(tmp_path):
	_write(tmp_path, "package.json", '{"dependencies": {"lodash": "4.0.0", "lodash": "4.17.21"}}')
	groups = extract_dependencies(tmp_path, ProjectType.NODEJS)
	assert _pairs(groups["production"]) == [("lodash", "4.0.0"), ("lodash", "4.17.21")]


def test_missing_manifest_gives_empty_groups(tmp_path):
	for ptype in EXTRACTORS:
		groups = extract_dependencies(tmp_path, ptype)
		assert groups == {"production": [], "development": [], "peer": []}


def test_unknown_type_has_no_extractor(tmp_path):
	assert ProjectType.UNKNOWN not in EXTRACTORS
	assert extract_dependencies(tmp_path, ProjectType.UNKNOWN)["production"] == []


@pytest.mark.parametrize(
	"text",
	[
		"{not json",
		"[1, 2]",
		'{"dependencies": ["left-pad"]}',
		'{"dependencies": {"left-pad": {"version": "1"}}}',
	],
)
def test_malformed_package_json(tmp_path, text):
	_write(tmp_path, "package.json", text)
	with pytest.raises(ManifestParseError) as excinfo:
		extract_dependencies(tmp_path, ProjectType.NODEJS)
	assert excinfo.value.manifest == "package.json"


def test_composer(tmp_path):
	_write(
		tmp_path,
		"composer.json",
		'{"require": {"php": ">=8.1", "laravel/framework": "^10.0"}, "require-dev": {"phpunit/phpunit": "^10"}}',
	)
	groups = extract_dependencies(tmp_path, ProjectType.PHP)
	assert _pairs(groups["production"]) == [("php", ">=8.1"), ("laravel/framework", "^10.0")]
	assert _pairs(groups["development"]) == [("phpunit/phpunit", "^10")]


def test_go_mod(tmp_path):
	_write(
		tmp_path,
		"go.mod",
		"""
		module example.com/app

		go 1.21

		require github.com/google/uuid v1.4.0

		require (
			github.com/gofiber/fiber/v2 v2.51.0
			golang.org/x/sys v0.15.0 // indirect
		)

		replace example.com/old => example.com/new v1.0.0
		""",
	)
	groups = extract_dependencies(tmp_path, ProjectType.GO)
	assert _pairs(groups["production"]) == [
		("github.com/google/uuid", "v1.4.0"),
		("github.com/gofiber/fiber/v2", "v2.51.0"),
		("golang.org/x/sys", "v0.15.0"),
	]


def test_go_mod_unterminated_block(tmp_path):
	_write(tmp_path, "go.mod", "module x\nrequire (\n\tgithub.com/a/b v1.0.0\n")
	with pytest.raises(ManifestParseError):
		extract_dependencies(tmp_path, ProjectType.GO)


def test_parse_requirement():
	assert parse_requirement("requests[security]>=2.0,<3 ; python_version > '3.8'") == ("requests", ">=2.0,<3")
	assert parse_requirement("flask") == ("flask", "*")
	assert parse_requirement("==1.0") is None


def test_python_aggregates_manifests(tmp_path):
	_write(
		tmp_path,
		"requirements.txt",
		"""
		# web stack
		fastapi==0.110.0
		-r base.txt
		uvicorn  # server
		git+https://github.com/org/repo.git
		""",
	)
	_write(tmp_path, "requirements-dev.txt", "pytest>=7\n")
	_write(
		tmp_path,
		"pyproject.toml",
		"""
		[project]
		name = "svc"
		dependencies = ["fastapi>=0.100", "pydantic"]

		[project.optional-dependencies]
		lint = ["ruff"]
		""",
	)
	groups = extract_dependencies(tmp_path, ProjectType.PYTHON)
	assert _pairs(groups["production"]) == [
		("fastapi", "==0.110.0"),
		("uvicorn", "*"),
		("fastapi", ">=0.100"),
		("pydantic", "*"),
	]
	assert _pairs(groups["development"]) == [("pytest", ">=7"), ("ruff", "*")]


def test_poetry_tables(tmp_path):
	_write(
		tmp_path,
		"pyproject.toml",
		"""
		[tool.poetry.dependencies]
		python = "^3.11"
		django = "^4.2"

		[tool.poetry.group.test.dependencies]
		pytest = {version = "^7.4"}
		""",
	)
	groups = extract_dependencies(tmp_path, ProjectType.PYTHON)
	assert _pairs(groups["production"]) == [("django", "^4.2")]
	assert _pairs(groups["development"]) == [("pytest", "^7.4")]


def test_malformed_pyproject(tmp_path):
	_write(tmp_path, "pyproject.toml", "[project\nname = 1")
	with pytest.raises(ManifestParseError):
		extract_dependencies(tmp_path, ProjectType.PYTHON)


def test_cargo(tmp_path):
	_write(
		tmp_path,
		"Cargo.toml",
		"""
		[package]
		name = "cli"

		[dependencies]
		serde = { version = "1.0", features = ["derive"] }
		clap = "4"
		local = { path = "../local" }

		[dev-dependencies]
		tempfile = "3"

		[build-dependencies]
		cc = "1"
		""",
	)
	groups = extract_dependencies(tmp_path, ProjectType.RUST)
	assert _pairs(groups["production"]) == [("serde", "1.0"), ("clap", "4"), ("local", "../local")]
	assert _pairs(groups["development"]) == [("tempfile", "3"), ("cc", "1")]


def test_maven_pom(tmp_path):
	_write(
		tmp_path,
		"pom.xml",
		"""\
		<project xmlns="http://maven.apache.org/POM/4.0.0">
		  <dependencies>
		    <dependency>
		      <groupId>org.springframework.boot</groupId>
		      <artifactId>spring-boot-starter-web</artifactId>
		      <version>3.2.0</version>
		    </dependency>
		    <dependency>
		      <groupId>junit</groupId>
		      <artifactId>junit</artifactId>
		      <version>4.13</version>
		      <scope>test</scope>
		    </dependency>
		    <dependency>
		      <groupId>jakarta.servlet</groupId>
		      <artifactId>jakarta.servlet-api</artifactId>
		      <scope>provided</scope>
		    </dependency>
		  </dependencies>
		</project>
		""",
	)
	groups = extract_dependencies(tmp_path, ProjectType.JAVA)
	assert _pairs(groups["production"]) == [("org.springframework.boot:spring-boot-starter-web", "3.2.0")]
	assert _pairs(groups["development"]) == [("junit:junit", "4.13")]
	assert _pairs(groups["peer"]) == [("jakarta.servlet:jakarta.servlet-api", "*")]


def test_gradle(tmp_path):
	_write(
		tmp_path,
		"build.gradle",
		"""
		dependencies {
		    implementation 'com.google.guava:guava:32.1.2-jre'
		    compileOnly("org.projectlombok:lombok:1.18.30")
		    testImplementation 'org.junit.jupiter:junit-jupiter:5.10.0'
		}
		""",
	)
	groups = extract_dependencies(tmp_path, ProjectType.JAVA)
	assert _pairs(groups["production"]) == [("com.google.guava:guava", "32.1.2-jre")]
	assert _pairs(groups["peer"]) == [("org.projectlombok:lombok", "1.18.30")]
	assert _pairs(groups["development"]) == [("org.junit.jupiter:junit-jupiter", "5.10.0")]


def test_gemfile_groups(tmp_path):
	_write(
		tmp_path,
		"Gemfile",
		"""
		source "https://rubygems.org"

		gem "rails", "~> 7.1"
		gem 'pg'

		platforms :jruby do
		  gem "jdbc"
		end

		group :development, :test do
		  gem "rspec-rails", "6.0.0"
		end
		""",
	)
	groups = extract_dependencies(tmp_path, ProjectType.RUBY)
	assert _pairs(groups["production"]) == [("rails", "~> 7.1"), ("pg", "*"), ("jdbc", "*")]
	assert _pairs(groups["development"]) == [("rspec-rails", "6.0.0")]


def test_csproj(tmp_path):
	_write(
		tmp_path,
		"Api.csproj",
		"""\
		<Project Sdk="Microsoft.NET.Sdk.Web">
		  <ItemGroup>
		    <PackageReference Include="Serilog" Version="3.1.1" />
		    <PackageReference Include="Dapper">
		      <Version>2.1.24</Version>
		    </PackageReference>
		  </ItemGroup>
		</Project>
		""",
	)
	groups = extract_dependencies(tmp_path, ProjectType.DOTNET)
	assert _pairs(groups["production"]) == [("Serilog", "3.1.1"), ("Dapper", "2.1.24")]


def test_package_json_with_byte_order_mark(tmp_path):
	(tmp_path / "package.json").write_bytes(b'\xef\xbb\xbf{"dependencies":{"left-pad":"1.0.0"}}')
	groups = extract_dependencies(tmp_path, ProjectType.NODEJS)
	assert _pairs(groups["production"]) == [("left-pad", "1.0.0")]


@pytest.mark.parametrize("text", [
	'project = "demo"\n',
	"[project]\noptional-dependencies = [\"x\"]\n",
	"[tool]\npoetry = 1\n",
	'tool = "poetry"\n',
	"[tool.poetry]\ngroup = [\"dev\"]\n",
	"[tool.poetry.group]\ndev = 3\n",
])
def test_pyproject_with_wrong_shape(tmp_path, text):
	_write(tmp_path, "pyproject.toml", text)
	with pytest.raises(ManifestParseError):
		extract_dependencies(tmp_path, ProjectType.PYTHON)


def test_optional_dependency_extras(tmp_path):
	_write(
		tmp_path,
		"pyproject.toml",
		"""
		[project]
		name = "svc"

		[project.optional-dependencies]
		postgres = ["psycopg>=3"]
		test = ["pytest"]
		Docs = ["mkdocs"]
		""",
	)
	groups = extract_dependencies(tmp_path, ProjectType.PYTHON)
	assert _pairs(groups["production"]) == [("psycopg", ">=3")]
	assert _pairs(groups["development"]) == [("pytest", "*"), ("mkdocs", "*")]


def test_gemfile_conditionals(tmp_path):
	_write(
		tmp_path,
		"Gemfile",
		"""
		gem 'rails'

		if ENV['DB'] == 'pg'
		  gem 'pg'
		else
		  gem 'sqlite3'
		end

		unless RUBY_PLATFORM =~ /java/
		  gem 'bootsnap', require: false
		end

		group :test do
		  gem 'capybara' if ENV['CI']
		end
		""",
	)
	groups = extract_dependencies(tmp_path, ProjectType.RUBY)
	assert _pairs(groups["production"]) == [("rails", "*"), ("pg", "*"), ("sqlite3", "*"), ("bootsnap", "*")]
	assert _pairs(groups["development"]) == [("capybara", "*")]


def test_gemfile_stray_end(tmp_path):
	_write(tmp_path, "Gemfile", "gem 'rails'\nend\n")
	with pytest.raises(ManifestParseError):
		extract_dependencies(tmp_path, ProjectType.RUBY)
