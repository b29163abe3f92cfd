[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "docfingerprint"
version = "0.2.0"
description = "Document access for content fingerprinting: Markdown structure, text, CSV, PDF and raw files, plus the fingerprint DSL JSON Schema"
requires-python = ">=3.10"
dependencies = []
keywords = ["document", "recognition", "content", "fingerprint", "markdown", "csv", "pdf", "json-schema"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Text Processing",
    "Topic :: Text Processing :: Markup :: Markdown",
    "Topic :: File Formats :: JSON :: JSON Schema",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["docfingerprint"]

[tool.hatch.build.targets.sdist]
include = ["docfingerprint", "tests"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
