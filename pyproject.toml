[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "reasons"
version = "0.1.0"
description = "Command history, prompt generation, tab completion, CSV import and file helpers for the Reasons decision-tree DSL shell"
requires-python = ">=3.10"
dependencies = []
keywords = ["decision-tree", "debugger", "dsl", "history", "completion", "prompt", "csv"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Debuggers",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["reasons"]

[tool.pytest.ini_options]
addopts = "-ra"
