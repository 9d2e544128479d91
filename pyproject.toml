[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "plnk"
version = "0.2.0"
description = "Command grammar, argument parsing and machine-readable help for a Planka kanban command line"
requires-python = ">=3.10"
dependencies = []
keywords = ["planka", "kanban", "cli", "project-management", "argparse"]
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
    "Topic :: Office/Business :: Scheduling",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["plnk"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
