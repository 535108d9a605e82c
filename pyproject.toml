[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "taskscope"
version = "0.1.0"
description = "Task execution timelines from Legion profiler logs, plus process-table and command-terminal helpers"
requires-python = ">=3.10"
dependencies = []
keywords = ["profiling", "timeline", "legion", "tasks", "debugging", "hpc", "svg"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Debuggers",
    "Topic :: System :: Distributed Computing",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
taskscope-timeline = "taskscope.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["taskscope"]

[tool.pytest.ini_options]
addopts = "-ra"
