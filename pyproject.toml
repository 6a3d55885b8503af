[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "litelog"
version = "0.1.0"
description = "UDP log client with control commands, plus linked list, client-state, persistence and trace-buffer utilities"
requires-python = ">=3.10"
dependencies = []
keywords = ["logging", "udp", "trace", "monitor", "linked-list"]
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
    "Topic :: System :: Logging",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["litelog"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
