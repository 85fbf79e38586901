[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "statemodels"
version = "0.1.0"
description = "Actor primitives, properties and example state-space models of concurrent and distributed protocols"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "model checking",
    "actors",
    "state space",
    "distributed systems",
    "paxos",
    "two-phase commit",
    "linearizability",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Testing",
    "Topic :: System :: Distributed Computing",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["statemodels"]

[tool.pytest.ini_options]
addopts = "-ra"
