[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "surfacemap"
version = "0.1.0"
description = "Turn attack-surface graph quads into DOT, GEXF, D3, Graphistry and Maltego output, and manage the data sources of an enumeration"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "dns",
    "reconnaissance",
    "attack-surface",
    "graph",
    "visualization",
    "gexf",
    "graphviz",
    "maltego",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Information Technology",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: Name Service (DNS)",
    "Topic :: Security",
    "Topic :: Scientific/Engineering :: Visualization",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["surfacemap"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
