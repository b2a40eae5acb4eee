[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "amrgrid"
version = "0.1.0"
description = "Block-structured adaptive mesh refinement grid on a box, with cell lookup, neighbours, plane slices and Tecplot output"
requires-python = ">=3.10"
dependencies = []
keywords = ["amr", "adaptive mesh refinement", "mesh", "grid", "tecplot", "geometry"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
amrgrid = "amrgrid.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["amrgrid"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
