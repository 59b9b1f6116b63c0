[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "uarchsim"
version = "0.1.0"
description = "Microarchitecture simulation components: clocked components, instruction decoding, saturating counters, branch predictors and cache prefetchers"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "microarchitecture",
    "simulation",
    "branch-prediction",
    "prefetching",
    "cache",
    "perceptron",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Education",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: System :: Emulators",
    "Topic :: Scientific/Engineering",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["uarchsim"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
