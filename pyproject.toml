[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "miniunix"
version = "0.1.0"
description = "A small teaching Unix in Python: Sv39 page tables, a first-fit heap, a tiny shell and classic text tools"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "operating-system",
    "teaching",
    "virtual-memory",
    "page-table",
    "malloc",
    "shell",
    "grep",
    "elf",
    "risc-v",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Education",
    "Topic :: System :: Operating System",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
miniunix-grep = "miniunix.grep:main"
miniunix-wc = "miniunix.textutils:wc_main"
miniunix-cat = "miniunix.textutils:cat_main"
miniunix-echo = "miniunix.textutils:echo_main"
miniunix-ls = "miniunix.ls:main"
miniunix-ln = "miniunix.fileutils:ln_main"
miniunix-rm = "miniunix.fileutils:rm_main"
miniunix-mkdir = "miniunix.fileutils:mkdir_main"
miniunix-kill = "miniunix.fileutils:kill_main"

[tool.hatch.build.targets.wheel]
packages = ["miniunix"]

[tool.hatch.build.targets.sdist]
include = ["miniunix", "tests", "pyproject.toml", "README.md"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
