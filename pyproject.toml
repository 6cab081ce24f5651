[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "xvkit"
version = "0.1.0"
description = "Pure-Python tools for a small RISC-V teaching operating system: Sv39 page tables, a file-system image builder, a shell parser and classic utilities"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "operating-system",
    "teaching",
    "risc-v",
    "sv39",
    "page-table",
    "file-system",
    "mkfs",
    "shell",
    "grep",
    "malloc",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Operating System",
    "Topic :: Education",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
xv-mkfs = "xvkit.mkfs:main"
xv-grep = "xvkit.grep:main"
xv-wc = "xvkit.wc:main"
xv-search = "xvkit.search:main"
xv-cat = "xvkit.cat:main"
xv-echo = "xvkit.cat:echo_main"
xv-ls = "xvkit.ls:main"
xv-mkdir = "xvkit.tools:mkdir_main"
xv-rm = "xvkit.tools:rm_main"
xv-ln = "xvkit.tools:ln_main"
xv-touch = "xvkit.tools:touch_main"
xv-kill = "xvkit.tools:kill_main"

[tool.hatch.build.targets.wheel]
packages = ["xvkit"]

[tool.hatch.build.targets.sdist]
include = ["xvkit", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
