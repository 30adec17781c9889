[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "poes"
version = "0.1.0"
description = "Parallel online examination system: a threaded quiz server, a terminal exam client and a memory-mapped score backup."
requires-python = ">=3.10"
dependencies = []
keywords = ["exam", "quiz", "sockets", "threading", "mmap", "education"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Education :: Testing",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
poes-server = "poes.server:main"
poes-client = "poes.client:main"
poes-read-backup = "poes.backup:main"

[tool.hatch.build.targets.wheel]
packages = ["poes"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
