[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "asyncdemos"
version = "0.1.0"
description = "Small asyncio demonstrations: a bounded channel, a counter actor, TCP servers, graceful shutdown, a JSON web app and a backpressure pipeline"
requires-python = ">=3.10"
dependencies = [
    "aiohttp",
]
keywords = [
    "asyncio",
    "actor",
    "channels",
    "backpressure",
    "tcp",
    "graceful-shutdown",
    "aiohttp",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Framework :: AsyncIO",
    "Framework :: aiohttp",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
asyncdemos-channel = "asyncdemos.channel_demo:main"
asyncdemos-blocking = "asyncdemos.blocking_compare:main"
asyncdemos-echo = "asyncdemos.echo:main"
asyncdemos-commands = "asyncdemos.commands:main"
asyncdemos-line-commands = "asyncdemos.line_commands:main"
asyncdemos-graceful = "asyncdemos.graceful:main"
asyncdemos-web = "asyncdemos.web:main"
asyncdemos-poster = "asyncdemos.poster:main"
asyncdemos-pipeline = "asyncdemos.pipeline:main"

[tool.hatch.build.targets.wheel]
packages = ["asyncdemos"]

[tool.hatch.build.targets.sdist]
include = [
    "asyncdemos",
    "tests",
    "pyproject.toml",
]

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
