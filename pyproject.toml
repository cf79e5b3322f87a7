[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "numbaseball"
version = "0.1.0"
description = "Two-player networked number baseball (bulls and cows) game server and terminal client"
requires-python = ">=3.10"
dependencies = []
keywords = ["game", "number-baseball", "bulls-and-cows", "tcp", "multiplayer", "puzzle"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Natural Language :: Korean",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Puzzle Games",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
numbaseball-server = "numbaseball.server:main"
numbaseball-client = "numbaseball.client:main"

[tool.hatch.build.targets.wheel]
packages = ["numbaseball"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
