[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "netcore"
version = "0.1.0"
description = "Length-prefixed, tagged TCP messaging client with a typed byte buffer"
requires-python = ">=3.10"
keywords = ["tcp", "client", "binary", "buffer", "framing", "protocol"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
netcore-client = "netcore.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["netcore"]

[tool.pytest.ini_options]
addopts = "-ra"
