[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "finql"
version = "0.13.0"
description = "A quantitative finance toolbox: time periods, discounting, quote storage, portfolio positions and simple strategies"
requires-python = ">=3.10"
keywords = ["finance", "bond", "period", "pricing", "portfolio", "discounting"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Financial and Insurance Industry",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Office/Business :: Financial :: Investment",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["finql"]

[tool.pytest.ini_options]
addopts = "-ra"
