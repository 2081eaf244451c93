[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "enscan"
version = "1.0.0"
description = "Collect public enterprise information (ICP records, apps, WeChat, Weibo, investments, branches) from Chinese business-registry sites"
requires-python = ">=3.10"
keywords = [
    "enterprise",
    "osint",
    "icp",
    "information-gathering",
    "aiqicha",
    "kuaicha",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Information Technology",
    "Natural Language :: Chinese (Simplified)",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: Indexing/Search",
    "Topic :: Security",
]
dependencies = [
    "requests>=2.28",
    "pyyaml>=6.0",
    "tabulate>=0.9",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
    "responses>=0.23",
]

[tool.hatch.build.targets.wheel]
packages = ["enscan"]

[tool.hatch.build.targets.sdist]
include = ["enscan", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
