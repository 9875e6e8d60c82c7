[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lintreview"
version = "0.1.0"
description = "Report linter and compiler findings as Gerrit reviews, Bitbucket Server Code Insights reports and GitHub Actions annotations"
requires-python = ">=3.10"
keywords = [
    "lint",
    "code-review",
    "gerrit",
    "bitbucket",
    "code-insights",
    "github-actions",
    "annotations",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Quality Assurance",
]
dependencies = [
    "requests>=2.28",
]

[project.optional-dependencies]
test = [
    "pytest>=7",
    "responses>=0.23",
]

[project.scripts]
lintreview-trigger-depup = "lintreview.trigger_depup:main"

[tool.hatch.build.targets.wheel]
packages = ["lintreview"]

[tool.hatch.build.targets.sdist]
include = ["lintreview", "tests", "pyproject.toml"]

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
