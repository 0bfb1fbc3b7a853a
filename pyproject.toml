[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "wwwsite"
version = "0.1.0"
description = "A localized project website server with team pages, redirects and cached release data"
requires-python = ">=3.11"
keywords = ["website", "flask", "i18n", "fluent", "governance", "redirects"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Web Environment",
    "Framework :: Flask",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: Dynamic Content",
]
dependencies = [
    "flask",
    "httpx",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
wwwsite = "wwwsite.app:main"

[tool.hatch.build.targets.wheel]
packages = ["wwwsite"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
