[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "postureutils"
version = "0.1.0"
description = "Data structures and helpers for Kubernetes security posture scan results, exceptions and attack tracks"
requires-python = ">=3.10"
dependencies = []
keywords = ["kubernetes", "security", "posture", "compliance", "exceptions", "attack-track"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["postureutils"]

[tool.pytest.ini_options]
addopts = "-ra"
