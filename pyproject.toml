[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gradlecopy"
version = "1.0.0"
description = "Copy Gradle's module cache into a Maven (m2repository) layout and fetch the packages that are still missing."
requires-python = ">=3.10"
dependencies = []
keywords = ["gradle", "maven", "m2repository", "android", "offline", "cache", "pom"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Build Tools",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["gradlecopy"]

[tool.pytest.ini_options]
addopts = "-ra"
