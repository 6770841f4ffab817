[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "helmify"
version = "0.1.0"
description = "Convert Kubernetes manifests into a Helm chart."
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = ["kubernetes", "helm", "chart", "kustomize", "yaml", "generator"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Code Generators",
    "Topic :: System :: Systems Administration",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
helmify = "helmify.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["helmify"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
