[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kes"
version = "0.1.0"
description = "Building blocks of a key management server and its command-line client: configuration, API messages, log multicasting, terminal output and start-up helpers."
requires-python = ">=3.10"
keywords = ["kms", "key-management", "mtls", "tls", "json", "terminal"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security :: Cryptography",
    "Topic :: Security",
]
dependencies = [
    "cryptography",
    "psutil",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["kes"]

[tool.hatch.build.targets.sdist]
include = ["kes", "tests", "README.md", "pyproject.toml"]

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
