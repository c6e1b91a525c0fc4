[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ubustub"
version = "0.1.0"
description = "Pure-Python building blocks of a unified kernel image boot stub: SHA-256, version comparison, UKI sections, device paths, SMBIOS tables and stub variables"
requires-python = ">=3.10"
dependencies = []
keywords = ["uefi", "boot", "uki", "smbios", "sha256", "device-path", "stub"]
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
    "Topic :: System :: Boot",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ubustub"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
