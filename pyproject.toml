[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dronenode"
version = "0.1.0"
description = "Building blocks for DroneCAN nodes: clocks, message types, an in-memory bus, a parameter server, dynamic node ID allocation and firmware download"
requires-python = ">=3.10"
dependencies = []
keywords = ["dronecan", "uavcan", "can", "drone", "node", "parameters", "node-id-allocation", "firmware-update"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Embedded Systems :: Controller Area Network (CAN)",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["dronenode"]

[tool.hatch.build.targets.sdist]
include = ["dronenode", "tests", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
