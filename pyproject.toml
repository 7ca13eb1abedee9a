[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "modbuslink"
version = "0.1.0"
description = "Transport independent Modbus client contexts with asynchronous and blocking APIs, plus ready-made request services"
requires-python = ">=3.10"
dependencies = []
keywords = ["modbus", "fieldbus", "automation", "asyncio"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Operating System :: OS Independent",
    "Typing :: Typed",
    "Topic :: Software Development :: Embedded Systems",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["modbuslink"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
