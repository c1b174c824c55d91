[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "vpcb"
version = "0.1.0"
description = "Event-driven virtual PCB simulator that routes JSON data packs to peripheral models such as UART"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "simulation",
    "pcb",
    "uart",
    "transaction-level modelling",
    "vcd",
    "discrete-event",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Electronic Design Automation (EDA)",
    "Topic :: System :: Emulators",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
vpcb = "vpcb.top:main"

[tool.hatch.build.targets.wheel]
packages = ["vpcb"]

[tool.hatch.build.targets.sdist]
include = ["vpcb", "tests"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
