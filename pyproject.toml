[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dartdaq"
version = "0.1.0"
description = "Packing, decoding and pulse analysis of 16-channel 500 MS/s digitizer waveform data"
requires-python = ">=3.10"
dependencies = []
keywords = ["daq", "digitizer", "waveform", "physics", "histogram", "adc"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["dartdaq"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
