[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "auxsig"
version = "0.1.0"
description = "Audio signal objects with generators, statistics, windowing, filtering, spectral tools, formatted text output and time sequences."
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["audio", "signal", "dsp", "filter", "fft", "hilbert", "time-stretch"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Multimedia :: Sound/Audio :: Analysis",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["auxsig"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
