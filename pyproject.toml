[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tunebox"
version = "0.1.0"
description = "Audio file helpers: file type recognition, MPEG audio frame header parsing, ID3 and WAV header reading"
requires-python = ">=3.10"
dependencies = []
keywords = ["audio", "mp3", "mpeg", "wav", "riff", "id3", "frame-header"]
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
    "Topic :: Multimedia :: Sound/Audio :: Players",
    "Topic :: Multimedia :: Sound/Audio :: Analysis",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["tunebox"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
