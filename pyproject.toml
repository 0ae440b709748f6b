[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hanzikit"
version = "0.1.0"
description = "Chinese text utilities: simplified/traditional conversion, full width characters, punctuation mapping, pinyin and stroke lookup, cloud pinyin and .scel word list reading"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "chinese",
    "pinyin",
    "hanzi",
    "stroke",
    "punctuation",
    "fullwidth",
    "traditional",
    "simplified",
    "scel",
    "input-method",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Natural Language :: Chinese (Simplified)",
    "Natural Language :: Chinese (Traditional)",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Text Processing :: Linguistic",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
scel2org = "hanzikit.scel:main"

[tool.hatch.build.targets.wheel]
packages = ["hanzikit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
