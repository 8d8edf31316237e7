[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "transanno"
version = "0.4.5"
description = "Convert minimap2 alignments to chain files and describe chain files as BED and VCF"
requires-python = ">=3.10"
keywords = ["bioinformatics", "liftover", "chain", "vcf", "bed", "minimap2", "genome assembly"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Bio-Informatics",
]
dependencies = [
    "zstandard",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
transanno = "transanno.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["transanno"]

[tool.pytest.ini_options]
addopts = "-ra"
