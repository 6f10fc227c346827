[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "openblup"
version = "0.1.0"
description = "REML and BLUP building blocks for plant and animal breeding: variance structures, relationship matrices and a small EM-REML fitter"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "blup",
    "reml",
    "mixed models",
    "breeding",
    "pedigree",
    "genomic relationship",
    "quantitative genetics",
]
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
    "Topic :: Scientific/Engineering :: Bio-Informatics",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = [
    "pytest",
    "numpy",
]

[tool.hatch.build.targets.wheel]
packages = ["openblup"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
