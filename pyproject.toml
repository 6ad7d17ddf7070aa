[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "modntt"
version = "0.1.0"
description = "Negacyclic number-theoretic transforms and modular arithmetic over word-sized primes"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "ntt",
    "number theoretic transform",
    "modular arithmetic",
    "barrett reduction",
    "primitive root",
    "miller-rabin",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Mathematics",
    "Topic :: Security :: Cryptography",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["modntt"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
