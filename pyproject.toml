[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "starfighter"
version = "0.1.0"
description = "Headless space-combat simulation: a steerable fighter, AI pursuers, wandering ships and a procedural asteroid field"
requires-python = ">=3.10"
keywords = ["simulation", "space", "game", "asteroids", "flight", "procedural"]
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
    "Topic :: Games/Entertainment :: Simulation",
]
dependencies = [
    "numpy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
starfighter = "starfighter.main:main"

[tool.hatch.build.targets.wheel]
packages = ["starfighter"]

[tool.pytest.ini_options]
addopts = "-ra"
