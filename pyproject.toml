[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mintkit"
version = "0.1.0"
description = "Backend-independent building blocks for small 3D games: rectangle packing, UI layout, particles, cameras, render queues and resource caching."
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["game", "particles", "ui", "camera", "rectangle-packing", "texture-atlas", "render-queue"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Games/Entertainment",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["mintkit"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
