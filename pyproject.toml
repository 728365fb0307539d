[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "oceansim"
version = "0.1.0"
description = "Ocean surface tiles, underwater god rays and ocean scene render-pass planning"
requires-python = ">=3.10"
keywords = ["ocean", "waves", "rendering", "god-rays", "render-to-texture", "normals"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: 3D Rendering",
]
dependencies = [
    "numpy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["oceansim"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
