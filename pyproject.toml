[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "camstages"
version = "1.10.0"
description = "Camera post-processing stages, piecewise linear functions, YUV conversion and preview helpers"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "camera",
    "yuv420",
    "post-processing",
    "pose-estimation",
    "segmentation",
    "piecewise-linear",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Image Processing",
    "Topic :: Multimedia :: Graphics",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["camstages"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
