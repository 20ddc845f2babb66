[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ggmlfmt"
version = "0.1.0"
description = "Read and write GGML, GGMF, GGJT and GGLA model container files"
requires-python = ">=3.10"
dependencies = [
    "psutil",
]
keywords = ["ggml", "ggjt", "model", "file-format", "quantization", "tensor"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: File Formats",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
ggmlfmt-precommit = "ggmlfmt.precommit:main"

[tool.hatch.build.targets.wheel]
packages = ["ggmlfmt"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
