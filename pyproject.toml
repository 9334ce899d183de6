[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ehco"
version = "0.1.0"
description = "Lossy audio compression with a DCT, run-length coding and adaptive Huffman coding, plus quality metrics"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["audio", "compression", "dct", "huffman", "rle", "wav", "psnr", "snr", "thd"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio :: Conversion",
    "Topic :: Multimedia :: Sound/Audio :: Analysis",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
ehco = "ehco.codec:main"
ehco-metrics = "ehco.metrics:main"

[tool.hatch.build.targets.wheel]
packages = ["ehco"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
