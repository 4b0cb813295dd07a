[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "objfs"
version = "0.1.0"
description = "Inode layer and file system wrappers for presenting object storage buckets as a file system"
requires-python = ">=3.10"
dependencies = []
keywords = ["filesystem", "inode", "object-storage", "bucket", "directory"]
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
    "Topic :: System :: Filesystems",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["objfs"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
