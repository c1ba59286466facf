[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "raidsim"
version = "0.1.0"
description = "A RAID 5 simulator over file-backed virtual disks, driven by trace files"
requires-python = ">=3.10"
dependencies = []
keywords = ["raid", "raid5", "simulator", "parity", "virtual-disk", "storage"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Emulators",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
raidsim = "raidsim.cli:main"
raidsim-stress = "raidsim.stress:main"

[tool.hatch.build.targets.wheel]
packages = ["raidsim"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
