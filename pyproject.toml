[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "swarmlet"
version = "0.1.0"
description = "A small peer-to-peer file sharing toolkit: a join tracker, a peer client, bencode decoding and piece bookkeeping."
requires-python = ">=3.10"
dependencies = []
keywords = ["p2p", "file-sharing", "tracker", "bencode", "peer", "swarm"]
classifiers = [
    "Development Status :: 2 - Pre-Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: File Sharing",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
swarmlet-tracker = "swarmlet.tracker:main"
swarmlet-client = "swarmlet.client:main"
swarmlet-bencode = "swarmlet.bencode:main"

[tool.hatch.build.targets.wheel]
packages = ["swarmlet"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
