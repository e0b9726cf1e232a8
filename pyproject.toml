[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "iprouter"
version = "0.1.0"
description = "A small IPv4 software router with ARP resolution, ICMP replies and longest-prefix-match forwarding"
requires-python = ">=3.10"
keywords = ["router", "ipv4", "arp", "icmp", "networking", "trie", "longest-prefix-match"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
iprouter = "iprouter.router:main"

[tool.hatch.build.targets.wheel]
packages = ["iprouter"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
