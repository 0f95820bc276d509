#!/usr/bin/env python3

import os
from setuptools import setup, find_packages

install_requires = [
    "colorama",  # for colored log messages
]

extras_require = {
    "test": [
        "pytest",  # for running the tests
        "pytest-asyncio",  # for the tests driving routines under a running event loop
    ],
}

VERSION_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "VERSION.txt")

with open(VERSION_FILE) as f:
    version = f.read().strip()

setup(
    name="flatback",
    version=version,
    description="Flat control flow over callbacks and futures, driven by generators",
    packages=find_packages(include=["flatback", "flatback.*"]),
    install_requires=install_requires,
    extras_require=extras_require,
    python_requires=">=3.8",
    license="MIT",
)
