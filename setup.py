#!/usr/bin/python3
# Setup file for gitlet
# Copyright (C) 2026 The Gitlet Authors
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later

import os
import re

from setuptools import setup


def read_version():
    path = os.path.join(os.path.dirname(__file__), "gitlet", "__init__.py")
    with open(path, encoding="utf-8") as f:
        m = re.search(r"^__version__ = \((\d+), (\d+), (\d+)\)", f.read(), re.M)
    assert m is not None
    return ".".join(m.groups())


setup(
    name="gitlet",
    version=read_version(),
    description="A small content-addressed version-control system",
    license="Apache-2.0 OR GPL-2.0-or-later",
    python_requires=">=3.10",
    packages=["gitlet"],
    package_data={"": ["py.typed"]},
    install_requires=[],
    extras_require={
        "dev": ["ruff", "mypy"],
    },
    entry_points={
        "console_scripts": ["gitlet=gitlet.cli:_main"],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Operating System :: POSIX",
        "Topic :: Software Development :: Version Control",
    ],
)
