#!/usr/bin/python3
# Setup file for gat
# Copyright (C) 2026 The gat authors
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later

from setuptools import setup

setup(
    name="gat",
    version="0.1.0",
    description="Minimal content-addressed version control storage engine",
    long_description=(
        "gat snapshots a working directory into zlib-compressed, SHA-1 "
        "addressed objects, keeps a linear first-parent history per branch "
        "and restores the working directory to any stored commit."
    ),
    license="Apache-2.0 OR GPL-2.0-or-later",
    python_requires=">=3.9",
    packages=["gat"],
    install_requires=[],
    entry_points={"console_scripts": ["gat=gat.cli:_main"]},
    classifiers=[
        "Development Status :: 3 - Alpha",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3",
        "Operating System :: POSIX",
        "Topic :: Software Development :: Version Control",
    ],
)
