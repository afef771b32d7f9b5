#!/usr/bin/env python3
"""
setup.py shim for packaging tools that still expect one.

cljbridge is built from pyproject.toml with hatchling as the build backend.

For normal Python installation, use:
    pip install .
"""

from setuptools import setup

# Configuration lives in pyproject.toml
setup()
