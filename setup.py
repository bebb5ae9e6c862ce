#!/usr/bin/env python3
"""
Legacy setup.py for older pip versions without PEP 660 editable installs.
All packaging metadata lives in pyproject.toml.
"""

from setuptools import setup

# Use pyproject.toml for all configuration
if __name__ == "__main__":
    setup()
