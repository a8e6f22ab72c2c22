#!/usr/bin/env python3
"""
NanoDB Setup Script
===================
Allows installation of the nanodb package.

Usage:
    pip install -e .           # Development install
    pip install -e ".[test]"   # Development install with test tools
    pip install .              # Regular install
"""

from setuptools import setup, find_packages

setup(
    name="nanodb",
    version="1.0.0",
    packages=find_packages(include=["nanodb", "nanodb.*"]),
    python_requires=">=3.10",
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "nanodb=nanodb.server:main",
            "nanodb-cli=nanodb.client:main",
        ],
    },
)
