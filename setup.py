#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
TrustRoute - Trust-Aware Model Routing
======================================
Setup configuration for package installation.

Installation:
    pip install -e .              # Development mode (editable)
    pip install -e ".[dev]"       # With test tooling
    pip install .                 # Production mode

After installation:
    trustroute --help             # Show all commands
    trustroute route --task coding
    trustroute models

Author: Léon
License: MIT
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README for long description
readme_path = Path(__file__).parent / "README.md"
long_description = readme_path.read_text(encoding="utf-8") if readme_path.exists() else ""

# Version
__version__ = "1.0.0"

setup(
    name="trustroute",
    version=__version__,
    author="Léon",
    author_email="",
    description="Trust-aware routing of requests across local Ollama, local GGUF and cloud models",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT",

    # Package discovery
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,

    # Python version requirement
    python_requires=">=3.10",

    # Core dependencies
    install_requires=[
        "ollama>=0.6.0",
        "pyyaml>=6.0",
        "requests>=2.28.0",
        "psutil>=5.9.0",
    ],

    # Optional dependencies
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "black>=23.0.0",
            "isort>=5.0.0",
            "mypy>=1.0.0",
        ],
    },

    # CLI entry points
    entry_points={
        "console_scripts": [
            "trustroute=trustroute.main:main",
        ],
    },

    # Package data
    package_data={
        "trustroute": [
            "config/*.yaml",
            "config/*.yml",
        ],
    },

    # Classifiers for PyPI
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX :: Linux",
        "Operating System :: MacOS",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Scientific/Engineering :: Artificial Intelligence",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],

    # Keywords for searchability
    keywords=[
        "llm",
        "ollama",
        "gguf",
        "local-ai",
        "routing",
        "cli",
    ],
)
