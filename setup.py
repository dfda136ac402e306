#!/usr/bin/env python3
"""
Package setup script for the ONT library preparation protocol comparison.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read the README file
this_directory = Path(__file__).parent
long_description = (this_directory / "readme.md").read_text(encoding='utf-8')

# Read requirements
requirements = []
requirements_file = this_directory / "requirements.txt"
if requirements_file.exists():
    requirements = requirements_file.read_text().strip().split('\n')
    requirements = [req.strip() for req in requirements if req.strip() and not req.startswith('#')]

setup(
    name="ont-protocol-comparison",
    version="1.0.0",
    description="Statistics and figures comparing ligation and rapid ONT library preparations",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Bio-Informatics",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
    python_requires=">=3.8",
    install_requires=requirements,
    extras_require={
        'test': ['pytest>=7.0'],
    },

    # Entry points for command-line scripts
    entry_points={
        'console_scripts': [
            'ont-protocol-comparison=ont_protocol_comparison.cli:main',
        ],
    },

    # Additional metadata
    keywords="bioinformatics, nanopore, plasmids, library preparation, statistics",
)
