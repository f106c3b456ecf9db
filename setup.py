#!/usr/bin/env python3
"""
setup script for haunted syllabus
"""

from setuptools import setup, find_packages

# read the readme file for the long description
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# read requirements from requirements.txt, skip comments and empty lines
with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

# configure the package setup
setup(
    name="haunted-syllabus",
    version="1.0.0",
    description="Turn course syllabi and documents into haunted study material with a local LLM",
    long_description=long_description,
    long_description_content_type="text/markdown",
    # automatically find all packages in the project
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
    # install all the dependencies from requirements.txt
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=7.0", "pytest-asyncio>=0.21", "httpx>=0.24"],
    },
    entry_points={
        "console_scripts": ["haunted=src.haunted.cli:app"],
    },
)
