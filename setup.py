#!/usr/bin/env python3
"""Promoter - Setup"""

from setuptools import setup, find_packages

with open("requirements.txt") as f:
    requirements = [line for line in f.read().splitlines() if line.strip()]

setup(
    name="promoter",
    version="1.0.0",
    description="Development to production promotion pipeline: database, files and builds",
    author="Promoter Team",
    packages=find_packages(include=["promoter", "promoter.*"]),
    install_requires=requirements,
    extras_require={
        "test": [
            "pytest>=7.4",
            "httpx>=0.25",
            "fakeredis>=2.20",
        ],
    },
    entry_points={
        "console_scripts": [
            "promoter=promoter.main:main",
        ],
    },
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
