#!/usr/bin/env python3
"""Setup script for Simple Serial Logger."""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="simple-serial-logger",
    version="1.0.0",
    author="Sierra Telecom",
    author_email="support@sierratelecom.com",
    description="Serial port data logger with time-based file rotation",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/sierratelecom/simple-serial-logger",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: System :: Logging",
        "Topic :: System :: Hardware :: Hardware Drivers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.8",
    install_requires=[
        "pyserial>=3.5",
        "rich>=12.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "serial_logger=serial_logger.cli:main",
        ],
    },
)
