"""
Setup script for empress-cli.

empress is a terminal client for an xAPI Learning Record Store kept in
MongoDB. It serves three roles:

1. Statement intake - validate and store single statements or bulk files
2. Reporting - distinct listings and aggregation reports over the LRS
3. Maintenance - health checks, backup/restore, export and reset

The 'empress' command is the entry point; run it without arguments for
the interactive menu.
"""

from setuptools import find_packages, setup

setup(
    name="empress-cli",
    version="1.0.0",
    description="Command-line client for a MongoDB-backed xAPI Learning Record Store",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["config"],
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Database
        "pymongo>=4.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "empress=empress.cli.main:run",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Database :: Front-Ends",
    ],
    keywords="xapi lrs mongodb cli education",
)
