"""
Setup script for speed-reading-engine.

The engine behind timed Turkish reading-comprehension exercises:

1. Text analysis - readability, difficulty and keywords for reading texts
2. Answer scoring - seven question types with partial credit
3. Attempt lifecycle - start, submit, complete, abandon and time-out,
   safe under concurrent requests and a background sweep

The 'speedreading' command provides text analysis and attempt maintenance.
"""

from setuptools import find_packages, setup

setup(
    name="speed-reading-engine",
    version="1.0.0",
    description="Speed-reading exercise engine: Turkish text analysis, answer scoring and attempt lifecycle",
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
        "sqlalchemy>=2.0.0",
        "psycopg2-binary>=2.9.0",
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
            "speedreading=src.cli.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Natural Language :: Turkish",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="speed-reading reading-comprehension turkish readability education",
)
