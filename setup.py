"""
Setup script for Polymarket Weekly Watch
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read the README for long description
readme_path = Path(__file__).parent / "README.md"
long_description = readme_path.read_text() if readme_path.exists() else ""

setup(
    name="polymarket-weekly-watch",
    version="1.0.0",
    description="Threshold alerts for one outcome of a recurring weekly Polymarket event",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["main", "weekly_monitor"],
    python_requires=">=3.10",
    install_requires=[
        "aiohttp>=3.8.0",
        "python-dotenv>=1.0.0",
        "colorama>=0.4.6",
        # Database and persistence
        "sqlalchemy[asyncio]>=2.0.23",
        "aiosqlite>=0.19.0",
        # CLI framework
        "click>=8.1.7",
        "rich>=13.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
            "pytest-mock>=3.12.0",
        ]
    },
    entry_points={
        "console_scripts": [
            "weekly-watch=cli.main:cli",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    keywords="polymarket prediction-markets telegram alerts",
)
