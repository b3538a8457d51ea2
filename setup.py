"""
Setup script for the Fantasy Lineup Engine.
"""

from setuptools import setup, find_packages
from pathlib import Path

HERE = Path(__file__).parent


# Read the README file
def read_readme():
    with open(HERE / "README.md", "r", encoding="utf-8") as fh:
        return fh.read()


# Read requirements
def read_requirements():
    with open(HERE / "requirements.txt", "r", encoding="utf-8") as fh:
        return [line.strip() for line in fh if line.strip() and not line.startswith("#")]


setup(
    name="fantasy-lineup-engine",
    version="1.0.0",
    author="Fantasy Lineup Engine Team",
    description="Score resolution and lineup optimization for Yahoo Fantasy Football",
    long_description=read_readme(),
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: End Users/Desktop",
        "Topic :: Games/Entertainment",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.8",
    install_requires=read_requirements(),
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "black>=22.0.0",
            "flake8>=4.0.0",
            "mypy>=0.950",
        ],
    },
    entry_points={
        "console_scripts": [
            "fantasy-lineup=fantasy_lineup.main:main",
        ],
    },
    include_package_data=True,
    keywords="fantasy football yahoo lineup optimization",
)
