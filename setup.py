#!/usr/bin/env python3
"""
Setup configuration for cytube-sorter
A bot that keeps a CyTube channel playlist in fair round-robin order
"""

from setuptools import setup, find_packages

# Read README for long description
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Core requirements (always installed)
core_requirements = [
    "python-socketio[client]>=5.8.0",
    "requests>=2.31.0",
    "click>=8.1.7",
    "rich-click>=1.7.0",
    "pyyaml>=6.0.1",
    "python-dotenv>=1.0.0",
    "colorama>=0.4.6",
]

setup(
    name="cytube-sorter",
    version="0.1.0",
    author="cytube-sorter Team",
    description="Keep a CyTube channel playlist in round-robin order by submitter",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["cytube_sorter", "cytube_sorter.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Communications :: Chat",
        "Topic :: Multimedia :: Video",
    ],
    python_requires=">=3.10",
    install_requires=core_requirements,
    extras_require={
        "dev": [
            "pytest>=7.4.3",
            "black>=23.11.0",
            "flake8>=6.1.0",
            "mypy>=1.7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "cytube-sorter=cytube_sorter.cli:main",
        ],
    },
    keywords="cytube playlist queue round-robin bot socketio",
)
