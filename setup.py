"""
Setup script for queryup-ledger.

QueryUp is a college peer-mentorship ledger: students post academic
queries, other students accept them as mentors, sessions are
auto-scheduled and ratings drive an XP / leaderboard layer.

1. Ledger - Pure state transitions over one persisted snapshot
2. Stats - XP, levels and the leaderboard, always re-derived from sessions
3. CLI - The 'queryup' command as a terminal front end
"""

from setuptools import find_namespace_packages, setup

setup(
    name="queryup-ledger",
    version="1.0.0",
    description="Peer-mentorship ledger with XP, levels and a leaderboard",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="QueryUp",
    packages=find_namespace_packages(include=["src", "src.*"]),
    py_modules=["config"],
    python_requires=">=3.11",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
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
            "queryup=src.cli.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
    ],
    keywords="mentorship peer-learning gamification leaderboard cli",
)
