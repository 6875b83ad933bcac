"""
Setup script for quizsession.

quizsession is the quiz session engine of an adaptive learning platform.
It turns a content category into a scored, timed assessment:

1. Paginated question retrieval with background prefetch
2. Stable shuffled answer presentation
3. Per-answer persistence against the grading service
4. Coin economy: entry cost on start, tiered reward on completion

The 'quizsession' command runs a session in the terminal.
"""

from setuptools import find_packages, setup

setup(
    name="quizsession",
    version="1.0.0",
    description="Quiz session engine with pagination, timing and a coin reward economy",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # HTTP
        "httpx>=0.25.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "quizsession=quizsession.delivery.quiz_cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Education",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="quiz assessment learning cli education",
)
