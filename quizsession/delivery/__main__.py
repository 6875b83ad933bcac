"""
Entry point for running the quiz CLI as a module.

Usage:
    python -m quizsession.delivery take "Amino Acids"
    python -m quizsession.delivery preview "Amino Acids" --page 2
    python -m quizsession.delivery --help
"""
from .quiz_cli import main

if __name__ == "__main__":
    main()
