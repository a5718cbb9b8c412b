"""
Entry point for running qtkits as a module.

Usage: python -m qtkits [command] [options]
"""

from qtkits.cli.parser import main

if __name__ == "__main__":
    main()
