"""
Entry point for running idekit CLI as a module.

Usage: python -m idekit [command] [options]
"""

from idekit.cli.parser import main

if __name__ == "__main__":
    main()
