"""
Main entry point for the LC-3 toolchain package.

This allows the package to be run as a module:
python -m lc3_toolchain
"""

from .cli.commands import main

if __name__ == '__main__':
    main()
