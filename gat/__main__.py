"""Entry point for running gat as a module.

This module allows gat to be run as a Python module using the -m flag:
    python -m gat

It serves as the main entry point for the gat command-line interface.
"""

from . import cli

if __name__ == "__main__":
    cli._main()
