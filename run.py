#!/usr/bin/env python3
"""
run.py - Main entry point for the Connect Four engine

Runs the command-line interface from a source checkout without installing
the package:

    python run.py play --difficulty search
    python run.py history --list
"""

import os
import sys

# Add the project root to Python path to ensure imports work
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from connect_four.interfaces.cli import main  # noqa: E402

if __name__ == "__main__":
    sys.exit(main())
