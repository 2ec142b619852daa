#!/usr/bin/env python3
"""
Nestor CLI entry script.

Runs the same Typer app as the installed ``nestor`` command, for use from a
source checkout.

Usage:
    python cli.py --help
    python cli.py server dashboard
    python cli.py job console my-job
"""

import sys
from pathlib import Path

# Add project root to path for absolute imports
project_root = Path(__file__).resolve().parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from nestor.cli.main import app

if __name__ == "__main__":
    app()
