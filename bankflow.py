#!/usr/bin/env python3
"""
bankflow: duplicate workflow detection for banking tasks.

Entry point. Adds the project directory to sys.path so the bankflowai
package resolves correctly whether run directly or via an alias.

Usage:
  python bankflow.py dashboard
  python bankflow.py duplicates
  python bankflow.py report --start 2026-10-01 --end 2026-10-07
"""
import sys
from pathlib import Path

# Ensure the project root is on the path
sys.path.insert(0, str(Path(__file__).parent))

from bankflowai.cli.app import app

if __name__ == "__main__":
    app()
