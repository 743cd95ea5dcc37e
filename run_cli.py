#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
IE Translation Tools CLI Launcher
Cross-platform command line interface
"""

import sys
from pathlib import Path

# Ensure stdout uses UTF-8 (HTML texts and file names are not ASCII)
if hasattr(sys.stdout, "reconfigure"):
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")
if hasattr(sys.stderr, "reconfigure"):
    sys.stderr.reconfigure(encoding="utf-8", errors="replace")


def setup_environment() -> None:
    """Setup environment variables and paths."""
    # Add project root to Python path
    project_root = Path(__file__).parent
    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))


def main() -> int:
    setup_environment()

    try:
        from ietools.cli_main import main as cli_main
    except ImportError as e:
        print(f"Error: Could not import CLI module: {e}")
        print("Ensure you are running from the project root and all dependencies are installed.")
        return 1
    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
