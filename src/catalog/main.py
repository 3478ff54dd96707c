"""Main entry point for the catalog CLI.

Usage:
    python -m catalog.main --help
    catalog --help  # If installed via pip/uv
"""

from catalog.cli import main

if __name__ == "__main__":
    main()
