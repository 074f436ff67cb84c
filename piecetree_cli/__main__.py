"""
Module execution entry point.

Allows running with: python -m piecetree_cli
"""

import sys
from piecetree_cli.main import main

if __name__ == "__main__":
    sys.exit(main())
