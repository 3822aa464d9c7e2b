"""
Module execution entry point.

Allows running with: python -m sumtree_cli
"""

import sys
from sumtree_cli.main import main

if __name__ == "__main__":
    sys.exit(main())
