"""
Entry point for running the package as a module: python -m poligap
"""

import sys
from poligap.cli import main

if __name__ == "__main__":
    sys.exit(main())
