"""
Module execution entry point.

Allows running with: python -m jurypack_cli
"""

import sys
from jurypack_cli.main import main

if __name__ == "__main__":
    sys.exit(main())
