"""
Main entry point for the tilesr package.

Allows running: python -m tilesr <command>
"""

import sys
from tilesr.cli import main

if __name__ == "__main__":
    sys.exit(main())
